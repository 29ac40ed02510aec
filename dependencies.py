"""
FastAPI dependency providers.

All injectable dependencies are defined here as plain functions used with
FastAPI's Depends() system. Long-lived objects (settings, gate, notifier)
are created once in the app lifespan and stored on app.state.

require_human_verification() builds a dependency that gates any endpoint:
it extracts the tokens from the request, asks the gate, and raises
HumanVerificationError when the request is denied.
"""

from __future__ import annotations

from typing import Any, Awaitable, Callable, Mapping, Optional

from fastapi import Depends, Request

from config import AppSettings
from errors import HumanVerificationError
from infrastructure.webhook.protocol import ContactNotifier
from schemas.models.verification import (
    DEFAULT_EXPECTED_ACTION,
    VerificationOutcome,
    VerificationPolicy,
    VerificationRequestContext,
)
from services.human_verification import HumanVerificationGate
from shared.ip_utils import first_non_empty, get_client_ip

PRIVATE_TOKEN_HEADER = "Private-Token"


def get_settings(request: Request) -> AppSettings:
    """Return the AppSettings instance stored on app.state."""
    return request.app.state.settings


def get_verification_gate(request: Request) -> HumanVerificationGate:
    return request.app.state.verification_gate


def get_contact_notifier(request: Request) -> ContactNotifier:
    return request.app.state.contact_notifier


def build_verification_context(
    request: Request, body: Optional[Mapping[str, Any]] = None
) -> VerificationRequestContext:
    """Collect the gate's input from headers, connection and JSON body."""
    body = body or {}
    return VerificationRequestContext(
        private_access_token=first_non_empty(
            request.headers.get(PRIVATE_TOKEN_HEADER),
            body.get("privateAccessToken"),
            body.get("privateToken"),
        ),
        recaptcha_token=first_non_empty(body.get("recaptchaToken")),
        remote_address=get_client_ip(request),
        user_agent=request.headers.get("User-Agent"),
        request_path=request.url.path,
    )


def raise_for_denial(outcome: VerificationOutcome) -> VerificationOutcome:
    if not outcome.admitted:
        raise HumanVerificationError(
            outcome.message or "Human verification failed",
            status_code=outcome.http_status,
            error_code=outcome.error_code,
            details=outcome.details,
        )
    return outcome


async def _json_body(request: Request) -> Mapping[str, Any]:
    try:
        body = await request.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


def require_human_verification(
    action: str = DEFAULT_EXPECTED_ACTION,
    *,
    required: bool = True,
    minimum_score: Optional[float] = None,
) -> Callable[..., Awaitable[VerificationOutcome]]:
    """Dependency factory gating an endpoint behind human verification.

    Example:
        >>> @router.post("/orders")
        ... async def place_order(
        ...     _: VerificationOutcome = Depends(require_human_verification("checkout")),
        ... ): ...
    """
    policy = VerificationPolicy(
        expected_action=action, required=required, minimum_score=minimum_score
    )

    async def _dependency(
        request: Request,
        gate: HumanVerificationGate = Depends(get_verification_gate),
    ) -> VerificationOutcome:
        context = build_verification_context(request, await _json_body(request))
        return raise_for_denial(await gate.evaluate(context, policy))

    return _dependency
