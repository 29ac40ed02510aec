"""
Contact form endpoint.

POST /api/contact — validates the form, runs human verification with the
"contact" action, then hands the message to the ContactNotifier.
Verification is optional unless CONTACT_REQUIRE_HUMAN_VERIFICATION is set.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from config import AppSettings
from dependencies import (
    build_verification_context,
    get_contact_notifier,
    get_settings,
    get_verification_gate,
    raise_for_denial,
)
from errors import ContactDeliveryError
from infrastructure.webhook.protocol import ContactNotifier
from schemas.dto.requests.contact import ContactRequest
from schemas.dto.responses.common import ErrorResponse
from schemas.dto.responses.verification import (
    ContactResponse,
    HumanVerificationErrorResponse,
)
from schemas.models.verification import VerificationPolicy
from services.human_verification import HumanVerificationGate
from shared.logging import get_logger

router = APIRouter(prefix="/api", tags=["contact"])
log = get_logger(__name__)

CONTACT_ACTION = "contact"


@router.post(
    "/contact",
    response_model=ContactResponse,
    responses={
        400: {"model": HumanVerificationErrorResponse},
        500: {"model": ErrorResponse},
        502: {"model": HumanVerificationErrorResponse},
        504: {"model": HumanVerificationErrorResponse},
    },
)
async def submit_contact(
    payload: ContactRequest,
    request: Request,
    settings: AppSettings = Depends(get_settings),
    gate: HumanVerificationGate = Depends(get_verification_gate),
    notifier: ContactNotifier = Depends(get_contact_notifier),
) -> ContactResponse:
    policy = VerificationPolicy(
        expected_action=CONTACT_ACTION,
        required=settings.contact.contact_require_human_verification,
    )
    context = build_verification_context(
        request,
        {
            "privateAccessToken": payload.private_access_token,
            "recaptchaToken": payload.recaptcha_token,
        },
    )
    raise_for_denial(await gate.evaluate(context, policy))

    sent = await notifier.send_contact_message(
        payload.name, payload.email, payload.message
    )
    if not sent:
        raise ContactDeliveryError("Failed to send the message")

    log.info(
        "contact_message_sent",
        email_domain=payload.email.split("@")[1] if "@" in payload.email else "unknown",
        message_length=len(payload.message),
    )
    return ContactResponse(message="Message sent successfully")
