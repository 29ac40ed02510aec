"""
Human verification gate.

Decides, for one inbound request, whether it is admitted. Strategies are
tried in a fixed order, in a single pass, with no retries:

1. bypass (test / development deployments)
2. Private Access Token, when the client sent one
3. reCAPTCHA score token, or the optional / missing-token rules

A PAT that is present but rejected is a hard deny; the request is never
re-tried through reCAPTCHA. Only a PAT verifier that is not configured
falls through.

Each decision emits exactly one log event and one counter
(``human_verification.<method>.<outcome>``) through a VerificationObserver.
Observer failures are logged and never change the outcome.
"""

from __future__ import annotations

from typing import Any, Optional, Protocol

from config import DEFAULT_RECAPTCHA_MIN_SCORE, HumanVerificationSettings
from errors import RecaptchaVerificationError
from infrastructure.verification.protocol import (
    PatNotConfigured,
    PatVerdict,
    PrivateAccessTokenProvider,
    ScoreVerificationProvider,
)
from schemas.models.verification import (
    VerificationMethod,
    VerificationOutcome,
    VerificationPolicy,
    VerificationRequestContext,
)
from shared.logging import get_logger, hash_ip
from shared.metrics import CounterRegistry

log = get_logger(__name__)

MISSING_HUMAN_TOKEN = "MISSING_HUMAN_TOKEN"
RECAPTCHA_FAILED = "RECAPTCHA_FAILED"
COUNTER_PREFIX = "human_verification"


class VerificationObserver(Protocol):
    def log_event(self, level: str, message: str, meta: dict[str, Any]) -> None: ...

    def increment_counter(self, name: str) -> None: ...


class StructlogVerificationObserver:
    """Observer writing to structlog and a CounterRegistry."""

    def __init__(self, counters: Optional[CounterRegistry] = None) -> None:
        self.counters = counters if counters is not None else CounterRegistry()
        self._log = get_logger("human_verification")

    def log_event(self, level: str, message: str, meta: dict[str, Any]) -> None:
        getattr(self._log, level)(message, **meta)

    def increment_counter(self, name: str) -> None:
        self.counters.increment(name)


class HumanVerificationGate:
    def __init__(
        self,
        settings: HumanVerificationSettings,
        pat_verifier: PrivateAccessTokenProvider,
        score_verifier: ScoreVerificationProvider,
        observer: Optional[VerificationObserver] = None,
        default_minimum_score: float = DEFAULT_RECAPTCHA_MIN_SCORE,
    ) -> None:
        self._settings = settings
        self._pat = pat_verifier
        self._score = score_verifier
        self._observer = observer if observer is not None else StructlogVerificationObserver()
        self._default_minimum_score = default_minimum_score

    @property
    def is_available(self) -> bool:
        """True if at least one way of admitting a required request exists."""
        return (
            self._settings.bypass_enabled
            or self._pat.is_configured
            or self._score.is_configured
        )

    async def evaluate(
        self,
        context: VerificationRequestContext,
        policy: Optional[VerificationPolicy] = None,
    ) -> VerificationOutcome:
        if policy is None:
            policy = VerificationPolicy()

        if self._settings.bypass_enabled:
            self._emit(
                "info",
                "human_verification_bypassed",
                "bypass.success",
                context,
                method=VerificationMethod.BYPASS.value,
            )
            return VerificationOutcome.admit(VerificationMethod.BYPASS)

        if context.private_access_token is not None:
            outcome = await self._evaluate_private_access_token(context)
            if outcome is not None:
                return outcome

        return await self._evaluate_recaptcha(context, policy)

    async def _evaluate_private_access_token(
        self, context: VerificationRequestContext
    ) -> Optional[VerificationOutcome]:
        """Return the PAT decision, or None to fall through to reCAPTCHA."""
        method = VerificationMethod.PRIVATE_ACCESS_TOKEN
        try:
            result = await self._pat.verify(
                context.private_access_token,
                remote_ip=context.remote_address,
                user_agent=context.user_agent,
            )
        except Exception as e:
            result = PatVerdict(
                success=False,
                status_code=502,
                code="PAT_REQUEST_FAILED",
                message="Unable to verify Private Access Token",
                details={"message": str(e), "error_type": type(e).__name__},
            )

        if isinstance(result, PatNotConfigured):
            self._emit(
                "warning",
                "pat_verification_skipped",
                "pat.unavailable",
                context,
                method=method.value,
                reason="not_configured",
            )
            return None

        if result.success:
            self._emit(
                "info",
                "human_verification_succeeded",
                "pat.success",
                context,
                method=method.value,
            )
            return VerificationOutcome.admit(method)

        status = result.status_code or 400
        code = result.code or "PAT_VERIFICATION_FAILED"
        self._emit(
            "error" if status >= 500 else "warning",
            "human_verification_failed",
            "pat.failure",
            context,
            method=method.value,
            status_code=status,
            error_code=code,
        )
        return VerificationOutcome.deny(
            method,
            http_status=status,
            error_code=code,
            message="Human verification failed (Private Access Token)",
            details=result.details,
        )

    async def _evaluate_recaptcha(
        self, context: VerificationRequestContext, policy: VerificationPolicy
    ) -> VerificationOutcome:
        method = VerificationMethod.RECAPTCHA
        token = context.recaptcha_token

        if token is None:
            if not policy.required:
                self._emit(
                    "info",
                    "human_verification_skipped",
                    "optional.skip",
                    context,
                    method=VerificationMethod.NONE.value,
                )
                return VerificationOutcome.admit(VerificationMethod.NONE)

            self._emit(
                "warning",
                "human_verification_token_missing",
                "recaptcha.missing",
                context,
                method=method.value,
            )
            return VerificationOutcome.deny(
                VerificationMethod.NONE,
                http_status=400,
                error_code=MISSING_HUMAN_TOKEN,
                message="Human verification token is required",
            )

        min_score = (
            policy.minimum_score
            if policy.minimum_score is not None
            else self._default_minimum_score
        )

        try:
            await self._score.verify(
                token,
                expected_action=policy.expected_action,
                min_score=min_score,
                remote_ip=context.remote_address,
            )
        except RecaptchaVerificationError as e:
            return self._recaptcha_denied(
                context, policy, e.status_code or 400, e.error_code, e.details
            )
        except Exception as e:
            return self._recaptcha_denied(
                context,
                policy,
                400,
                RECAPTCHA_FAILED,
                None,
                error_type=type(e).__name__,
            )

        self._emit(
            "info",
            "human_verification_succeeded",
            "recaptcha.success",
            context,
            method=method.value,
            action=policy.expected_action,
        )
        return VerificationOutcome.admit(method)

    def _recaptcha_denied(
        self,
        context: VerificationRequestContext,
        policy: VerificationPolicy,
        status: int,
        code: Optional[str],
        details: Any,
        **meta: Any,
    ) -> VerificationOutcome:
        code = code or RECAPTCHA_FAILED
        self._emit(
            "error" if status >= 500 else "warning",
            "human_verification_failed",
            "recaptcha.failure",
            context,
            method=VerificationMethod.RECAPTCHA.value,
            action=policy.expected_action,
            status_code=status,
            error_code=code,
            **meta,
        )
        return VerificationOutcome.deny(
            VerificationMethod.RECAPTCHA,
            http_status=status,
            error_code=code,
            message="Human verification failed (reCAPTCHA)",
            details=details,
        )

    def _emit(
        self,
        level: str,
        event: str,
        counter: str,
        context: VerificationRequestContext,
        **meta: Any,
    ) -> None:
        meta["path"] = context.request_path
        if context.remote_address:
            meta["client_ip"] = hash_ip(context.remote_address)
        try:
            self._observer.log_event(level, event, meta)
        except Exception as e:
            log.warning(
                "verification_observer_log_failed",
                error=str(e),
                error_type=type(e).__name__,
            )
        try:
            self._observer.increment_counter(f"{COUNTER_PREFIX}.{counter}")
        except Exception as e:
            log.warning(
                "verification_observer_counter_failed",
                error=str(e),
                error_type=type(e).__name__,
            )
