"""reCAPTCHA v3 (score based) implementation of ScoreVerificationProvider.

Tokens are checked against the siteverify endpoint. A token passes only
when the service accepts it, the action it was minted for matches the
expected action exactly, and its score is at least the minimum.

Failures raise RecaptchaVerificationError carrying the HTTP status the
caller should answer with; transport failures use the same mapping as the
Private Access Token verifier (timeout 504, upstream status, otherwise 502).
"""

from __future__ import annotations

import math
from typing import Any, Optional

import httpx

from config import RecaptchaSettings
from errors import RecaptchaVerificationError
from infrastructure.http_client import HttpClient
from infrastructure.verification.protocol import ScoreAssessment
from shared.logging import get_logger

log = get_logger(__name__)


def _score_of(data: dict[str, Any]) -> float:
    try:
        score = float(data.get("score") or 0.0)
    except (TypeError, ValueError):
        return 0.0
    return score if math.isfinite(score) else 0.0


class RecaptchaVerifier:
    def __init__(self, settings: RecaptchaSettings, http_client: HttpClient) -> None:
        self._settings = settings
        self._http = http_client

    @property
    def is_configured(self) -> bool:
        return self._settings.is_configured

    async def _siteverify(self, token: str, remote_ip: Optional[str]) -> dict[str, Any]:
        payload = {"secret": self._settings.recaptcha_secret_key, "response": token}
        if remote_ip:
            payload["remoteip"] = remote_ip

        try:
            response = await self._http.post(
                self._settings.recaptcha_verify_url, data=payload
            )
        except httpx.TimeoutException as e:
            raise RecaptchaVerificationError(
                "reCAPTCHA verification timed out",
                status_code=504,
                error_code="RECAPTCHA_TIMEOUT",
            ) from e
        except httpx.HTTPError as e:
            raise RecaptchaVerificationError(
                "Unable to verify reCAPTCHA token",
                status_code=502,
                error_code="RECAPTCHA_REQUEST_FAILED",
                details={"message": str(e)} if str(e) else None,
            ) from e

        if not response.is_success:
            raise RecaptchaVerificationError(
                "reCAPTCHA verification failed",
                status_code=response.status_code,
                error_code="RECAPTCHA_HTTP_ERROR",
                details=response.text[:200] or None,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise RecaptchaVerificationError(
                "reCAPTCHA service returned an unreadable response",
                status_code=502,
                error_code="RECAPTCHA_REQUEST_FAILED",
            ) from e
        if not isinstance(data, dict):
            raise RecaptchaVerificationError(
                "reCAPTCHA service returned an unreadable response",
                status_code=502,
                error_code="RECAPTCHA_REQUEST_FAILED",
            )
        return data

    async def verify(
        self,
        token: str,
        expected_action: str,
        min_score: float,
        remote_ip: Optional[str] = None,
    ) -> ScoreAssessment:
        if not self._settings.is_configured:
            raise RecaptchaVerificationError(
                "reCAPTCHA verification is not configured",
                status_code=503,
                error_code="RECAPTCHA_NOT_CONFIGURED",
            )
        if not token or not token.strip():
            raise RecaptchaVerificationError(
                "reCAPTCHA token is required", error_code="RECAPTCHA_TOKEN_MISSING"
            )

        data = await self._siteverify(token.strip(), remote_ip)

        if not data.get("success"):
            raise RecaptchaVerificationError(
                "reCAPTCHA token was rejected",
                details={"errorCodes": data.get("error-codes", [])},
            )

        assessment = ScoreAssessment(
            action=data.get("action"),
            score=_score_of(data),
            hostname=data.get("hostname"),
            challenge_ts=data.get("challenge_ts"),
        )

        if assessment.action != expected_action:
            raise RecaptchaVerificationError(
                "reCAPTCHA action mismatch",
                details={
                    "reason": "action_mismatch",
                    "expectedAction": expected_action,
                    "action": assessment.action,
                },
            )
        if assessment.score < min_score:
            raise RecaptchaVerificationError(
                "reCAPTCHA score below threshold",
                details={
                    "reason": "score_too_low",
                    "score": assessment.score,
                    "minScore": min_score,
                },
            )

        log.debug(
            "recaptcha_verified", action=assessment.action, score=assessment.score
        )
        return assessment
