"""
Health check endpoint.

GET /health — reports whether human verification can admit requests.
Rules:
- bypass, PAT or reCAPTCHA available → "healthy" (200)
- nothing configured → "degraded" (200); required verification will deny
  every request until a verifier is configured.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from config import AppSettings
from dependencies import get_settings, get_verification_gate
from schemas.dto.responses.common import HealthResponse
from services.human_verification import HumanVerificationGate

router = APIRouter(tags=["health"])


def _configured(enabled: bool) -> str:
    return "ok" if enabled else "not_configured"


@router.get("/health", response_model=HealthResponse)
async def health_check(
    settings: AppSettings = Depends(get_settings),
    gate: HumanVerificationGate = Depends(get_verification_gate),
) -> JSONResponse:
    checks: dict[str, str] = {
        "bypass": "enabled" if settings.verification.bypass_enabled else "disabled",
        "private_access_token": _configured(settings.pat.is_configured),
        "recaptcha": _configured(settings.recaptcha.is_configured),
        "contact_webhook": _configured(bool(settings.contact.contact_webhook)),
    }
    overall = "healthy" if gate.is_available else "degraded"

    return JSONResponse(
        status_code=200,
        content={"status": overall, "checks": checks},
    )
