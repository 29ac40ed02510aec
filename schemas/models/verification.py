"""
Human verification models.

  VerificationRequestContext → what one inbound request presented
  VerificationPolicy         → what the protected endpoint demands
  VerificationOutcome        → the gate's admit/deny decision

All three are frozen: a context is built per request, handed to the gate
unchanged and discarded once the outcome is produced.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_EXPECTED_ACTION = "general"


class VerificationMethod(str, Enum):
    BYPASS = "bypass"
    PRIVATE_ACCESS_TOKEN = "privateAccessToken"
    RECAPTCHA = "recaptcha"
    NONE = "none"


class VerificationRequestContext(BaseModel):
    """Already-extracted request data the gate decides on.

    Tokens are trimmed; blank strings are treated as absent.
    """

    model_config = ConfigDict(frozen=True)

    private_access_token: Optional[str] = None
    recaptcha_token: Optional[str] = None
    remote_address: Optional[str] = None
    user_agent: Optional[str] = None
    request_path: Optional[str] = None

    @field_validator("private_access_token", "recaptcha_token", mode="before")
    @classmethod
    def _blank_token_is_absent(cls, v: Any) -> Optional[str]:
        if v is None:
            return None
        if not isinstance(v, str):
            return v
        stripped = v.strip()
        return stripped or None


class VerificationPolicy(BaseModel):
    """Per-endpoint verification requirements.

    ``minimum_score`` of None means "use the configured default"
    (RECAPTCHA_MIN_SCORE, else 0.5).
    """

    model_config = ConfigDict(frozen=True)

    expected_action: str = DEFAULT_EXPECTED_ACTION
    minimum_score: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    required: bool = True


class VerificationOutcome(BaseModel):
    model_config = ConfigDict(frozen=True)

    admitted: bool
    method: VerificationMethod
    http_status: int = 200
    error_code: Optional[str] = None
    message: Optional[str] = None
    details: Optional[Any] = None

    @classmethod
    def admit(cls, method: VerificationMethod) -> "VerificationOutcome":
        return cls(admitted=True, method=method)

    @classmethod
    def deny(
        cls,
        method: VerificationMethod,
        *,
        http_status: int,
        error_code: str,
        message: str,
        details: Optional[Any] = None,
    ) -> "VerificationOutcome":
        return cls(
            admitted=False,
            method=method,
            http_status=http_status,
            error_code=error_code,
            message=message,
            details=details,
        )
