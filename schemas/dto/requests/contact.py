"""
Request DTOs for human-verified form endpoints.

ContactRequest — POST /api/contact
"""

from __future__ import annotations

from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class HumanVerificationFields(BaseModel):
    """Token fields any gated endpoint accepts in its JSON body.

    The ``Private-Token`` header takes precedence over the body fields.
    """

    model_config = ConfigDict(populate_by_name=True)

    recaptcha_token: Optional[str] = Field(default=None, alias="recaptchaToken")
    private_access_token: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices(
            "privateAccessToken", "privateToken", "private_access_token"
        ),
    )


class ContactRequest(HumanVerificationFields):
    """Request body for POST /api/contact."""

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    name: str = Field(min_length=1, max_length=200)
    email: str = Field(min_length=1, max_length=320)
    message: str = Field(min_length=1, max_length=5000)
