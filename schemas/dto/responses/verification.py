"""
Response DTOs for human verification.

HumanVerificationErrorResponse — body of every gate denial
ContactResponse                — POST /api/contact success
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict


class HumanVerificationErrorResponse(BaseModel):
    """Rendered from HumanVerificationError.to_dict()."""

    model_config = ConfigDict(populate_by_name=True)

    message: str
    error: str
    details: Optional[Any] = None


class ContactResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str
