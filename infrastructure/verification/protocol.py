"""Verifier protocols and result types — the gate depends on these, not the concrete implementations."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Protocol, Union

PAT_NOT_CONFIGURED = "PAT_NOT_CONFIGURED"


@dataclass(frozen=True)
class PatVerdict:
    """A Private Access Token verification that actually ran (or was refused locally)."""

    success: bool
    status_code: int
    code: Optional[str] = None
    message: Optional[str] = None
    data: Any = None
    details: Any = None


@dataclass(frozen=True)
class PatNotConfigured:
    """No issuer/key is configured; the token was not checked at all."""

    status_code: int = 503
    code: str = PAT_NOT_CONFIGURED
    message: str = "Private Access Token verification is not configured"


PatResult = Union[PatVerdict, PatNotConfigured]


@dataclass(frozen=True)
class ScoreAssessment:
    """What the score service said about an accepted token."""

    action: Optional[str]
    score: float
    hostname: Optional[str] = None
    challenge_ts: Optional[str] = None


class PrivateAccessTokenProvider(Protocol):
    @property
    def is_configured(self) -> bool: ...

    async def verify(
        self,
        token: str,
        remote_ip: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> PatResult: ...


class ScoreVerificationProvider(Protocol):
    """Raises errors.RecaptchaVerificationError when the token is not accepted."""

    @property
    def is_configured(self) -> bool: ...

    async def verify(
        self,
        token: str,
        expected_action: str,
        min_score: float,
        remote_ip: Optional[str] = None,
    ) -> ScoreAssessment: ...
