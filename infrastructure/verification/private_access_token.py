"""Private Access Token verification against a remote token relay.

The relay is a black box: we POST the token together with our issuer/key
identity and read back a JSON verdict. Every failure is returned as a
PatVerdict; only unexpected programming errors propagate.
"""

from __future__ import annotations

from typing import Any, Optional

import httpx

from config import PrivateAccessTokenSettings
from infrastructure.http_client import HttpClient
from infrastructure.verification.protocol import (
    PatNotConfigured,
    PatResult,
    PatVerdict,
)
from shared.logging import get_logger

log = get_logger(__name__)

# Relay responses have used several field names for the same verdict; the
# first one present decides, ``status == "ok"`` is the last resort.
ACCEPTANCE_FIELDS = ("isValid", "valid", "success")


def is_token_accepted(data: Any) -> bool:
    if not isinstance(data, dict):
        return False
    for field in ACCEPTANCE_FIELDS:
        if data.get(field) is not None:
            return bool(data[field])
    return data.get("status") == "ok"


def _response_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text or None


class RelayPrivateAccessTokenVerifier:
    def __init__(
        self, settings: PrivateAccessTokenSettings, http_client: HttpClient
    ) -> None:
        self._settings = settings
        self._http = http_client

    @property
    def is_configured(self) -> bool:
        return self._settings.is_configured

    def _build_body(self, token: str, remote_ip: Optional[str]) -> dict[str, str]:
        cfg = self._settings
        body = {
            "token": token,
            "issuer": cfg.pat_issuer_id,
            "keyId": cfg.pat_key_id,
        }
        if cfg.pat_team_id:
            body["teamId"] = cfg.pat_team_id
        if cfg.pat_origin:
            body["origin"] = cfg.pat_origin
        if remote_ip:
            body["clientIp"] = remote_ip
        return body

    async def verify(
        self,
        token: str,
        remote_ip: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> PatResult:
        if not isinstance(token, str) or not token.strip():
            return PatVerdict(
                success=False,
                status_code=400,
                code="PAT_TOKEN_MISSING",
                message="Private Access Token value is required",
            )

        if not self._settings.is_configured:
            return PatNotConfigured()

        headers = {"User-Agent": user_agent} if user_agent else {}

        try:
            response = await self._http.post(
                self._settings.pat_verification_url,
                json=self._build_body(token.strip(), remote_ip),
                headers=headers,
            )
        except httpx.TimeoutException:
            log.warning(
                "pat_request_timeout", timeout_ms=self._settings.pat_http_timeout_ms
            )
            return PatVerdict(
                success=False,
                status_code=504,
                code="PAT_TIMEOUT",
                message="Private Access Token verification timed out",
            )
        except httpx.HTTPError as e:
            log.warning(
                "pat_request_failed", error=str(e), error_type=type(e).__name__
            )
            return PatVerdict(
                success=False,
                status_code=502,
                code="PAT_REQUEST_FAILED",
                message="Unable to verify Private Access Token",
                details={"message": str(e)} if str(e) else None,
            )

        data = _response_body(response)

        if not response.is_success:
            return PatVerdict(
                success=False,
                status_code=response.status_code or 400,
                code="PAT_HTTP_ERROR",
                message="Private Access Token verification failed",
                details=data,
            )

        if not is_token_accepted(data):
            return PatVerdict(
                success=False,
                status_code=400,
                code="PAT_REJECTED",
                message="The relay rejected the Private Access Token",
                details=data,
            )

        log.debug("pat_verified", status_code=response.status_code)
        return PatVerdict(
            success=True,
            status_code=response.status_code,
            data=data or {},
        )
