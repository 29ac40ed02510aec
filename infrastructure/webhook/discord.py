"""Discord webhook implementation of ContactNotifier.

Contact form submissions that passed human verification are posted as a
single embed. The webhook URL is injected from ContactSettings.
"""

from datetime import datetime, timezone
from typing import Any

from infrastructure.http_client import HttpClient
from shared.logging import get_logger

log = get_logger(__name__)

# Discord rejects embed field values longer than 1024 characters
_FIELD_LIMIT = 1000


def _field(name: str, value: str) -> dict[str, Any]:
    text = value.strip()
    if len(text) > _FIELD_LIMIT:
        text = text[:_FIELD_LIMIT] + "…"
    return {"name": name, "value": f"```{text}```"}


def build_contact_embed(name: str, email: str, message: str) -> dict[str, Any]:
    return {
        "embeds": [
            {
                "title": "New Contact Message ✉️",
                "color": 9103397,
                "fields": [
                    _field("Name", name),
                    _field("Email", email),
                    _field("Message", message),
                ],
                "timestamp": datetime.now(timezone.utc).isoformat(),
            }
        ]
    }


class DiscordContactNotifier:
    def __init__(self, webhook_url: str, http_client: HttpClient) -> None:
        self._webhook_url = webhook_url
        self._http = http_client

    async def send_contact_message(self, name: str, email: str, message: str) -> bool:
        if not self._webhook_url:
            log.warning("contact_webhook_not_configured")
            return False
        try:
            response = await self._http.post(
                self._webhook_url, json=build_contact_embed(name, email, message)
            )
            if response.status_code in (200, 204):
                return True
            log.warning(
                "contact_webhook_failed",
                status_code=response.status_code,
                response_text=response.text[:200],
            )
            return False
        except Exception as e:
            log.error(
                "contact_webhook_request_failed",
                error=str(e),
                error_type=type(e).__name__,
            )
            return False
