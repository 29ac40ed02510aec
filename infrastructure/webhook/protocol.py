"""ContactNotifier protocol — routes depend on this, not the concrete implementation."""

from typing import Protocol


class ContactNotifier(Protocol):
    async def send_contact_message(self, name: str, email: str, message: str) -> bool: ...
