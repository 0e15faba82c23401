from typing import Protocol


class SmsSender(Protocol):
    def send(self, phone_number: str, body: str) -> str:
        """Send one message and return the provider's message id."""
        ...
