from typing import Protocol


class OTPStore(Protocol):
    def put(self, phone_number: str, name: str, otp: str) -> None:
        ...

    def verify(self, phone_number: str, otp: str) -> str:
        """Return the display name stored with the OTP."""
        ...

    def claim(self, phone_number: str, otp: str) -> str:
        """Verify and remove the OTP; only one caller can claim a given record."""
        ...
