import logging
from typing import Optional

from twilio.base.exceptions import TwilioException
from twilio.http.http_client import TwilioHttpClient
from twilio.rest import Client

from ...application.ports.sms_sender import SmsSender
from ...core.config import Settings
from ...exceptions import DispatchError

logger = logging.getLogger(__name__)


class TwilioSmsSender(SmsSender):
    def __init__(
        self,
        account_sid: str,
        auth_token: str,
        from_number: str,
        country_code: str = "+91",
        timeout: int = 15,
        client: Optional[Client] = None,
    ):
        self.account_sid = account_sid
        self.auth_token = auth_token
        self.from_number = from_number
        self.country_code = country_code
        self.timeout = timeout
        self._client = client

    @classmethod
    def from_settings(cls, settings: Settings) -> "TwilioSmsSender":
        return cls(
            account_sid=settings.TWILIO_ACCOUNT_SID,
            auth_token=settings.TWILIO_AUTH_TOKEN,
            from_number=settings.TWILIO_PHONE_NUMBER,
            country_code=settings.SMS_COUNTRY_CODE,
            timeout=settings.SMS_TIMEOUT_SECONDS,
        )

    @property
    def client(self) -> Client:
        # Built on first use so a missing credential fails the send, not startup.
        if self._client is None:
            self._client = Client(
                self.account_sid,
                self.auth_token,
                http_client=TwilioHttpClient(timeout=self.timeout),
            )
        return self._client

    def recipient(self, phone_number: str) -> str:
        if phone_number.startswith("+"):
            return phone_number
        return f"{self.country_code}{phone_number}"

    def send(self, phone_number: str, body: str) -> str:
        if not self.from_number:
            raise DispatchError("Twilio sender phone number not configured")
        try:
            message = self.client.messages.create(
                body=body,
                from_=self.from_number,
                to=self.recipient(phone_number),
            )
        except (TwilioException, OSError) as e:
            raise DispatchError("Failed to send SMS via Twilio") from e
        return message.sid
