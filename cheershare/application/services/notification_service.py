import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

from ..ports.sms_sender import SmsSender
from ...exceptions import DispatchError
from ...utils import hash_phone_number

logger = logging.getLogger(__name__)

OTP_MESSAGE_TEMPLATE = "Thank you for choosing Cheershare! Your one-time password is {otp}."


@dataclass
class NotificationService:
    sender: SmsSender
    max_attempts: int = 3
    retry_delay: float = 2.0
    sleep: Callable[[float], None] = time.sleep

    def send_otp(self, phone_number: str, otp: str) -> str:
        """Deliver ``otp`` by SMS, retrying with a fixed delay.

        Raises DispatchError once every attempt has failed.
        """
        body = OTP_MESSAGE_TEMPLATE.format(otp=otp)
        phone_hash = hash_phone_number(phone_number)
        last_error: Optional[DispatchError] = None

        for attempt in range(1, self.max_attempts + 1):
            try:
                sid = self.sender.send(phone_number, body)
                logger.info(f"OTP sent successfully to {phone_hash[:12]}, provider SID: {sid}")
                return sid
            except DispatchError as e:
                last_error = e
                logger.warning(f"Attempt {attempt}: failed to send OTP to {phone_hash[:12]}: {e.__cause__ or e}")
                if attempt < self.max_attempts:
                    self.sleep(self.retry_delay)

        raise DispatchError(f"All {self.max_attempts} attempts to send OTP failed") from last_error
