import logging
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

from ..ports.audit_logger import AuditLogger
from ..ports.otp_store import OTPStore
from ..ports.user_repo import UserDto
from .notification_service import NotificationService
from .token_service import SCOPE_AUTHENTICATION, TokenService
from .user_service import UserService
from ...background import TaskTracker
from ...exceptions import AuthError, ValidationError
from ...utils import generate_otp

logger = logging.getLogger(__name__)


@dataclass
class AuthService:
    """Phone-number signup: issue an OTP, then trade a valid OTP for a token."""

    otp_store: OTPStore
    users: UserService
    tokens: TokenService
    notifier: NotificationService
    tasks: TaskTracker
    audit: Optional[AuditLogger] = None
    generate_code: Callable[[], str] = generate_otp

    def send_signup_otp(self, phone_number: Optional[str], name: Optional[str]) -> None:
        if not phone_number:
            raise ValidationError("Phone number is required")
        if not name:
            raise ValidationError("Name is required for OTP generation")

        otp = self.generate_code()
        self.otp_store.put(phone_number, name, otp)

        # Delivery is decoupled from the response; failures end up in the log.
        self.tasks.submit(self.notifier.send_otp, phone_number, otp)
        self._audit("otp_issued", phone_number)

    def verify_otp_and_issue(self, phone_number: Optional[str], otp: str) -> Tuple[UserDto, str]:
        if not phone_number:
            raise ValidationError("Phone number is required")

        try:
            name = self.otp_store.claim(phone_number, otp)
        except AuthError as e:
            logger.info(f"OTP verification failed: {type(e).__name__}")
            self._audit("otp_verify_failed", phone_number, success=False)
            raise

        user = self.users.get_or_create(phone_number, name)
        token = self.tokens.issue(user.id, scope=SCOPE_AUTHENTICATION)

        self._audit("otp_verified", phone_number, user_id=user.id)
        return user, token.plaintext

    def _audit(self, action: str, phone_number: str, user_id: Optional[int] = None, success: bool = True) -> None:
        if self.audit is not None:
            self.audit.log(action, phone_number, user_id=user_id, success=success)
