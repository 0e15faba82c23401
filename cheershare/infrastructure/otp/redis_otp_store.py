import hmac
import logging

import redis

from ...application.ports.otp_store import OTPStore
from ...exceptions import OTPExpiredOrMissingError, OTPMismatchError, StorageError

logger = logging.getLogger(__name__)


class RedisOTPStore(OTPStore):
    """Pending signups as Redis hashes ``{name, otp}`` keyed by phone number.

    A record is removed by a successful ``claim`` or by key expiry.
    """

    def __init__(self, client: redis.Redis, ttl_seconds: int = 300, prefix: str = "otp:") -> None:
        self.client = client
        self.ttl_seconds = ttl_seconds
        self.prefix = prefix

    def _key(self, phone_number: str) -> str:
        return f"{self.prefix}{phone_number}"

    def put(self, phone_number: str, name: str, otp: str) -> None:
        key = self._key(phone_number)
        try:
            self.client.hset(key, mapping={"name": name, "otp": otp})
        except redis.RedisError as e:
            raise StorageError("Failed to store OTP") from e
        # Separate call: if it fails the hash above stays without a TTL.
        try:
            self.client.expire(key, self.ttl_seconds)
        except redis.RedisError as e:
            raise StorageError("Failed to store OTP") from e

    def verify(self, phone_number: str, otp: str) -> str:
        try:
            record = self.client.hgetall(self._key(phone_number))
        except redis.RedisError as e:
            logger.error(f"Error reading OTP from Redis: {e}")
            raise OTPExpiredOrMissingError() from e

        if not record:
            raise OTPExpiredOrMissingError()

        stored_otp = record.get("otp", "")
        if not hmac.compare_digest(stored_otp.encode(), (otp or "").encode()):
            raise OTPMismatchError()

        return record.get("name", "")

    def claim(self, phone_number: str, otp: str) -> str:
        name = self.verify(phone_number, otp)
        # Only the caller whose DEL removed the key gets through.
        try:
            removed = self.client.delete(self._key(phone_number))
        except redis.RedisError as e:
            raise StorageError("Failed to consume OTP") from e
        if not removed:
            raise OTPExpiredOrMissingError()
        return name
