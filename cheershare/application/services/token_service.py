import base64
import hashlib
import logging
import secrets
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

from ..ports.token_repo import AuthToken, TokenRepository
from ..ports.user_repo import UserDto
from ...utils import utcnow

logger = logging.getLogger(__name__)

SCOPE_AUTHENTICATION = "authentication"

TOKEN_BYTES = 16
# Base32 of 16 bytes without padding.
TOKEN_LENGTH = 26


def hash_token(plaintext: str) -> bytes:
    return hashlib.sha256(plaintext.encode()).digest()


def generate_token(user_id: int, ttl: timedelta, scope: str) -> AuthToken:
    """Create a new token for ``user_id``.

    The plaintext is handed to the client exactly once; only ``hash`` is meant
    to be persisted.
    """
    random_bytes = secrets.token_bytes(TOKEN_BYTES)
    plaintext = base64.b32encode(random_bytes).decode("ascii").rstrip("=")
    return AuthToken(
        plaintext=plaintext,
        hash=hash_token(plaintext),
        user_id=user_id,
        expiry=utcnow() + ttl,
        scope=scope,
    )


@dataclass
class TokenService:
    repo: TokenRepository
    ttl: timedelta = timedelta(hours=48)

    def issue(self, user_id: int, ttl: Optional[timedelta] = None, scope: str = SCOPE_AUTHENTICATION) -> AuthToken:
        token = generate_token(user_id, self.ttl if ttl is None else ttl, scope)
        # StorageError propagates: a token that was not stored is never returned.
        self.repo.insert(token)
        logger.info(f"Issued {scope} token for user {user_id}, expires {token.expiry.isoformat()}")
        return token

    def verify(self, scope: str, plaintext: str) -> UserDto:
        # Wrong and expired tokens both surface as NotFoundError.
        return self.repo.get_user_for_token(hash_token(plaintext), scope, utcnow())

    def revoke_all_for_user(self, user_id: int, scope: str = SCOPE_AUTHENTICATION) -> int:
        removed = self.repo.delete_all_for_user(scope, user_id)
        logger.info(f"Revoked {removed} {scope} token(s) for user {user_id}")
        return removed
