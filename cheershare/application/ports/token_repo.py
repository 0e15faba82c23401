from typing import Protocol
from dataclasses import dataclass, field
from datetime import datetime

from .user_repo import UserDto


@dataclass
class AuthToken:
    plaintext: str
    hash: bytes = field(repr=False)
    user_id: int
    expiry: datetime
    scope: str


class TokenRepository(Protocol):
    def insert(self, token: AuthToken) -> None:
        ...

    def get_user_for_token(self, token_hash: bytes, scope: str, now: datetime) -> UserDto:
        """Raises NotFoundError when no unexpired token matches."""
        ...

    def delete_all_for_user(self, scope: str, user_id: int) -> int:
        ...
