from typing import Protocol, Optional
from dataclasses import dataclass
from datetime import datetime, timezone


@dataclass(frozen=True)
class UserDto:
    id: int
    created_at: datetime
    name: str
    phone_number: str
    version: int

    @property
    def is_anonymous(self) -> bool:
        return self is ANONYMOUS_USER


# Identity of a request that carried no Authorization header. Compared by
# identity, never by value.
ANONYMOUS_USER = UserDto(id=0, created_at=datetime.min.replace(tzinfo=timezone.utc), name="", phone_number="", version=0)


class UserRepository(Protocol):
    def get_by_phone(self, phone_number: str) -> Optional[UserDto]:
        ...

    def insert(self, name: str, phone_number: str) -> UserDto:
        """Raises ConflictError when the phone number is already registered."""
        ...
