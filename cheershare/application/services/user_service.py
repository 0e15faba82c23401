import logging
from dataclasses import dataclass
from typing import Optional

from ..ports.user_repo import UserRepository, UserDto
from ...exceptions import ConflictError, StorageError

logger = logging.getLogger(__name__)


@dataclass
class UserService:
    repo: UserRepository

    def get_by_phone(self, phone_number: str) -> Optional[UserDto]:
        return self.repo.get_by_phone(phone_number)

    def get_or_create(self, phone_number: str, name: str) -> UserDto:
        user = self.repo.get_by_phone(phone_number)
        if user:
            return user

        try:
            return self.repo.insert(name=name, phone_number=phone_number)
        except ConflictError as e:
            # Lost a race with a concurrent signup for the same number; the
            # unique constraint decided, so read back the winner.
            logger.info("Concurrent signup detected, re-reading user")
            user = self.repo.get_by_phone(phone_number)
            if user is None:
                raise StorageError("Failed to register user") from e
            return user
