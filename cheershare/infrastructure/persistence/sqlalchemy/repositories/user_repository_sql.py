from typing import Optional
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, select

from .....db.models import User
from .....application.ports.user_repo import UserRepository, UserDto
from .....exceptions import ConflictError, StorageError
from .....utils import as_utc


def to_user_dto(user: User) -> UserDto:
    return UserDto(
        id=user.id,
        created_at=as_utc(user.created_at),
        name=user.name,
        phone_number=user.phone_number,
        version=user.version,
    )


class SqlUserRepository(UserRepository):
    def __init__(self, engine: Engine):
        self.engine = engine

    def get_by_phone(self, phone_number: str) -> Optional[UserDto]:
        try:
            with Session(self.engine) as session:
                user = session.exec(select(User).where(User.phone_number == phone_number)).first()
                return to_user_dto(user) if user else None
        except SQLAlchemyError as e:
            raise StorageError("Failed to register user") from e

    def insert(self, name: str, phone_number: str) -> UserDto:
        user = User(name=name, phone_number=phone_number)
        try:
            with Session(self.engine) as session:
                session.add(user)
                session.commit()
                session.refresh(user)
                return to_user_dto(user)
        except IntegrityError as e:
            raise ConflictError("Phone number already registered") from e
        except SQLAlchemyError as e:
            raise StorageError("Failed to register user") from e
