from datetime import datetime
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from .....db.models import Token, User
from .....application.ports.token_repo import AuthToken, TokenRepository
from .....application.ports.user_repo import UserDto
from .....exceptions import NotFoundError, StorageError
from .user_repository_sql import to_user_dto


class SqlTokenRepository(TokenRepository):
    def __init__(self, engine: Engine):
        self.engine = engine

    def insert(self, token: AuthToken) -> None:
        rec = Token(hash=token.hash, user_id=token.user_id, expiry=token.expiry, scope=token.scope)
        try:
            with Session(self.engine) as session:
                session.add(rec)
                session.commit()
        except SQLAlchemyError as e:
            raise StorageError("Failed to generate authentication token") from e

    def get_user_for_token(self, token_hash: bytes, scope: str, now: datetime) -> UserDto:
        statement = (
            select(User)
            .join(Token, Token.user_id == User.id)
            .where(Token.hash == token_hash, Token.scope == scope, Token.expiry > now)
        )
        try:
            with Session(self.engine) as session:
                user = session.exec(statement).first()
                if user is None:
                    raise NotFoundError("Token not found")
                return to_user_dto(user)
        except SQLAlchemyError as e:
            raise StorageError("Can't find user for specified token") from e

    def delete_all_for_user(self, scope: str, user_id: int) -> int:
        try:
            with Session(self.engine) as session:
                tokens = session.exec(
                    select(Token).where(Token.user_id == user_id, Token.scope == scope)
                ).all()
                for token in tokens:
                    session.delete(token)
                session.commit()
                return len(tokens)
        except SQLAlchemyError as e:
            raise StorageError("Failed to revoke tokens") from e
