from datetime import date
from typing import Iterable, List
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from .....db.models import Creative
from .....application.ports.creative_repo import CreativeRepository, CreativeDto
from .....exceptions import StorageError
from .....utils import as_utc


class SqlCreativeRepository(CreativeRepository):
    def __init__(self, engine: Engine):
        self.engine = engine

    def _to_dto(self, rec: Creative) -> CreativeDto:
        return CreativeDto(
            id=rec.id,
            user_id=rec.user_id,
            creative_url=rec.creative_url,
            scheduled_at=rec.scheduled_at,
            created_at=as_utc(rec.created_at),
        )

    def create(self, user_id: int, creative_url: str, scheduled_at: date) -> CreativeDto:
        rec = Creative(user_id=user_id, creative_url=creative_url, scheduled_at=scheduled_at)
        try:
            with Session(self.engine) as session:
                session.add(rec)
                session.commit()
                session.refresh(rec)
                return self._to_dto(rec)
        except SQLAlchemyError as e:
            raise StorageError("failed to save creative") from e

    def list_scheduled_on(self, dates: Iterable[date]) -> List[CreativeDto]:
        try:
            with Session(self.engine) as session:
                rows = session.exec(
                    select(Creative).where(Creative.scheduled_at.in_(list(dates))).order_by(Creative.id)
                ).all()
                return [self._to_dto(r) for r in rows]
        except SQLAlchemyError as e:
            raise StorageError("failed to fetch scheduled creatives") from e
