from typing import Iterable, List
from dataclasses import dataclass
from datetime import date, datetime


@dataclass
class CreativeDto:
    id: int
    user_id: int
    creative_url: str
    scheduled_at: date
    created_at: datetime


class CreativeRepository:
    def create(self, user_id: int, creative_url: str, scheduled_at: date) -> CreativeDto:
        ...

    def list_scheduled_on(self, dates: Iterable[date]) -> List[CreativeDto]:
        ...
