# cheershare/db/models/media/creative.py
from typing import Optional
from sqlmodel import SQLModel, Field
from sqlalchemy import Column, DateTime, ForeignKey, Integer
from datetime import date, datetime

from ....utils import utcnow

class Creative(SQLModel, table=True):
    __tablename__ = "creatives"
    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(
        sa_column=Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    )
    creative_url: str
    scheduled_at: date = Field(index=True)
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime(timezone=True), nullable=False))
