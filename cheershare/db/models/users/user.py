# cheershare/db/models/users/user.py
from typing import Optional
from sqlmodel import SQLModel, Field
from sqlalchemy import Column, DateTime
from datetime import datetime

from ....utils import utcnow

class User(SQLModel, table=True):
    __tablename__ = "users"
    id: Optional[int] = Field(default=None, primary_key=True)
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime(timezone=True), nullable=False))
    name: str
    phone_number: str = Field(unique=True, index=True)
    version: int = Field(default=1)
