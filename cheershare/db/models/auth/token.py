# cheershare/db/models/auth/token.py
from sqlmodel import SQLModel, Field
from sqlalchemy import Column, DateTime, ForeignKey, Integer, LargeBinary
from datetime import datetime

class Token(SQLModel, table=True):
    """Persisted form of a bearer token: only the SHA-256 digest is stored."""

    __tablename__ = "tokens"
    hash: bytes = Field(sa_column=Column(LargeBinary, primary_key=True))
    user_id: int = Field(
        sa_column=Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    )
    expiry: datetime = Field(sa_column=Column(DateTime(timezone=True), nullable=False))
    scope: str
