from sqlmodel import SQLModel, create_engine
from sqlalchemy.engine import Engine

from .core.config import Settings


def create_engine_from_settings(settings: Settings) -> Engine:
    # Choose engine options based on database scheme; every call is bounded
    # by DB_TIMEOUT_SECONDS so a stuck database surfaces as an error.
    db_url = settings.DATABASE_URL
    engine_kwargs = {}

    if db_url.startswith("sqlite"):
        engine_kwargs.update({
            "connect_args": {
                "check_same_thread": False,
                "timeout": settings.DB_TIMEOUT_SECONDS,
            }
        })
    else:
        engine_kwargs.update({
            "pool_pre_ping": True,
            "pool_recycle": 300,
            "pool_size": settings.DB_POOL_SIZE,
            "max_overflow": 0,
            "pool_timeout": settings.DB_TIMEOUT_SECONDS,
            "connect_args": {
                "connect_timeout": settings.DB_TIMEOUT_SECONDS,
                "options": f"-c statement_timeout={settings.DB_TIMEOUT_SECONDS * 1000}",
            },
        })

    return create_engine(db_url, echo=settings.DEBUG, **engine_kwargs)


def create_db_and_tables(engine: Engine) -> None:
    from .db import models  # noqa: F401  (registers the tables on SQLModel.metadata)

    SQLModel.metadata.create_all(engine)
