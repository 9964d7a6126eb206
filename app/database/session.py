from __future__ import annotations

from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.database.base import Base


def create_db_engine(database_url: str) -> Engine:
    url = make_url(database_url)

    if url.get_backend_name() == "sqlite":
        database = url.database or ""
        if database in ("", ":memory:"):
            # One shared connection, otherwise every checkout sees an empty db.
            return create_engine(
                database_url,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
                future=True,
            )

        Path(database).resolve().parent.mkdir(parents=True, exist_ok=True)
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False, "timeout": 30},
            future=True,
        )

    return create_engine(
        database_url,
        pool_pre_ping=True,
        pool_recycle=300,
        pool_size=5,
        max_overflow=10,
        pool_timeout=30,
        future=True,
    )


def create_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=engine,
        class_=Session,
    )


def init_db(engine: Engine) -> None:
    """Create every table known to the ORM metadata (no-op for existing ones)."""
    from app.core.billing import models as billing_models  # noqa: F401
    from app.core.content import models as content_models  # noqa: F401
    from app.core.messages import models as messages_models  # noqa: F401
    from app.core.subscriptions import models as subscriptions_models  # noqa: F401

    Base.metadata.create_all(bind=engine)


__all__ = ["create_db_engine", "create_session_factory", "init_db"]
