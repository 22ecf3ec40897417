from __future__ import annotations

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker


def build_engine(url: str) -> Engine:
    return create_engine(
        url,
        pool_pre_ping=True,   # checks stale connections
    )


def build_session_factory(engine: Engine) -> sessionmaker[Session]:
    # Rows leave the store after the session closes; keep their loaded state readable.
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)
