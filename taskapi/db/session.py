from __future__ import annotations

from collections.abc import Generator

from sqlmodel import Session

from taskapi.db.engine import get_engine


def get_session() -> Generator[Session, None, None]:
    with Session(get_engine()) as session:
        yield session
