from __future__ import annotations

from pathlib import Path
from typing import Any

from sqlalchemy import text
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.pool import StaticPool
from sqlmodel import create_engine

from taskapi.core.config import get_settings

_engine: Engine | None = None


def _is_sqlite(database_url: str) -> bool:
    return make_url(database_url).drivername.split("+", maxsplit=1)[0] == "sqlite"


def _is_sqlite_memory(database_url: str) -> bool:
    if not _is_sqlite(database_url):
        return False
    return make_url(database_url).database in {None, "", ":memory:"}


def create_engine_from_url(database_url: str, *, echo: bool = False) -> Engine:
    options: dict[str, Any] = {}
    if _is_sqlite(database_url):
        options["connect_args"] = {"check_same_thread": False}
    if _is_sqlite_memory(database_url):
        # Every session must see the same in-memory database.
        options["poolclass"] = StaticPool
    return create_engine(database_url, echo=echo, **options)


def get_engine() -> Engine:
    global _engine
    if _engine is None:
        settings = get_settings()
        # SQLALCHEMY_ECHO wins; otherwise echo only in debug outside tests
        if settings.sqlalchemy_echo is not None:
            echo = settings.sqlalchemy_echo
        else:
            echo = settings.debug and not settings.testing
        _engine = create_engine_from_url(settings.database_url, echo=echo)
    return _engine


def dispose_engine() -> None:
    global _engine
    if _engine is not None:
        _engine.dispose()
    _engine = None


def check_database_connection(engine: Engine | None = None) -> None:
    """Run a trivial query; any driver error propagates to the caller."""
    target = engine or get_engine()
    with target.connect() as connection:
        connection.execute(text("SELECT 1"))


def resolve_sqlite_database_path(database_url: str) -> Path | None:
    if not _is_sqlite(database_url) or _is_sqlite_memory(database_url):
        return None

    database = make_url(database_url).database
    assert database is not None
    db_path = Path(database)
    if not db_path.is_absolute():
        db_path = (Path.cwd() / db_path).resolve()
    return db_path


def ensure_database_parent_dir(database_url: str) -> None:
    db_path = resolve_sqlite_database_path(database_url)
    if db_path is None:
        return
    db_path.parent.mkdir(parents=True, exist_ok=True)
