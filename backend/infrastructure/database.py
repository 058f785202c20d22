"""SQLModel engine configuration for the SQLite and PostgreSQL backends."""
from __future__ import annotations

from pathlib import Path
from typing import Any, Dict

from sqlalchemy import event
from sqlalchemy.engine import URL, Engine
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

BACKEND_DIR = Path(__file__).resolve().parent.parent
DEFAULT_SQLITE_PATH = BACKEND_DIR / "ratings.db"


def sqlite_url(path: str | Path | None = None) -> str:
    if str(path) == ":memory:":
        return "sqlite://"
    db_path = Path(path) if path else DEFAULT_SQLITE_PATH
    if not db_path.is_absolute():
        db_path = BACKEND_DIR / db_path
    return f"sqlite:///{db_path}"


def postgres_url(options: Dict[str, Any]) -> URL:
    return URL.create(
        "postgresql+psycopg2",
        username=options.get("user") or None,
        password=options.get("password") or None,
        host=options.get("host", "localhost"),
        port=int(options.get("port", 5432)),
        database=options.get("name") or None,
    )


def create_db_engine(url: str | URL, echo: bool = False) -> Engine:
    """Build an engine; SQLite connections may be shared across request threads."""
    url_text = url if isinstance(url, str) else url.drivername
    if url_text.startswith("sqlite"):
        kwargs: Dict[str, Any] = {"connect_args": {"check_same_thread": False}}
        if url == "sqlite://":
            kwargs["poolclass"] = StaticPool
        engine = create_engine(url, echo=echo, **kwargs)
        event.listen(engine, "connect", _enable_foreign_keys)
        return engine
    return create_engine(url, echo=echo, pool_pre_ping=True)


def _enable_foreign_keys(dbapi_connection, connection_record) -> None:
    # SQLite leaves REFERENCES clauses unenforced unless asked per connection
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def init_db(engine: Engine) -> None:
    """Create tables if they do not exist."""
    from . import models  # noqa: F401  # ensure SQLModel metadata is loaded

    SQLModel.metadata.create_all(engine)


def open_session(engine: Engine) -> Session:
    return Session(engine)
