# backend/database.py
from typing import Iterator

from fastapi import Request
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

Base = declarative_base()


def normalize_url(url: str) -> str:
    # Hosted Postgres providers hand out postgres://, SQLAlchemy wants postgresql://
    if url and url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql://", 1)
    return url


def _enable_sqlite_fks(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Store:
    """Process-wide database handle: one engine plus the session factory bound to it."""

    def __init__(self, engine: Engine):
        self.engine = engine
        self.session_factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    def session(self) -> Session:
        return self.session_factory()

    def create_all(self) -> None:
        # Import models so every table is registered on Base.metadata
        import models  # noqa: F401

        Base.metadata.create_all(bind=self.engine)

    def close(self) -> None:
        self.engine.dispose()


def open_store(url: str, echo: bool = False) -> Store:
    url = normalize_url(url)

    # Connection options depend on the backend
    if url.startswith("sqlite"):
        connect_args = {"check_same_thread": False}
        kwargs = {}
        # In-memory databases live inside one connection, share it across sessions
        if ":memory:" in url or url.rstrip("/") == "sqlite:":
            kwargs["poolclass"] = StaticPool
        engine = create_engine(url, connect_args=connect_args, echo=echo, **kwargs)
        event.listen(engine, "connect", _enable_sqlite_fks)
    else:
        engine = create_engine(url, echo=echo, pool_pre_ping=True)

    return Store(engine)


def get_db(request: Request) -> Iterator[Session]:
    db = request.app.state.store.session()
    try:
        yield db
    finally:
        db.close()
