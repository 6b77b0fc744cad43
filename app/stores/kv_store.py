"""
Synchronous key-value storage used by the offline punch queue.

Every call reads or writes a whole value in a single statement, so a call never
suspends and is atomic on its own. Read-modify-write sequences are left to the
caller, which is expected to serialize its calls.
"""
from typing import Dict, Optional, Protocol

from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.errors import StoreUnavailable
from app.db.base import Base
from app.models.kv_entry import KeyValueEntry


class SynchronousKeyValueStore(Protocol):
    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...


class SqlKeyValueStore:
    """
    Key-value slots kept in a single SQL table.

    The table is created on construction, the same way the sqlite database is
    prepared on startup elsewhere in the agent.
    """

    def __init__(self, database_url: str):
        connect_args = {}
        engine_kwargs = {}
        if database_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
            if ":memory:" in database_url or database_url.rstrip("/") == "sqlite:":
                # One shared connection, otherwise every checkout sees a new empty database
                engine_kwargs["poolclass"] = StaticPool
        try:
            self.engine = create_engine(
                database_url,
                connect_args=connect_args,
                pool_pre_ping=True,
                echo=False,
                **engine_kwargs
            )
            Base.metadata.create_all(bind=self.engine, tables=[KeyValueEntry.__table__])
        except SQLAlchemyError as e:
            raise StoreUnavailable(f"Cannot open key-value store: {e}") from e
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

    def get(self, key: str) -> Optional[str]:
        try:
            with self.SessionLocal() as db:
                entry = db.get(KeyValueEntry, key)
                return entry.value if entry else None
        except SQLAlchemyError as e:
            raise StoreUnavailable(f"Cannot read key '{key}': {e}") from e

    def set(self, key: str, value: str) -> None:
        try:
            with self.SessionLocal() as db:
                db.merge(KeyValueEntry(key=key, value=value))
                db.commit()
        except SQLAlchemyError as e:
            raise StoreUnavailable(f"Cannot write key '{key}': {e}") from e

    def close(self) -> None:
        self.engine.dispose()


class InMemoryKeyValueStore:
    """Dict-backed store for tests and throwaway sessions"""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value
