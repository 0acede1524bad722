"""
Metadata store - connection profiles, table/column definitions and endpoints.

The store is an explicitly constructed object owned by the application
lifespan (``app.state.metadata_store``). Tests build their own against an
in-memory SQLite database.
"""
from contextlib import contextmanager
from typing import Generator, Optional
from fastapi import Request
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from sqlalchemy.pool import StaticPool
import os

Base = declarative_base()


class MetadataStore:
    """Engine and session factory for the metadata database."""

    def __init__(self, database_url: str, echo: bool = False, engine: Optional[Engine] = None):
        self.database_url = database_url
        self.engine = engine or self._create_engine(database_url, echo)
        self.session_factory = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

    @staticmethod
    def _create_engine(database_url: str, echo: bool) -> Engine:
        url = make_url(database_url)
        if url.get_backend_name() == "sqlite":
            in_memory = not url.database or url.database == ":memory:"
            kwargs = {"connect_args": {"check_same_thread": False}}
            if in_memory:
                kwargs["poolclass"] = StaticPool
            else:
                os.makedirs(os.path.dirname(os.path.abspath(url.database)), exist_ok=True)
            engine = create_engine(database_url, echo=echo, **kwargs)

            # SQLite needs foreign keys switched on for ON DELETE CASCADE
            @event.listens_for(engine, "connect")
            def _enable_foreign_keys(dbapi_connection, connection_record):
                cursor = dbapi_connection.cursor()
                cursor.execute("PRAGMA foreign_keys=ON")
                cursor.close()

            return engine

        return create_engine(database_url, pool_pre_ping=True, echo=echo)

    def create_all(self) -> None:
        """Create metadata tables if missing."""
        # Importing registers the models on Base.metadata
        import apiforge.models  # noqa: F401
        Base.metadata.create_all(bind=self.engine)

    @contextmanager
    def session(self) -> Generator[Session, None, None]:
        """Context manager for a session that commits on success."""
        db = self.session_factory()
        try:
            yield db
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def dispose(self) -> None:
        self.engine.dispose()


def get_app_db(request: Request) -> Generator[Session, None, None]:
    """Dependency for a metadata-store session scoped to one request."""
    store: MetadataStore = request.app.state.metadata_store
    db = store.session_factory()
    try:
        yield db
    finally:
        db.close()
