"""Database engine and session for SQLite (dev) / PostgreSQL or SQL Server (prod)."""
from collections.abc import Generator, Iterator
from contextlib import contextmanager
import logging
import os
import threading

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from utils.config import DATABASE_URL, DB_ECHO, DB_POOL_SIZE, DB_POOL_TIMEOUT

LOG = logging.getLogger(__name__)

# Runtime safety: when TESTING=true, never use production DB.
if os.environ.get("TESTING") == "true":
    url = DATABASE_URL
    if "locations.db" in url or (":memory:" not in url and "test" not in url.lower().split("?")[0]):
        raise RuntimeError(
            "Tests must not run against production. Set TESTING_DATABASE_URL to sqlite:///:memory: "
            "(or another test URL containing :memory: or 'test')."
        )


def _sqlite_fk(dbapi_conn, connection_record):
    """Enable foreign keys for SQLite so FK behaviour matches the production store."""
    dbapi_conn.execute("PRAGMA foreign_keys=ON")


class DatabaseProvider:
    """Owns the process-wide engine and session factory.

    The engine (and its pool) is built on first use and reused by every request
    until dispose() is called at shutdown. First access is serialised so two
    concurrent first requests cannot build two pools.
    """

    def __init__(self, url: str, *, pool_size: int = 5, pool_timeout: float = 30.0, echo: bool = False):
        self.url = url
        self.pool_size = pool_size
        self.pool_timeout = pool_timeout
        self.echo = echo
        self._engine: Engine | None = None
        self._session_factory: sessionmaker[Session] | None = None
        self._lock = threading.Lock()

    def _engine_kwargs(self) -> dict:
        if "sqlite" in self.url:
            kw: dict = {"connect_args": {"check_same_thread": False}, "echo": self.echo}
            # In-memory SQLite: use one connection so all sessions share the same DB.
            if ":memory:" in self.url or self.url.rstrip("/") == "sqlite:":
                kw["poolclass"] = StaticPool
            return kw
        return {
            "echo": self.echo,
            "pool_size": self.pool_size,
            "pool_timeout": self.pool_timeout,
            "pool_pre_ping": True,
        }

    def _initialize(self) -> tuple[Engine, sessionmaker[Session]]:
        with self._lock:
            if self._engine is None or self._session_factory is None:
                engine = create_engine(self.url, **self._engine_kwargs())
                if "sqlite" in self.url:
                    event.listen(engine, "connect", _sqlite_fk)
                self._session_factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
                self._engine = engine
                LOG.info("Database engine created for %s", engine.url.render_as_string(hide_password=True))
            return self._engine, self._session_factory

    @property
    def engine(self) -> Engine:
        engine = self._engine
        if engine is None:
            engine, _ = self._initialize()
        return engine

    def session(self) -> Session:
        """Return a new session bound to the shared engine."""
        factory = self._session_factory
        if factory is None:
            _, factory = self._initialize()
        return factory()

    def create_schema(self) -> None:
        """Create any missing tables. Not a migration tool: existing tables are left untouched."""
        from models import Base
        import models.active_device  # noqa: F401 - register with Base
        import models.location  # noqa: F401
        import models.location_parameters  # noqa: F401
        import models.main_metric  # noqa: F401
        import models.pending_deactivation  # noqa: F401

        Base.metadata.create_all(self.engine)

    def dispose(self) -> None:
        """Release pooled connections. A later call to engine/session recreates them."""
        with self._lock:
            if self._engine is not None:
                self._engine.dispose()
                LOG.info("Database engine disposed")
            self._engine = None
            self._session_factory = None


database = DatabaseProvider(
    DATABASE_URL,
    pool_size=DB_POOL_SIZE,
    pool_timeout=DB_POOL_TIMEOUT,
    echo=DB_ECHO,
)


def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency: yield a DB session and close after request."""
    db = database.session()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def transaction_scope(session: Session, operation: str) -> Iterator[Session]:
    """Run the body as one atomic unit: commit on success, roll back on any failure.

    Rollback is best effort. If it fails too, that failure is logged and the
    original exception is the one that propagates.
    """
    try:
        yield session
        session.commit()
    except BaseException:
        try:
            session.rollback()
        except SQLAlchemyError:
            LOG.exception("Rollback failed during %s", operation)
        raise
