"""
Database configuration, session management and the transaction boundary
"""

from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine
import structlog

from pos_backend.core.config import get_settings
from pos_backend.core.exceptions import StoreError

logger = structlog.get_logger(__name__)
settings = get_settings()


def build_engine(
    url: str,
    lock_timeout_ms: Optional[int] = None,
    statement_timeout_ms: Optional[int] = None,
    echo: bool = False,
) -> Engine:
    """Create a synchronous engine with bounded lock waits.

    PostgreSQL gets ``lock_timeout``/``statement_timeout`` as session options;
    row locks come from ``SELECT ... FOR UPDATE``. SQLite has no row locks, so
    every transaction starts with ``BEGIN IMMEDIATE`` to take the database
    write lock up front, which serializes read-then-write sequences.
    """
    lock_timeout_ms = lock_timeout_ms if lock_timeout_ms is not None else settings.DB_LOCK_TIMEOUT_MS
    statement_timeout_ms = (
        statement_timeout_ms if statement_timeout_ms is not None else settings.DB_STATEMENT_TIMEOUT_MS
    )
    backend = make_url(url).get_backend_name()

    if backend == "sqlite":
        kwargs = {
            "connect_args": {
                "check_same_thread": False,
                "timeout": lock_timeout_ms / 1000,
            },
        }
        if make_url(url).database in (None, "", ":memory:"):
            kwargs["poolclass"] = StaticPool
        engine = create_engine(url, echo=echo, **kwargs)
        _install_sqlite_locking(engine)
        return engine

    connect_args = {}
    if backend == "postgresql":
        connect_args["options"] = (
            f"-c lock_timeout={lock_timeout_ms} -c statement_timeout={statement_timeout_ms}"
        )
    return create_engine(url, echo=echo, pool_pre_ping=True, connect_args=connect_args)


def _install_sqlite_locking(engine: Engine) -> None:
    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        # Let SQLAlchemy emit BEGIN itself instead of pysqlite's deferred BEGIN
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


engine = build_engine(settings.DATABASE_URL, echo=settings.DEBUG)


def init_db(bind: Optional[Engine] = None) -> None:
    """Initialize database tables"""
    import pos_backend.models  # noqa: F401  (registers table metadata)

    SQLModel.metadata.create_all(bind or engine)
    logger.info("Database tables created")


def get_session() -> Iterator[Session]:
    """Dependency to get database session"""
    with Session(engine, expire_on_commit=False) as session:
        yield session


@contextmanager
def atomic(session: Session) -> Iterator[Session]:
    """Run a block as one transaction: commit on success, roll back on any error.

    Store failures surface as ``StoreError``; domain errors propagate unchanged
    after the rollback.
    """
    try:
        yield session
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        logger.error("Transaction failed", error=str(e), exc_info=True)
        raise StoreError(message="Database transaction failed") from e
    except BaseException:
        session.rollback()
        raise


@contextmanager
def snapshot(session: Session) -> Iterator[Session]:
    """Read-only block: store failures surface as ``StoreError``.

    Nothing is written, so the transaction is left to end with the session.
    """
    try:
        yield session
    except SQLAlchemyError as e:
        session.rollback()
        logger.error("Read failed", error=str(e), exc_info=True)
        raise StoreError(message="Database read failed") from e
