"""
Module: locker_kernel.db.engine
Responsibility: Process-wide engine and session factory for the locker
    tables, plus the ``session_scope()`` transaction boundary.
Architecture position: Kernel > DB.  create_tables/drop_tables import the
    models lazily so that importing this module never registers mappers.

Backends:
    - PostgreSQL: pooled connections at READ COMMITTED.  Counter and
      position rows are locked explicitly with SELECT ... FOR UPDATE.
    - SQLite: one shared connection (StaticPool) so ``sqlite:///:memory:``
      behaves as a single database, with SAVEPOINT support enabled.

Failure modes:
    - RuntimeError from get_engine/get_session/get_session_factory before
      init_engine_from_url().
"""

import atexit
from contextlib import contextmanager
from typing import Generator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import QueuePool, StaticPool

from locker_kernel.logging_config import configure_logging, get_logger

logger = get_logger("db.engine")

_engine: Engine | None = None
_session_factory: sessionmaker[Session] | None = None

_NOT_INITIALIZED = "Engine not initialized. Call init_engine_from_url() first."


def init_engine_from_url(
    database_url: str,
    echo: bool = False,
    pool_size: int = 10,
    max_overflow: int = 10,
    pool_timeout: int = 30,
) -> Engine:
    """
    Create the engine and session factory for ``database_url``.

    A second call replaces the first; the previous engine is disposed.
    Pool arguments apply to server backends only.
    """
    global _engine, _session_factory

    url = make_url(database_url)
    backend = url.get_backend_name()

    if _engine is not None:
        _engine.dispose()

    if backend == "sqlite":
        engine = create_engine(
            url,
            echo=echo,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
        _enable_sqlite_savepoints(engine)
    else:
        engine = create_engine(
            url,
            echo=echo,
            poolclass=QueuePool,
            pool_size=pool_size,
            max_overflow=max_overflow,
            pool_timeout=pool_timeout,
            pool_pre_ping=True,
            isolation_level="READ COMMITTED",
        )

    _engine = engine
    _session_factory = sessionmaker(bind=engine, expire_on_commit=False)

    configure_logging()
    logger.info("engine_initialized", extra={"backend": backend, "echo": echo})
    return engine


def _enable_sqlite_savepoints(engine: Engine) -> None:
    # pysqlite's implicit transaction handling breaks SAVEPOINT; emit BEGIN
    # ourselves instead.
    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")


def get_engine() -> Engine:
    if _engine is None:
        raise RuntimeError(_NOT_INITIALIZED)
    return _engine


def get_session_factory() -> sessionmaker[Session]:
    if _session_factory is None:
        raise RuntimeError(_NOT_INITIALIZED)
    return _session_factory


def get_session() -> Session:
    return get_session_factory()()


def is_postgres() -> bool:
    return _engine is not None and _engine.dialect.name == "postgresql"


@contextmanager
def session_scope() -> Generator[Session, None, None]:
    """
    One committed unit of work.

    Commits on normal exit; rolls back, logs and re-raises on error.

    Usage:
        with session_scope() as session:
            registry = PositionRegistry(session, gateway, settings)
            registry.lock(caller, asset, 1000, release_time)
    """
    session = get_session()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        logger.warning("transaction_rolled_back", exc_info=True)
        raise
    finally:
        session.close()


def create_tables() -> None:
    """Create every locker table that does not exist yet."""
    from locker_kernel.db.base import Base
    import locker_kernel.models  # noqa: F401

    Base.metadata.create_all(get_engine())


def drop_tables() -> None:
    """Drop every locker table.  Tests and local tooling only."""
    from locker_kernel.db.base import Base
    import locker_kernel.models  # noqa: F401

    Base.metadata.drop_all(get_engine())


def reset_engine() -> None:
    """Dispose the engine and forget the session factory."""
    global _engine, _session_factory

    if _engine is not None:
        _engine.dispose()
    _engine = None
    _session_factory = None


atexit.register(reset_engine)
