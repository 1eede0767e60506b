"""Database connection, session management and transaction helpers.

This module provides database connection management, session factories,
the unit-of-work helper every mutating service operation runs through, and
the row-locking primitive shared by combat resolution, purchases and the
periodic bonus.
"""

import logging
import subprocess
import sys
from collections.abc import Callable, Generator, Iterable
from contextlib import contextmanager, suppress
from pathlib import Path
from typing import Any, TypeVar

from sqlalchemy import create_engine, event, func, inspect, select, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.orm.exc import StaleDataError

from hackbank.config import get_settings
from hackbank.domain.errors import NotFoundError
from hackbank.models import Base, Player

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_ATTEMPTS = 3


def _configure_sqlite(
    dbapi_connection: Any, connection_record: Any  # noqa: ARG001
) -> None:
    """Configure SQLite pragmas on every new connection.

    Args:
        dbapi_connection: The DBAPI connection
        connection_record: Connection record (required by SQLAlchemy event API)
    """
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA synchronous=NORMAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_db_engine(url: str | None = None) -> Engine:
    """Create and configure the database engine.

    Args:
        url: Optional database URL; defaults to ``Settings.DATABASE_URL``

    Returns:
        Engine: Configured SQLAlchemy engine
    """
    settings = get_settings()
    url = url or settings.DATABASE_URL

    if url.startswith("sqlite"):
        engine = create_engine(url, echo=settings.DATABASE_ECHO, pool_pre_ping=True)
        event.listen(engine, "connect", _configure_sqlite)
    else:
        engine = create_engine(
            url,
            echo=settings.DATABASE_ECHO,
            pool_pre_ping=True,
            pool_size=settings.DATABASE_POOL_SIZE,
            max_overflow=settings.DATABASE_MAX_OVERFLOW,
            pool_recycle=settings.DATABASE_POOL_RECYCLE,
            pool_timeout=settings.DATABASE_POOL_TIMEOUT,
        )

    return engine


# Global engine and session factory
_engine: Engine | None = None
_SessionLocal: sessionmaker[Session] | None = None


def get_engine() -> Engine:
    """Get or create the global database engine."""
    global _engine  # noqa: PLW0603
    if _engine is None:
        _engine = create_db_engine()
    return _engine


def get_session_factory() -> sessionmaker[Session]:
    """Get or create the global session factory."""
    global _SessionLocal  # noqa: PLW0603
    if _SessionLocal is None:
        _SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=get_engine())
    return _SessionLocal


@contextmanager
def session_scope() -> Generator[Session]:
    """Provide a session that is closed when the block exits.

    Services commit their own work; the scope only guarantees cleanup.

    Example:
        ```python
        with session_scope() as session:
            hacks = create_hack_service(session).get_history(player)
        ```
    """
    SessionLocal = get_session_factory()  # noqa: N806
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


def init_db(engine: Engine | None = None) -> None:
    """Create all tables directly, without migrations.

    Note:
        For production databases use ``alembic upgrade head`` instead.
    """
    Base.metadata.create_all(bind=engine or get_engine())


def check_database_health() -> bool:
    """Return True if the database answers a trivial query."""
    try:
        with get_engine().connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except Exception:
        logger.exception("database health check failed")
        return False


def reset_database() -> None:
    """Fully reset the database and re-apply migrations.

    Warning:
        This will DELETE ALL DATA in the database. Use only for testing!
    """
    settings = get_settings()
    project_root = Path(__file__).parent.parent.parent

    global _engine, _SessionLocal  # noqa: PLW0603
    if _engine is not None:
        with suppress(Exception):
            _engine.dispose()
    _engine = None
    _SessionLocal = None

    alembic = [sys.executable, "-m", "alembic"]
    if settings.DATABASE_URL.startswith("sqlite"):
        db_path = settings.DATABASE_URL.replace("sqlite:///", "")
        if db_path and db_path != ":memory:":
            db_file = Path(db_path)
            if not db_file.is_absolute():
                db_file = project_root / db_file
            if db_file.exists():
                db_file.unlink()
        subprocess.run([*alembic, "upgrade", "head"], check=True, cwd=project_root)
        return

    subprocess.run([*alembic, "downgrade", "base"], check=True, cwd=project_root)
    subprocess.run([*alembic, "upgrade", "head"], check=True, cwd=project_root)


def get_table_names(engine: Engine | None = None) -> list[str]:
    """Get list of all table names in the database."""
    inspector = inspect(engine or get_engine())
    return inspector.get_table_names()


def count_rows(session: Session, table_name: str) -> int:
    """Count rows in a specific table.

    Raises:
        ValueError: If table_name is not a valid table in the schema
    """
    if table_name not in Base.metadata.tables:
        valid_tables = sorted(Base.metadata.tables.keys())
        raise ValueError(
            f"Invalid table name: {table_name}. Valid tables: {', '.join(valid_tables)}"
        )

    table = Base.metadata.tables[table_name]
    result = session.execute(select(func.count()).select_from(table)).scalar()
    return result or 0


def run_in_transaction(
    session: Session,
    operation: Callable[[], T],
    *,
    attempts: int = DEFAULT_ATTEMPTS,
) -> T:
    """Run ``operation`` as one atomic unit of work.

    Commits when the operation returns and rolls back when it raises, so a
    failure never leaves a partial balance or ledger write behind. A
    ``StaleDataError`` (a concurrent writer bumped a player's version) rolls
    back and re-runs the operation from scratch, up to ``attempts`` times.

    Args:
        session: Database session
        operation: Callable doing the reads and writes; must re-read any row it
            depends on, since a retry starts from a rolled back session
        attempts: Maximum number of tries on version conflicts

    Returns:
        Whatever ``operation`` returns
    """
    for attempt in range(1, attempts + 1):
        try:
            result = operation()
            session.commit()
            return result
        except StaleDataError:
            session.rollback()
            if attempt == attempts:
                raise
            logger.warning("concurrent update detected, retrying (attempt %d/%d)", attempt, attempts)
        except Exception:
            session.rollback()
            raise
    raise AssertionError("unreachable")  # pragma: no cover


def lock_players(session: Session, player_ids: Iterable[int]) -> dict[int, Player]:
    """Load and lock the given players for the rest of the transaction.

    Rows are locked with ``SELECT ... FOR UPDATE`` in ascending id order so
    that two operations touching the same pair cannot deadlock. Objects
    already in the session are refreshed from the locked rows.

    Raises:
        NotFoundError: If any id does not exist
    """
    ids = sorted(set(player_ids))
    stmt = (
        select(Player)
        .where(Player.id.in_(ids))
        .order_by(Player.id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    players = {player.id: player for player in session.scalars(stmt)}
    missing = [player_id for player_id in ids if player_id not in players]
    if missing:
        raise NotFoundError(f"Player with id [{missing[0]}] does not exist.")
    return players
