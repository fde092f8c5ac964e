"""
Database session management.

Provides explicit ORM session handling with SQLAlchemy and the
LedgerStore wrapper the ledger core talks to.
"""

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Generator, List, Optional, Type, TypeVar

from sqlalchemy import create_engine, select, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from grumblejar.core.config import Config
from grumblejar.core.models import Base

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=Base)


class GrumbleJarError(Exception):
    pass


class StoreError(GrumbleJarError):
    """A read or commit against the ledger store failed."""
    pass


class InitializationError(GrumbleJarError):
    """The ledger store could not be opened. Fatal."""
    pass


def get_engine(config: Config) -> Engine:
    """
    Create SQLAlchemy engine.

    Uses SQLite with WAL mode for file databases.
    """
    if config.database_path == ":memory:":
        return create_engine("sqlite://")

    db_path = Path(config.database_path)
    db_path.parent.mkdir(parents=True, exist_ok=True)

    engine = create_engine(
        f"sqlite:///{db_path}",
        connect_args={"check_same_thread": False},
    )

    with engine.connect() as conn:
        conn.execute(text("PRAGMA journal_mode=WAL"))
        conn.commit()

    return engine


def init_db(engine: Engine) -> None:
    """
    Initialize database schema.

    Creates all tables if they don't exist.
    """
    Base.metadata.create_all(engine)


class LedgerStore:
    """
    Durable keyed storage for ledger entities.

    Every mutating call commits on its own. Nothing here keeps a
    transaction open between calls.
    """

    def __init__(self, engine: Engine):
        self.engine = engine
        # Loaded objects stay readable after their session closes
        self._sessionmaker = sessionmaker(bind=engine, expire_on_commit=False)

    @classmethod
    def open(cls, config: Config) -> "LedgerStore":
        """
        Open the store and create the schema.

        Raises:
            InitializationError: database cannot be opened
        """
        try:
            engine = get_engine(config)
            init_db(engine)
        except (SQLAlchemyError, OSError) as e:
            raise InitializationError(
                f"Could not open ledger store at {config.database_path}: {e}"
            ) from e

        logger.debug(f"Opened ledger store at {config.database_path}")
        return cls(engine)

    @contextmanager
    def session_scope(self) -> Generator[Session, None, None]:
        """
        Provide transactional scope around a series of operations.

        Usage:
            with store.session_scope() as session:
                session.add(entry)
        """
        session = self._sessionmaker()
        try:
            yield session
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            raise StoreError(str(e)) from e
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def insert(self, entity: T) -> T:
        with self.session_scope() as session:
            session.add(entity)
            session.flush()
        return entity

    def update(self, entity: T) -> T:
        with self.session_scope() as session:
            merged = session.merge(entity)
            session.flush()
        return merged

    def delete(self, model: Type[T], entity_id: Any) -> bool:
        """Delete one entity by primary key. Returns False if it was not there."""
        with self.session_scope() as session:
            entity = session.get(model, entity_id)
            if entity is None:
                return False
            session.delete(entity)
        return True

    def get(self, model: Type[T], entity_id: Any) -> Optional[T]:
        with self.session_scope() as session:
            return session.get(model, entity_id)

    def fetch(self, model: Type[T], *criteria, order_by=None) -> List[T]:
        """
        Fetch entities matching all criteria.

        Args:
            model: Mapped class to query
            criteria: SQLAlchemy filter expressions
            order_by: Column expression or list of expressions
        """
        stmt = select(model)
        if criteria:
            stmt = stmt.where(*criteria)
        if order_by is not None:
            if isinstance(order_by, (list, tuple)):
                stmt = stmt.order_by(*order_by)
            else:
                stmt = stmt.order_by(order_by)

        with self.session_scope() as session:
            return list(session.scalars(stmt).all())

    def close(self) -> None:
        self.engine.dispose()
