"""
Database session management and configuration.
"""

from contextlib import contextmanager
from typing import Generator, Optional

from loguru import logger
from sqlalchemy import create_engine, text
from sqlalchemy.engine import make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from chat_agent.config.settings import settings
from chat_agent.models.tables import Base


class Database:
    """
    Database connection manager

    Handles engine creation, session management and schema creation for the
    message store tables.
    """

    def __init__(self, url: Optional[str] = None, echo: bool = False):
        """
        Initialize database connection

        Args:
            url: SQLAlchemy URL (defaults to settings.database_url)
            echo: Log every SQL statement
        """
        self.url = make_url(url or settings.database_url)

        engine_kwargs = {"echo": echo, "pool_pre_ping": True}
        if self.url.get_backend_name() == "sqlite":
            engine_kwargs["connect_args"] = {"check_same_thread": False}
            database = self.url.database or ""
            if database in ("", ":memory:"):
                # One shared connection, otherwise every session sees an empty database
                engine_kwargs["poolclass"] = StaticPool
            else:
                settings.resolve_path(database).parent.mkdir(parents=True, exist_ok=True)
                self.url = self.url.set(database=str(settings.resolve_path(database)))

        logger.info(f"Connecting to database: {self.url.render_as_string(hide_password=True)}")
        self.engine = create_engine(self.url, **engine_kwargs)

        self.SessionLocal = sessionmaker(
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
            bind=self.engine
        )

    def create_all(self) -> None:
        """Create message store tables if they do not exist"""
        Base.metadata.create_all(self.engine)
        logger.debug("Ensured message store schema")

    def ping(self) -> bool:
        with self.engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True

    def get_session(self) -> Session:
        return self.SessionLocal()

    @contextmanager
    def session_scope(self) -> Generator[Session, None, None]:
        """
        Provide a transactional scope around a series of operations

        Usage:
            with db.session_scope() as session:
                session.add(row)
        """
        session = self.SessionLocal()
        try:
            yield session
            session.commit()
        except Exception as e:
            session.rollback()
            logger.error(f"Database error: {e}")
            raise
        finally:
            session.close()


# Global database instance (lazy initialization)
_db_instance = None


def get_database() -> Database:
    """Get or create global database instance"""
    global _db_instance
    if _db_instance is None:
        _db_instance = Database()
        _db_instance.create_all()
    return _db_instance
