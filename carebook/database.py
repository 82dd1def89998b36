"""Database engine construction and session management."""
import logging
from typing import Generator, Optional

from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session

from carebook.config import Settings, settings as app_settings

logger = logging.getLogger(__name__)

# Base class for ORM models
Base = declarative_base()


def create_db_engine(config: Optional[Settings] = None) -> Engine:
    """
    Create the database engine with bounded timeouts.

    Args:
        config: Settings to build the engine from (defaults to the global settings)

    Returns:
        Engine: SQLAlchemy engine
    """
    config = config or app_settings

    if config.is_sqlite:
        return create_engine(
            config.database_url,
            connect_args={
                "check_same_thread": False,
                "timeout": config.db_connect_timeout,
            },
            echo=config.debug
        )

    return create_engine(
        config.database_url,
        pool_pre_ping=True,
        pool_size=config.db_pool_size,
        max_overflow=config.db_max_overflow,
        pool_timeout=config.db_pool_timeout,
        pool_recycle=config.db_pool_recycle,
        connect_args={
            "connect_timeout": config.db_connect_timeout,
            "read_timeout": config.db_read_timeout,
            "write_timeout": config.db_read_timeout,
        },
        echo=config.debug
    )


def build_session_factory(engine: Engine) -> sessionmaker:
    """Create a session factory bound to the given engine."""
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db(request: Request) -> Generator[Session, None, None]:
    """
    Dependency function to get database session.

    The session factory is built once at startup and kept on the
    application state.

    Yields:
        Session: SQLAlchemy database session
    """
    session_factory = request.app.state.session_factory
    db = session_factory()
    try:
        yield db
    except Exception as e:
        logger.error(f"Database session error: {e}")
        raise
    finally:
        db.close()


def init_db(engine: Engine) -> None:
    """Initialize database by creating all tables."""
    # Register every model on the metadata before creating tables
    import carebook.models  # noqa: F401

    try:
        Base.metadata.create_all(bind=engine)
        logger.info("Database tables created successfully")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}")
        raise
