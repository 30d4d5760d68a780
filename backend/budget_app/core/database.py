"""
Database configuration and session management
"""
import logging
from pathlib import Path
from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

from budget_app.core.config import get_settings
from budget_app.core.logging_config import LoggingConfig

logger = LoggingConfig.get_logger(__name__)

# Lazy initialization - don't create engine at module level
_engine: Optional[Engine] = None
_SessionLocal: Optional[sessionmaker] = None

Base = declarative_base()


def get_engine() -> Engine:
    """Get or create database engine (lazy initialization)"""
    global _engine
    if _engine is None:
        settings = get_settings()

        if settings.is_sqlite:
            # SQLite needs its parent directory and allows use across threads
            # (FastAPI runs sync work in a threadpool)
            _, _, db_path = settings.database_url.partition("///")
            if db_path and db_path != ":memory:":
                Path(db_path).parent.mkdir(parents=True, exist_ok=True)
            connect_args = {"check_same_thread": False, "timeout": 5}
        else:
            connect_args = {"connect_timeout": 5}

        _engine = create_engine(
            settings.database_url,
            pool_pre_ping=True,
            echo=settings.log_sqlalchemy,
            connect_args=connect_args,
        )

        if not settings.log_sqlalchemy:
            logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

        logger.debug("Database engine created", extra={"database_url": settings.database_url})

    return _engine


def get_session_local() -> sessionmaker:
    """Get or create session factory (lazy initialization)"""
    global _SessionLocal
    if _SessionLocal is None:
        _SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=get_engine())
    return _SessionLocal


def init_db(engine: Optional[Engine] = None) -> None:
    """Create all tables registered on Base"""
    import budget_app.models  # noqa: F401  (registers models with Base.metadata)

    Base.metadata.create_all(bind=engine or get_engine())


def reset_engine() -> None:
    """Dispose the cached engine and session factory"""
    global _engine, _SessionLocal
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _SessionLocal = None
