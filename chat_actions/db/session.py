"""Engine and session factory for the chat database."""

from collections.abc import Iterator

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker

from chat_actions.utils.config import DatabaseConfig
from chat_actions.utils.logger import get_logger

from .models import Base

logger = get_logger(__name__)


def get_engine(config: DatabaseConfig) -> Engine:
    """Create an engine for the configured database URL.

    SQLite connections are shared across the API's worker threads.
    """
    connect_args = {}
    if config.url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    return create_engine(config.url, echo=config.echo, connect_args=connect_args)


def get_session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, expire_on_commit=False)


def init_db(engine: Engine) -> None:
    """Create all tables that do not exist yet."""
    Base.metadata.create_all(engine)
    logger.info("Database schema ready at %s", engine.url)


def iter_sessions(factory: sessionmaker[Session]) -> Iterator[Session]:
    """Yield one session and close it afterwards."""
    session = factory()
    try:
        yield session
    finally:
        session.close()
