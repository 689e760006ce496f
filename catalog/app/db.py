import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from .config import Settings

logger = logging.getLogger(__name__)


def make_engine(settings: Settings) -> Engine:
    """
    Build the shared engine. Server databases get a bounded QueuePool:
    at most `pool_size` connections, further checkouts wait in line.
    """
    kwargs: Dict[str, Any] = {"pool_pre_ping": True, "future": True}
    if settings.database_url.startswith("sqlite"):
        # pooled connections are handed to worker threads
        kwargs["connect_args"] = {"check_same_thread": False}
    else:
        kwargs["pool_size"] = settings.pool_size
        kwargs["max_overflow"] = 0
    return create_engine(settings.database_url, **kwargs)


def init_db(engine: Engine) -> None:
    """
    Create the productos table if it is missing (idempotent).
    """
    # Import here to avoid circulars
    from .models import Base  # noqa
    Base.metadata.create_all(bind=engine)


@dataclass
class AppContext:
    """
    Process-scoped state: settings plus the engine and its connection pool.
    Built once at startup, disposed at shutdown.
    """
    settings: Settings
    engine: Engine
    session_factory: sessionmaker

    def session(self) -> Session:
        return self.session_factory()

    def dispose(self) -> None:
        logger.info("draining connection pool")
        self.engine.dispose()


def create_context(settings: Optional[Settings] = None) -> AppContext:
    settings = settings or Settings.from_env()
    engine = make_engine(settings)
    factory = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
    logger.info("database engine ready (%s)", engine.url.render_as_string(hide_password=True))
    return AppContext(settings=settings, engine=engine, session_factory=factory)
