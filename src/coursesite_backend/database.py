import logging
from typing import Generator
from sqlalchemy import create_engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import sessionmaker, Session

from coursesite_backend.settings import settings

logger = logging.getLogger(__name__)

_database_url = settings.database_url

if _database_url.startswith("sqlite"):
    _database_options = {
        "connect_args": {"check_same_thread": False}
    }
else:
    _database_options = {
        "pool_pre_ping": True,
        "pool_size": 10,
        "max_overflow": 5,
        "pool_timeout": 30,
        "pool_recycle": 300
    }

_engine = create_engine(_database_url, **_database_options)
_SessionLocal = sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=_engine)


def get_engine():
    return _engine


def get_db() -> Generator[Session, None, None]:

    db = _SessionLocal()

    try:
        yield db
    except OperationalError as e:
        logger.error(f"Database connection failed: {e}")
        db.rollback()
        raise
    finally:
        db.close()
