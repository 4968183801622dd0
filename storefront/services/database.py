"""Database session and Flask application integration."""

import logging
from contextlib import contextmanager
from typing import Generator

from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import text
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm.session import Session

from .exceptions import Unavailable

logger = logging.getLogger(__name__)

db: SQLAlchemy = SQLAlchemy()


@contextmanager
def transaction() -> Generator[Session, None, None]:
    """
    Context manager for a database transaction.

    Commits when the block exits normally (including anything the caller has
    already flushed); rolls back and re-raises otherwise. An
    :class:`OperationalError` (e.g. the database went away) is re-raised as
    :class:`.Unavailable` so callers can retry.
    """
    try:
        yield db.session
        db.session.commit()
    except OperationalError as e:
        logger.warning('Database unavailable, rolling back: %s', e)
        db.session.rollback()
        raise Unavailable('Database unavailable') from e
    except Exception as e:
        logger.warning('Commit failed, rolling back: %s', str(e))
        db.session.rollback()
        raise


def init_app(app: Flask) -> None:
    """Attach the database session to the application."""
    db.init_app(app)


def create_all() -> None:
    """Create all tables in the database."""
    from . import models  # noqa: F401  Registers the tables on ``db``.
    db.create_all()


def drop_all() -> None:
    """Drop all tables in the database."""
    db.drop_all()


def is_available() -> bool:
    """Check our connection to the database."""
    try:
        db.session.execute(text('SELECT 1'))
    except Exception as e:
        logger.error('Encountered an error talking to database: %s', e)
        return False
    return True
