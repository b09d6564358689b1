"""Database integration for accounts and to-do items."""

from contextlib import contextmanager
from typing import Generator, Optional

from flask import Flask
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm.exc import StaleDataError
from sqlalchemy.orm.session import Session

from ... import logging
from ...exceptions import ConflictError, StoreError
from .models import db, DBAccount, DBToDoItem

logger = logging.getLogger(__name__)


@contextmanager
def transaction() -> Generator[Session, None, None]:
    """
    Context manager for database transaction.

    Commits on exit if anything is pending. On failure the session is rolled
    back, and SQLAlchemy errors are translated.

    Raises
    ------
    :class:`.ConflictError`
        A concurrent change was detected (stale row version, or a unique
        constraint violated by a concurrent insert).
    :class:`.StoreError`
        Any other problem talking to the database.
    """
    try:
        yield db.session
        # The caller may have explicitly committed already, in order to
        # implement exception handling logic. We only want to commit here if
        # there is anything remaining that is not flushed.
        if db.session.new or db.session.dirty or db.session.deleted:
            db.session.commit()
    except (StaleDataError, IntegrityError) as e:
        logger.info('Concurrent modification, rolling back: %s', e)
        db.session.rollback()
        raise ConflictError('Concurrent modification') from e
    except SQLAlchemyError as e:
        logger.error('Commit failed, rolling back: %s', e)
        db.session.rollback()
        raise StoreError('Database error') from e
    except Exception:
        db.session.rollback()
        raise


def init_app(app: Optional[Flask]) -> None:
    """Set configuration defaults and attach session to the application."""
    db.init_app(app)


def create_all() -> None:
    """Create all tables in the database."""
    db.create_all()


def drop_all() -> None:
    """Drop all tables in the database."""
    db.drop_all()


def is_available() -> bool:
    """Check our connection to the database."""
    try:
        db.session.execute(text('SELECT 1'))
    except SQLAlchemyError as e:
        logger.error('Encountered an error talking to database: %s', e)
        db.session.rollback()
        return False
    return True


__all__ = ('db', 'DBAccount', 'DBToDoItem', 'transaction', 'init_app',
           'create_all', 'drop_all', 'is_available')
