"""SQLAlchemy models for the to-do data store."""

import uuid
from datetime import datetime

from flask_sqlalchemy import SQLAlchemy
from pytz import UTC
from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, \
    String, Text
from sqlalchemy.orm import relationship

db: SQLAlchemy = SQLAlchemy()


def _new_user_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


class DBAccount(db.Model):
    """Persistence for :class:`domain.Account` and its credential."""

    __tablename__ = 'accounts'

    user_id = Column(String(36), primary_key=True, default=_new_user_id)
    username = Column(String(256), nullable=False)
    normalized_username = Column(String(256), nullable=False, unique=True,
                                 index=True)
    """Lower-cased :attr:`.username`; enforces case-insensitive uniqueness."""

    password_hash = Column(String(255), nullable=False)
    """Salted hash from :func:`werkzeug.security.generate_password_hash`."""

    first_name = Column(String(255), nullable=False)
    last_name = Column(String(255), nullable=False)
    address = Column(String(255), nullable=False)
    phone_number = Column(String(50), nullable=False)
    created = Column(DateTime(timezone=True), default=_utcnow)

    items = relationship('DBToDoItem', back_populates='owner',
                         cascade='all, delete-orphan')


class DBToDoItem(db.Model):
    """Persistence for :class:`domain.ToDoItem`."""

    __tablename__ = 'todo_items'

    item_id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=True)
    description = Column(Text, nullable=True)
    is_completed = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False,
                        default=_utcnow)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    owner_id = Column(ForeignKey('accounts.user_id', ondelete='CASCADE'),
                      nullable=False, index=True)
    version = Column(Integer, nullable=False)
    """Row version; a stale version on flush raises ``StaleDataError``."""

    owner = relationship('DBAccount', back_populates='items')

    __mapper_args__ = {'version_id_col': version}
