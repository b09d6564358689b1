"""
Provides access to to-do items in the data store.

Every function takes the identity of the caller as ``owner_id``, and every
query is filtered on it. An item that belongs to someone else is reported
exactly as if it did not exist.
"""

from datetime import datetime
from typing import List, NoReturn, Optional

from pytz import UTC
from sqlalchemy.orm.session import Session

from .. import domain, logging
from ..exceptions import ConflictError, NotFoundError
from .database import DBToDoItem, transaction

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(tz=UTC)


def _aware(value: Optional[datetime]) -> Optional[datetime]:
    """SQLite drops the timezone; everything we store is UTC."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def _to_domain(db_item: DBToDoItem) -> domain.ToDoItem:
    return domain.ToDoItem(
        item_id=db_item.item_id,
        owner_id=str(db_item.owner_id),
        title=db_item.title,
        description=db_item.description,
        is_completed=bool(db_item.is_completed),
        created_at=_aware(db_item.created_at),
        completed_at=_aware(db_item.completed_at)
    )


def _set_completed(db_item: DBToDoItem, is_completed: bool,
                   now: datetime) -> None:
    """Set the completion flag, keeping ``completed_at`` consistent."""
    db_item.is_completed = is_completed
    if is_completed:
        if db_item.completed_at is None:
            db_item.completed_at = now
    else:
        db_item.completed_at = None


def _load_dbitem(owner_id: str, item_id: int,
                 session: Session) -> DBToDoItem:
    db_item: Optional[DBToDoItem] = session.query(DBToDoItem) \
        .filter(DBToDoItem.item_id == item_id) \
        .filter(DBToDoItem.owner_id == owner_id) \
        .first()
    if db_item is None:
        raise NotFoundError(f'No item {item_id}')
    return db_item


def item_exists(owner_id: str, item_id: int) -> bool:
    """Determine whether ``owner_id`` has an item with ``item_id``."""
    with transaction() as session:
        count: int = session.query(DBToDoItem) \
            .filter(DBToDoItem.item_id == item_id) \
            .filter(DBToDoItem.owner_id == owner_id) \
            .count()
    return count > 0


def _recheck(owner_id: str, item_id: int, e: ConflictError) -> NoReturn:
    """After a conflict, decide whether the item vanished under us."""
    if not item_exists(owner_id, item_id):
        logger.debug('Item %s was deleted concurrently', item_id)
        raise NotFoundError(f'No item {item_id}') from e
    logger.error('Unresolvable conflict on item %s', item_id)
    raise e


def list_items(owner_id: str) -> List[domain.ToDoItem]:
    """
    Get all of the items owned by ``owner_id``.

    Parameters
    ----------
    owner_id : str

    Returns
    -------
    list
        Items are :class:`domain.ToDoItem` instances, ordered by id.

    Raises
    ------
    :class:`.StoreError`
        When there is a problem querying the database.

    """
    with transaction() as session:
        db_items = session.query(DBToDoItem) \
            .filter(DBToDoItem.owner_id == owner_id) \
            .order_by(DBToDoItem.item_id) \
            .all()
        return [_to_domain(db_item) for db_item in db_items]


def get_item(owner_id: str, item_id: int) -> domain.ToDoItem:
    """
    Get a single item.

    Raises
    ------
    :class:`.NotFoundError`
        If there is no such item, or it belongs to someone else.
    :class:`.StoreError`

    """
    with transaction() as session:
        return _to_domain(_load_dbitem(owner_id, item_id, session))


def create_item(owner_id: str, title: Optional[str] = None,
                description: Optional[str] = None,
                is_completed: bool = False) -> domain.ToDoItem:
    """
    Create a new item owned by ``owner_id``.

    Parameters
    ----------
    owner_id : str
        The caller. This is the only way to set the owner of an item.
    title : str
    description : str
    is_completed : bool
        If ``True``, ``completed_at`` is set to the creation time.

    Returns
    -------
    :class:`domain.ToDoItem`
        With the ``item_id`` assigned by the store.

    """
    now = _now()
    with transaction() as session:
        db_item = DBToDoItem(
            owner_id=owner_id,
            title=title,
            description=description,
            created_at=now
        )
        _set_completed(db_item, bool(is_completed), now)
        session.add(db_item)
    item = _to_domain(db_item)
    logger.debug('Created item %s', item.item_id)
    return item


def update_item(owner_id: str, item_id: int,
                patch: domain.ToDoPatch) -> domain.ToDoItem:
    """
    Apply a partial update to an item.

    Only the fields provided in ``patch`` are written. Completing an item
    stamps ``completed_at`` (if it was not already set); un-completing it
    clears ``completed_at``. The owner cannot be changed.

    Parameters
    ----------
    owner_id : str
    item_id : int
    patch : :class:`domain.ToDoPatch`

    Returns
    -------
    :class:`domain.ToDoItem`
        The item as stored after the update.

    Raises
    ------
    :class:`.NotFoundError`
        If there is no such item for this owner, including when it was
        deleted while we were updating it.
    :class:`.ConflictError`
        If a concurrent change could not be reconciled.

    """
    changes = patch.changes()
    try:
        with transaction() as session:
            db_item = _load_dbitem(owner_id, item_id, session)
            if 'title' in changes:
                db_item.title = changes['title']
            if 'description' in changes:
                db_item.description = changes['description']
            if 'is_completed' in changes:
                _set_completed(db_item, bool(changes['is_completed']),
                               _now())
    except ConflictError as e:
        _recheck(owner_id, item_id, e)
    return get_item(owner_id, item_id)


def toggle_completion(owner_id: str, item_id: int) -> domain.ToDoItem:
    """
    Invert the completion flag of an item.

    Raises
    ------
    :class:`.NotFoundError`
    :class:`.ConflictError`

    """
    try:
        with transaction() as session:
            db_item = _load_dbitem(owner_id, item_id, session)
            _set_completed(db_item, not db_item.is_completed, _now())
    except ConflictError as e:
        _recheck(owner_id, item_id, e)
    return get_item(owner_id, item_id)


def delete_item(owner_id: str, item_id: int) -> None:
    """
    Permanently remove an item.

    Raises
    ------
    :class:`.NotFoundError`
    :class:`.ConflictError`

    """
    try:
        with transaction() as session:
            db_item = _load_dbitem(owner_id, item_id, session)
            session.delete(db_item)
    except ConflictError as e:
        _recheck(owner_id, item_id, e)
    logger.debug('Deleted item %s', item_id)
