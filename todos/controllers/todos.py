"""Handles all to-do item requests."""

from typing import Any, Dict, Optional, Tuple

from werkzeug.exceptions import BadRequest, InternalServerError, NotFound

from .. import domain, status
from ..exceptions import ConflictError, NotFoundError, StoreError
from ..services import todos
from ..shared import url_for

MAX_TITLE_LENGTH = 255

NO_SUCH_ITEM = 'No such item'
STORE_UNAVAILABLE = 'Could not reach the data store'
CONCURRENT_CHANGE = 'The item was changed by another request'
COMPLETED = 'Task marked as completed'
NOT_COMPLETED = 'Task marked as not completed'

Response = Tuple[Optional[Any], int, Dict[str, str]]


def _to_dto(item: domain.ToDoItem) -> Dict[str, Any]:
    """Render an item for the client. The owner is never included."""
    return {
        'id': item.item_id,
        'title': item.title,
        'description': item.description,
        'isCompleted': item.is_completed,
        'createdAt': item.created_at,
        'completedAt': item.completed_at
    }


def _text(payload: dict, field: str,
          max_length: Optional[int] = None) -> Optional[str]:
    value = payload[field]
    if value is not None and not isinstance(value, str):
        raise BadRequest(f'{field} must be a string or null')
    if max_length is not None and value and len(value) > max_length:
        raise BadRequest(f'{field} must be at most {max_length} characters')
    return value


def _to_patch(payload: Any) -> domain.ToDoPatch:
    """
    Build a :class:`domain.ToDoPatch` from a JSON request body.

    Keys that are absent stay :data:`domain.UNSET`, and so do empty strings
    for ``title`` and ``description``; ``null`` clears them. Anything not
    listed here (e.g. an owner or timestamp) is ignored.
    """
    if not isinstance(payload, dict):
        raise BadRequest('Expected a JSON object')
    fields: Dict[str, Any] = {}
    for field, max_length in [('title', MAX_TITLE_LENGTH),
                              ('description', None)]:
        if field in payload:
            value = _text(payload, field, max_length)
            if value != '':
                fields[field] = value
    if 'isCompleted' in payload:
        if not isinstance(payload['isCompleted'], bool):
            raise BadRequest('isCompleted must be a boolean')
        fields['is_completed'] = payload['isCompleted']
    return domain.ToDoPatch(**fields)


def list_todos(owner_id: str) -> Response:
    """
    Retrieve all of the caller's items.

    Parameters
    ----------
    owner_id : str
        The verified identity of the caller.

    Returns
    -------
    list
        Item data.
    int
        An HTTP status code.
    dict
        Some extra headers to add to the response.

    """
    try:
        items = todos.list_items(owner_id)
    except StoreError as e:
        raise InternalServerError(STORE_UNAVAILABLE) from e
    return [_to_dto(item) for item in items], status.HTTP_200_OK, {}


def get_todo(owner_id: str, item_id: int) -> Response:
    """
    Retrieve one of the caller's items.

    Parameters
    ----------
    owner_id : str
        The verified identity of the caller.
    item_id : int

    Returns
    -------
    dict
        Item data.
    int
        An HTTP status code.
    dict
        Some extra headers to add to the response.

    Raises
    ------
    :class:`.NotFound`
        If there is no such item, or if it belongs to someone else.

    """
    try:
        item = todos.get_item(owner_id, item_id)
    except NotFoundError as e:
        raise NotFound(NO_SUCH_ITEM) from e
    except StoreError as e:
        raise InternalServerError(STORE_UNAVAILABLE) from e
    return _to_dto(item), status.HTTP_200_OK, {}


def create_todo(owner_id: str, payload: Any) -> Response:
    """
    Create a new item owned by the caller.

    Parameters
    ----------
    owner_id : str
        The verified identity of the caller. Any owner in ``payload`` is
        ignored.
    payload : dict
        May include ``title``, ``description`` and ``isCompleted``.

    Returns
    -------
    dict
        Item data.
    int
        An HTTP status code.
    dict
        Includes the ``Location`` of the new item.

    """
    changes = _to_patch(payload).changes()
    try:
        item = todos.create_item(
            owner_id,
            title=changes.get('title'),
            description=changes.get('description'),
            is_completed=changes.get('is_completed', False)
        )
    except ConflictError as e:
        raise InternalServerError('Could not create the item') from e
    except StoreError as e:
        raise InternalServerError(STORE_UNAVAILABLE) from e
    location = url_for('api.read_todo', item_id=item.item_id)
    return _to_dto(item), status.HTTP_201_CREATED, {'Location': location}


def update_todo(owner_id: str, item_id: int, payload: Any) -> Response:
    """
    Update some fields of one of the caller's items.

    Parameters
    ----------
    owner_id : str
    item_id : int
    payload : dict
        Only the fields present are changed. If ``id`` is included, it must
        match ``item_id``.

    Returns
    -------
    None
    int
        An HTTP status code.
    dict
        Some extra headers to add to the response.

    Raises
    ------
    :class:`.BadRequest`
        If the payload is malformed or its ``id`` does not match.
    :class:`.NotFound`
        If there is no such item, or if it belongs to someone else.

    """
    patch = _to_patch(payload)
    if 'id' in payload and payload['id'] != item_id:
        raise BadRequest('Item id in request does not match')
    try:
        todos.update_item(owner_id, item_id, patch)
    except NotFoundError as e:
        raise NotFound(NO_SUCH_ITEM) from e
    except ConflictError as e:
        raise InternalServerError(CONCURRENT_CHANGE) from e
    except StoreError as e:
        raise InternalServerError(STORE_UNAVAILABLE) from e
    return None, status.HTTP_204_NO_CONTENT, {}


def toggle_completion(owner_id: str, item_id: int) -> Response:
    """Flip the completion flag of one of the caller's items."""
    try:
        item = todos.toggle_completion(owner_id, item_id)
    except NotFoundError as e:
        raise NotFound(NO_SUCH_ITEM) from e
    except ConflictError as e:
        raise InternalServerError(CONCURRENT_CHANGE) from e
    except StoreError as e:
        raise InternalServerError(STORE_UNAVAILABLE) from e
    data = {
        'isCompleted': item.is_completed,
        'completedAt': item.completed_at,
        'message': COMPLETED if item.is_completed else NOT_COMPLETED
    }
    return data, status.HTTP_200_OK, {}


def delete_todo(owner_id: str, item_id: int) -> Response:
    """Permanently delete one of the caller's items."""
    try:
        todos.delete_item(owner_id, item_id)
    except NotFoundError as e:
        raise NotFound(NO_SUCH_ITEM) from e
    except ConflictError as e:
        raise InternalServerError(CONCURRENT_CHANGE) from e
    except StoreError as e:
        raise InternalServerError(STORE_UNAVAILABLE) from e
    return None, status.HTTP_204_NO_CONTENT, {}
