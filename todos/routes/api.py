"""Provides routes for the JSON API."""

from typing import Any, Dict, Optional

from flask import Blueprint, Response, jsonify, make_response, request

from .. import status
from ..auth.decorators import authenticated
from ..controllers import accounts, todos
from ..services import database

blueprint = Blueprint('api', __name__, url_prefix='')


def _respond(data: Optional[Any], status_code: int,
             headers: Dict[str, str]) -> Response:
    if data is None:
        response = make_response('', status_code)
    else:
        response = jsonify(data)
        response.status_code = status_code
    response.headers.extend(headers)
    return response


@blueprint.route('/status', methods=['GET'])
def ok() -> tuple:
    """Health check endpoint."""
    if not database.is_available():
        return jsonify({'status': 'unavailable'}), \
            status.HTTP_503_SERVICE_UNAVAILABLE
    return jsonify({'status': 'ok'}), status.HTTP_200_OK


@blueprint.route('/auth/register', methods=['POST'])
def register() -> Response:
    """Register a new account."""
    payload = request.get_json(force=True)    # Ignore Content-Type header.
    return _respond(*accounts.register(payload))


@blueprint.route('/auth/login', methods=['POST'])
def login() -> Response:
    """Exchange a username and password for a bearer token."""
    payload = request.get_json(force=True)
    return _respond(*accounts.login(payload))


@blueprint.route('/todos', methods=['GET'])
@authenticated
def list_todos() -> Response:
    """List the caller's items."""
    return _respond(*todos.list_todos(request.auth.user_id))


@blueprint.route('/todos', methods=['POST'])
@authenticated
def create_todo() -> Response:
    """Create a new item."""
    payload = request.get_json(force=True)
    return _respond(*todos.create_todo(request.auth.user_id, payload))


@blueprint.route('/todos/<int:item_id>', methods=['GET'])
@authenticated
def read_todo(item_id: int) -> Response:
    """Provide the data of one item."""
    return _respond(*todos.get_todo(request.auth.user_id, item_id))


@blueprint.route('/todos/<int:item_id>', methods=['PUT'])
@authenticated
def update_todo(item_id: int) -> Response:
    """Update some fields of an item."""
    payload = request.get_json(force=True)
    return _respond(*todos.update_todo(request.auth.user_id, item_id,
                                       payload))


@blueprint.route('/todos/toggle-completion/<int:item_id>', methods=['PUT'])
@authenticated
def toggle_completion(item_id: int) -> Response:
    """Flip the completion flag of an item."""
    return _respond(*todos.toggle_completion(request.auth.user_id, item_id))


@blueprint.route('/todos/<int:item_id>', methods=['DELETE'])
@authenticated
def delete_todo(item_id: int) -> Response:
    """Delete an item."""
    return _respond(*todos.delete_todo(request.auth.user_id, item_id))
