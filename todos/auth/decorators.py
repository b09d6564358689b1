"""
Authentication requirement for Flask routes.

This module provides :func:`authenticated`, a decorator used to protect Flask
routes that may only be used by a caller with a verified bearer token:

.. code-block:: python

   from flask import request
   from todos.auth.decorators import authenticated


   @blueprint.route('/todos', methods=['GET'])
   @authenticated
   def list_todos():
       data, code, headers = todos.list_todos(request.auth.user_id)
       return jsonify(data), code, headers


The decorator does not decide *which* resources the caller may touch. Routes
pass ``request.auth.user_id`` to the controllers explicitly, and every query
is scoped to that owner.
"""

from functools import wraps
from typing import Any, Callable

from flask import request
from werkzeug.exceptions import Unauthorized

from .. import logging

logger = logging.getLogger(__name__)


def authenticated(func: Callable) -> Callable:
    """
    Require a verified, unexpired session on the request.

    Raises
    ------
    :class:`.Unauthorized`
        Raised when the token was rejected, or session data is not
        available or has expired.

    """
    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        error = getattr(request, 'auth_error', None)
        if error is not None:
            logger.debug('Auth token was rejected; aborting')
            raise error
        session = getattr(request, 'auth', None)
        if not session or not session.user_id:
            logger.debug('No valid session; aborting')
            raise Unauthorized('Not a valid session')
        if session.expired:
            logger.debug('Session is expired; aborting')
            raise Unauthorized('Auth token has expired')
        return func(*args, **kwargs)
    return wrapper
