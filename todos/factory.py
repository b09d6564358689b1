"""Application factory for the to-do service."""

import re
from typing import Any, Mapping, Optional

from flask import Flask, Response, jsonify
from werkzeug.exceptions import HTTPException, Forbidden, Unauthorized, \
    BadRequest, MethodNotAllowed, InternalServerError, NotFound

from . import logging
from .auth import Auth, tokens
from .auth.middleware import AuthMiddleware
from .encode import ISO8601JSONProvider
from .middleware import wrap
from .routes import blueprint
from .services import database

logger = logging.getLogger(__name__)


def create_web_app(config: Optional[Mapping[str, Any]] = None) -> Flask:
    """
    Initialize and configure the to-do application.

    Parameters
    ----------
    config : dict-like
        Overrides for the values in :mod:`todos.config`. These are applied
        before any extension reads the configuration.

    """
    app = Flask('todos')
    app.config.from_pyfile('config.py')
    if config is not None:
        app.config.update(config)
    app.json = ISO8601JSONProvider(app)

    database.init_app(app)
    tokens.init_app(app)
    Auth(app)    # Attaches the caller's session to the request.
    app.register_blueprint(blueprint)

    middleware = [AuthMiddleware]
    wrap(app, middleware)

    if app.config['CREATE_DB']:
        with app.app_context():
            database.create_all()

    register_error_handlers(app)
    return app


def register_error_handlers(app: Flask) -> None:
    """Register error handlers for the Flask app."""
    app.errorhandler(Forbidden)(jsonify_exception)
    app.errorhandler(Unauthorized)(jsonify_exception)
    app.errorhandler(BadRequest)(jsonify_exception)
    app.errorhandler(InternalServerError)(jsonify_exception)
    app.errorhandler(NotFound)(jsonify_exception)
    app.errorhandler(MethodNotAllowed)(jsonify_exception)
    app.errorhandler(HTTPException)(jsonify_exception)
    app.errorhandler(Exception)(handle_unexpected_error)


def _error_code(error: HTTPException) -> str:
    """E.g. ``Method Not Allowed`` -> ``method_not_allowed``."""
    return re.sub(r'[^a-z0-9]+', '_', (error.name or 'error').lower()) \
        .strip('_')


def jsonify_exception(error: HTTPException) -> Response:
    """Render exceptions as JSON."""
    exc_resp = error.get_response()
    response: Response = jsonify(error=_error_code(error),
                                 reason=error.description)
    response.status_code = exc_resp.status_code
    if error.code == 405 and 'Allow' in exc_resp.headers:
        response.headers['Allow'] = exc_resp.headers['Allow']
    return response


def handle_unexpected_error(error: Exception) -> Response:
    """Log anything we did not anticipate, and tell the client nothing."""
    logger.exception('Unhandled exception: %s', error)
    return jsonify_exception(InternalServerError())
