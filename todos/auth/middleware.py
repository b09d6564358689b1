"""Middleware for verifying bearer tokens on requests."""

from typing import Callable, Optional

from flask import Flask
from werkzeug.exceptions import Unauthorized

from .. import logging
from ..exceptions import ExpiredToken, InvalidToken
from ..middleware import BaseMiddleware, WSGIRequest
from . import tokens

logger = logging.getLogger(__name__)


class AuthMiddleware(BaseMiddleware):
    """
    Middleware to handle auth information on requests.

    Before the request is handled by the application, the ``Authorization``
    header is parsed for a bearer token. If it is successfully verified, the
    caller's :class:`domain.Session` is attached to the request environ as
    ``environ['auth']``.

    If there is no ``Authorization`` header, ``environ['auth']`` is ``None``.
    If the header is present but the token cannot be verified, an
    :class:`.Unauthorized` exception is put in its place. It is only raised
    on routes that require a session; see
    :func:`todos.auth.decorators.authenticated`.
    """

    def __init__(self, wsgi_app: Callable, app: Optional[Flask] = None) \
            -> None:
        """Wrap ``wsgi_app``, reading token configuration from ``app``."""
        super(AuthMiddleware, self).__init__(wsgi_app, app)
        if app is None:
            raise ValueError('AuthMiddleware requires the Flask app')
        self.token_config = tokens.current_config(app)

    def before(self, environ: dict, start_response: Callable) -> WSGIRequest:
        """Decode and unpack the auth token on the request."""
        environ['auth'] = None      # Create the auth key, at a minimum.
        header = environ.get('HTTP_AUTHORIZATION')    # We may not have one.
        if header is None:
            logger.debug('No auth token')
            return environ, start_response

        scheme, _, token = header.strip().partition(' ')
        token = token.strip()
        if scheme.lower() != 'bearer' or not token:
            logger.debug('Auth header malformed')
            environ['auth'] = Unauthorized('Auth header is malformed')
            return environ, start_response

        try:
            environ['auth'] = tokens.decode(token, self.token_config)
        except ExpiredToken:
            logger.debug('Auth token expired')
            environ['auth'] = Unauthorized('Auth token has expired')
        except InvalidToken:
            logger.debug('Auth token not valid')
            environ['auth'] = Unauthorized('Invalid auth token')
        return environ, start_response
