"""Provides tools for working with authenticated caller sessions."""

from typing import Optional, Union

from flask import Flask, request

from . import decorators, middleware, tokens
from .. import domain, logging

logger = logging.getLogger(__name__)


class Auth(object):
    """
    Attaches the caller's session to the request.

    Intended for use in a Flask application factory, together with
    :class:`.middleware.AuthMiddleware`:

    .. code-block:: python

       from flask import Flask
       from todos.auth import Auth, tokens
       from todos.auth.middleware import AuthMiddleware
       from todos.middleware import wrap


       def create_web_app() -> Flask:
          app = Flask('todos')
          app.config.from_pyfile('config.py')
          tokens.init_app(app)
          Auth(app)
          wrap(app, [AuthMiddleware])
          return app

    """

    def __init__(self, app: Optional[Flask] = None) -> None:
        """
        Initialize ``app`` with session loading.

        Parameters
        ----------
        app : :class:`Flask`

        """
        if app is not None:
            self.init_app(app)

    def init_app(self, app: Flask) -> None:
        """
        Attach :meth:`.load_session` to the Flask app.

        Parameters
        ----------
        app : :class:`Flask`

        """
        self.app = app
        self.app.before_request(self.load_session)

    def load_session(self) -> None:
        """
        Attach the session unpacked by the middleware to the request.

        :class:`.middleware.AuthMiddleware` puts either a
        :class:`domain.Session`, ``None``, or an exception in the WSGI environ
        under ``auth``. An exception is kept as ``request.auth_error``, with
        ``request.auth`` set to ``None``; it is raised by
        :func:`.decorators.authenticated` on routes that need a session. Open
        routes (e.g. login) ignore it.
        """
        session: Optional[Union[domain.Session, Exception]] = \
            request.environ.get('auth')

        request.auth_error = None  # type: ignore
        if isinstance(session, Exception):
            logger.debug('Middleware passed an exception: %s', session)
            request.auth_error = session  # type: ignore
            session = None

        request.auth = session  # type: ignore
