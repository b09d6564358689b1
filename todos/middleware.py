"""Base class and helpers for WSGI middleware."""

from typing import Callable, Iterable, List, Optional, Tuple, Type

from flask import Flask

WSGIRequest = Tuple[dict, Callable]


class BaseMiddleware(object):
    """
    Base class for WSGI middlewares.

    Subclasses may implement :meth:`.before`, to act on the request environ
    before it reaches the application, and :meth:`.after`, to act on the
    response iterable on the way out.
    """

    def __init__(self, wsgi_app: Callable, app: Optional[Flask] = None) \
            -> None:
        """
        Wrap ``wsgi_app``.

        Parameters
        ----------
        wsgi_app : callable
            The WSGI application (or the next middleware) to be wrapped.
        app : :class:`flask.Flask`
            The Flask application, for middlewares that need configuration.
        """
        self.app = wsgi_app
        self.flask_app = app

    def before(self, environ: dict, start_response: Callable) -> WSGIRequest:
        """Handle the request before it is passed to the application."""
        return environ, start_response

    def after(self, response: Iterable) -> Iterable:
        """Handle the response after the application has produced it."""
        return response

    def __call__(self, environ: dict, start_response: Callable) -> Iterable:
        """Handle a WSGI request."""
        environ, start_response = self.before(environ, start_response)
        response = self.app(environ, start_response)
        return self.after(response)


def wrap(app: Flask, middlewares: List[Type[BaseMiddleware]]) -> Flask:
    """
    Wrap the WSGI application of ``app`` in ``middlewares``.

    The first middleware in the list is the first to see the request.
    """
    for middleware in reversed(middlewares):
        app.wsgi_app = middleware(app.wsgi_app, app)  # type: ignore
    return app
