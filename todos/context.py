"""Helpers for working with Flask globals outside of a request."""

import os
from typing import Any, Mapping, Optional

from flask import Flask, current_app, has_app_context


def get_application_config(app: Optional[Flask] = None) -> Mapping[str, Any]:
    """
    Get a configuration from the current app, or fall back to env.

    Parameters
    ----------
    app : :class:`flask.Flask`

    Returns
    -------
    dict-like
        This is either the current Flask application configuration, or
        ``os.environ``. Either of these should support the ``get()`` method.
    """
    if app is not None:
        return app.config
    if has_app_context():
        return current_app.config
    return os.environ
