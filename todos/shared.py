"""Shared helpers for controllers."""

from typing import Any

from flask import url_for as flask_url_for
from werkzeug.routing import BuildError


def url_for(endpoint: str, **values: Any) -> str:
    """
    Build an URL for an ``endpoint``.

    Tries Flask first. Outside of a request context, or if the endpoint is not
    registered, falls back to the name of the endpoint.
    """
    try:
        return flask_url_for(endpoint, **values)
    except (RuntimeError, BuildError):
        return endpoint
