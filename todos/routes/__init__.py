"""Flask blueprints for the to-do service."""

from .api import blueprint

__all__ = ('blueprint',)
