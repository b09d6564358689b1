"""Provides application for development purposes."""

from todos.factory import create_web_app
from todos.services import database

app = create_web_app()
with app.app_context():
    database.create_all()
