"""Tests for :mod:`todos.routes.api`."""

import json
import os
from datetime import datetime, timedelta
from typing import Any
from unittest import TestCase, mock

import jsonschema
from flask import Flask
from pytz import UTC
from werkzeug.exceptions import NotFound

from todos import domain
from todos.auth import tokens
from todos.factory import create_web_app

SCHEMA_PATH = os.path.join(os.path.dirname(os.path.dirname(__file__)),
                           'schema')


def load_schema(name: str) -> dict:
    """Load a JSON schema from the ``schema`` directory."""
    with open(os.path.join(SCHEMA_PATH, name)) as f:
        schema: dict = json.load(f)
    return schema


def generate_token(app: Flask, user_id: str = 'abc-123',
                   now: Any = None) -> str:
    """Helper function for generating a bearer token."""
    return tokens.issue(domain.Account('alice', user_id),
                        tokens.current_config(app), now=now)


ITEM_DATA = {
    'id': 1,
    'title': 'buy milk',
    'description': None,
    'isCompleted': False,
    'createdAt': datetime(2024, 5, 1, 12, 30, tzinfo=UTC),
    'completedAt': None
}


class TestAPIRoutes(TestCase):
    """Tests for the JSON API routes."""

    def setUp(self) -> None:
        """Initialize the Flask application, and get a client for testing."""
        self.app = create_web_app({'SQLALCHEMY_DATABASE_URI': 'sqlite://'})
        self.client = self.app.test_client()
        self.headers = {
            'Authorization': f'Bearer {generate_token(self.app)}'
        }

    def assertValid(self, data: Any, schema_name: str) -> None:
        """Validate ``data`` against a JSON schema."""
        try:
            jsonschema.validate(data, load_schema(schema_name))
        except jsonschema.exceptions.ValidationError as e:
            self.fail(e)

    def test_status(self) -> None:
        """Endpoint /status reports whether we can reach the database."""
        response = self.client.get('/status')
        self.assertEqual(response.status_code, 200)

        with mock.patch('todos.services.database.is_available',
                        return_value=False):
            response = self.client.get('/status')
        self.assertEqual(response.status_code, 503)

    @mock.patch('todos.controllers.accounts.register')
    def test_register(self, mock_register: Any) -> None:
        """POST to /auth/register registers a new account."""
        data = {
            'message': 'User registered successfully',
            'user': {'id': 'abc-123', 'username': 'alice',
                     'firstName': 'DefaultFirstName',
                     'lastName': 'DefaultLastName',
                     'address': 'DefaultAddress',
                     'phoneNumber': '1234567890'}
        }
        mock_register.return_value = data, 200, {}
        payload = {'username': 'alice', 'password': 'secret1'}
        response = self.client.post('/auth/register', data=json.dumps(payload))
        self.assertEqual(response.status_code, 200)
        self.assertDictEqual(json.loads(response.data), data)
        self.assertValid(json.loads(response.data), 'account.json')
        mock_register.assert_called_once_with(payload)

    @mock.patch('todos.controllers.accounts.login')
    def test_login(self, mock_login: Any) -> None:
        """POST to /auth/login returns a token."""
        mock_login.return_value = {'token': 'footoken'}, 200, {}
        response = self.client.post('/auth/login',
                                    json={'username': 'alice',
                                          'password': 'secret1'})
        self.assertEqual(response.status_code, 200)
        self.assertDictEqual(json.loads(response.data), {'token': 'footoken'})

    def test_malformed_json(self) -> None:
        """A body that is not JSON is a bad request."""
        response = self.client.post('/auth/login', data='{not json')
        self.assertEqual(response.status_code, 400)
        self.assertValid(json.loads(response.data), 'error.json')

    @mock.patch('todos.controllers.todos.list_todos')
    def test_list_todos(self, mock_list_todos: Any) -> None:
        """GET /todos lists the caller's items."""
        mock_list_todos.return_value = [ITEM_DATA], 200, {}
        response = self.client.get('/todos', headers=self.headers)
        self.assertEqual(response.status_code, 200)
        data = json.loads(response.data)
        self.assertEqual(data[0]['createdAt'], '2024-05-01T12:30:00+00:00')
        self.assertValid(data, 'todo_list.json')
        mock_list_todos.assert_called_once_with('abc-123')

    @mock.patch('todos.controllers.todos.get_todo')
    def test_read_todo(self, mock_get_todo: Any) -> None:
        """GET /todos/<id> returns an item."""
        mock_get_todo.return_value = ITEM_DATA, 200, {}
        response = self.client.get('/todos/1', headers=self.headers)
        self.assertEqual(response.status_code, 200)
        self.assertValid(json.loads(response.data), 'todo.json')
        mock_get_todo.assert_called_once_with('abc-123', 1)

    @mock.patch('todos.controllers.todos.get_todo')
    def test_read_todo_not_found(self, mock_get_todo: Any) -> None:
        """Not found is rendered as JSON."""
        mock_get_todo.side_effect = NotFound('No such item')
        response = self.client.get('/todos/1', headers=self.headers)
        self.assertEqual(response.status_code, 404)
        data = json.loads(response.data)
        self.assertValid(data, 'error.json')
        self.assertDictEqual(data, {'error': 'not_found',
                                    'reason': 'No such item'})

    @mock.patch('todos.controllers.todos.create_todo')
    def test_create_todo(self, mock_create_todo: Any) -> None:
        """POST /todos creates an item."""
        mock_create_todo.return_value = \
            ITEM_DATA, 201, {'Location': '/todos/1'}
        response = self.client.post('/todos', json={'title': 'buy milk'},
                                    headers=self.headers)
        self.assertEqual(response.status_code, 201)
        self.assertTrue(response.headers['Location'].endswith('/todos/1'))
        self.assertValid(json.loads(response.data), 'todo.json')
        mock_create_todo.assert_called_once_with('abc-123',
                                                 {'title': 'buy milk'})

    @mock.patch('todos.controllers.todos.update_todo')
    def test_update_todo(self, mock_update_todo: Any) -> None:
        """PUT /todos/<id> returns no content."""
        mock_update_todo.return_value = None, 204, {}
        response = self.client.put('/todos/1', json={'title': 'buy oat milk'},
                                   headers=self.headers)
        self.assertEqual(response.status_code, 204)
        self.assertEqual(response.data, b'')
        mock_update_todo.assert_called_once_with('abc-123', 1,
                                                 {'title': 'buy oat milk'})

    @mock.patch('todos.controllers.todos.toggle_completion')
    def test_toggle_completion(self, mock_toggle: Any) -> None:
        """PUT /todos/toggle-completion/<id> flips the flag."""
        data = {'isCompleted': True, 'completedAt': None,
                'message': 'Task marked as completed'}
        mock_toggle.return_value = data, 200, {}
        response = self.client.put('/todos/toggle-completion/1',
                                   headers=self.headers)
        self.assertEqual(response.status_code, 200)
        self.assertTrue(json.loads(response.data)['isCompleted'])
        mock_toggle.assert_called_once_with('abc-123', 1)

    @mock.patch('todos.controllers.todos.delete_todo')
    def test_delete_todo(self, mock_delete_todo: Any) -> None:
        """DELETE /todos/<id> returns no content."""
        mock_delete_todo.return_value = None, 204, {}
        response = self.client.delete('/todos/1', headers=self.headers)
        self.assertEqual(response.status_code, 204)
        mock_delete_todo.assert_called_once_with('abc-123', 1)

    def test_method_not_allowed(self) -> None:
        """Unsupported methods are rendered as JSON."""
        response = self.client.patch('/todos/1', headers=self.headers)
        self.assertEqual(response.status_code, 405)
        self.assertEqual(json.loads(response.data)['error'],
                         'method_not_allowed')


class TestTokenRequired(TestCase):
    """The /todos endpoints require a valid bearer token."""

    def setUp(self) -> None:
        """Initialize the Flask application, and get a client for testing."""
        self.app = create_web_app({'SQLALCHEMY_DATABASE_URI': 'sqlite://'})
        self.client = self.app.test_client()

    def _assert_unauthorized(self, headers: dict) -> None:
        for method, path in [('get', '/todos'), ('post', '/todos'),
                             ('get', '/todos/1'), ('put', '/todos/1'),
                             ('put', '/todos/toggle-completion/1'),
                             ('delete', '/todos/1')]:
            response = getattr(self.client, method)(path, json={},
                                                    headers=headers)
            self.assertEqual(response.status_code, 401,
                             f'{method.upper()} {path} requires a token')
            data = json.loads(response.data)
            self.assertEqual(data['error'], 'unauthorized')

    @mock.patch('todos.controllers.todos.list_todos')
    def test_no_token(self, mock_list_todos: Any) -> None:
        """Without a token, the caller is unauthorized."""
        self._assert_unauthorized({})
        mock_list_todos.assert_not_called()

    def test_malformed_header(self) -> None:
        """The token must be given with the bearer scheme."""
        self._assert_unauthorized({'Authorization': generate_token(self.app)})

    def test_expired_token(self) -> None:
        """An expired token is unauthorized."""
        then = datetime.now(tz=UTC) - timedelta(days=2)
        token = generate_token(self.app, now=then)
        self._assert_unauthorized({'Authorization': f'Bearer {token}'})

    def test_forged_token(self) -> None:
        """A token signed with another key is unauthorized."""
        config = tokens.current_config(self.app)._replace(secret='forged')
        token = tokens.issue(domain.Account('alice', 'abc-123'), config)
        self._assert_unauthorized({'Authorization': f'Bearer {token}'})

    def test_open_endpoints(self) -> None:
        """Registration, login and status do not need a token."""
        response = self.client.get('/status')
        self.assertEqual(response.status_code, 200)
        response = self.client.post('/auth/login', json={})
        self.assertEqual(response.status_code, 400)

    @mock.patch('todos.controllers.accounts.login')
    @mock.patch('todos.controllers.accounts.register')
    def test_open_endpoints_ignore_bad_token(self, mock_register: Any,
                                             mock_login: Any) -> None:
        """A stale or malformed token does not block the open endpoints."""
        mock_register.return_value = {'message': 'ok', 'user': {}}, 200, {}
        mock_login.return_value = {'token': 'footoken'}, 200, {}
        then = datetime.now(tz=UTC) - timedelta(days=2)
        expired = generate_token(self.app, now=then)
        for headers in [{'Authorization': f'Bearer {expired}'},
                        {'Authorization': 'Bearer junk'},
                        {'Authorization': 'Basic xyz'}]:
            response = self.client.post('/auth/login',
                                        json={'username': 'alice',
                                              'password': 'secret1'},
                                        headers=headers)
            self.assertEqual(response.status_code, 200)
            response = self.client.post('/auth/register',
                                        json={'username': 'alice',
                                              'password': 'secret1'},
                                        headers=headers)
            self.assertEqual(response.status_code, 200)
            response = self.client.get('/status', headers=headers)
            self.assertEqual(response.status_code, 200)
