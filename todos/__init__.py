"""
To-do list API service.

Users register with a username and password, log in to obtain a signed bearer
token, and then create, read, update, toggle and delete their own to-do items.

The Flask application is built by :func:`todos.factory.create_web_app`.
Requests pass through :class:`todos.auth.middleware.AuthMiddleware`, which
verifies the bearer token and attaches the caller's session to the request.
Routes hand the caller's identity explicitly to the controllers, which in turn
call the services in :mod:`todos.services`. Every item query is scoped to the
owner's account; an item owned by someone else is indistinguishable from an
item that does not exist.
"""
