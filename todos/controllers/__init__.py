"""
Request controllers for the to-do service.

Controllers take request data and the caller's identity from the routes,
call the services, and return a ``(data, status_code, headers)`` tuple.
Domain exceptions from the services are raised as werkzeug HTTP exceptions.
"""
