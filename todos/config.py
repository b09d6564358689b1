"""Flask configuration."""

import os

LOGFILE = os.environ.get('LOGFILE')
LOGLEVEL = os.environ.get('LOGLEVEL', 20)

JWT_SECRET = os.environ.get(
    'JWT_SECRET',
    'not-a-real-secret-set-JWT_SECRET-in-production'
)
"""Symmetric key used to sign and verify bearer tokens (HS256)."""

JWT_ISSUER = os.environ.get('JWT_ISSUER', 'todos')
"""Value of the ``iss`` claim; tokens from other issuers are rejected."""

JWT_AUDIENCE = os.environ.get('JWT_AUDIENCE', 'todos-api')
"""Value of the ``aud`` claim; tokens for other audiences are rejected."""

JWT_EXPIRES = int(os.environ.get('JWT_EXPIRES', 24 * 60 * 60))
"""Lifetime of an issued token, in seconds."""

MIN_PASSWORD_LENGTH = int(os.environ.get('MIN_PASSWORD_LENGTH', 6))

SQLALCHEMY_DATABASE_URI = os.environ.get('SQLALCHEMY_DATABASE_URI',
                                         'sqlite://')
SQLALCHEMY_TRACK_MODIFICATIONS = False
CREATE_DB = bool(int(os.environ.get('CREATE_DB', 0)))
"""If 1, tables are created when the application starts."""
