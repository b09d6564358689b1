"""Exceptions raised by the to-do services."""


class ValidationError(ValueError):
    """Input is missing or malformed."""


class AuthenticationError(RuntimeError):
    """Credentials could not be verified."""


class NotFoundError(RuntimeError):
    """Resource does not exist, or is not owned by the caller."""


class ConflictError(RuntimeError):
    """A concurrent modification was detected by the store."""


class StoreError(IOError):
    """The underlying data store is unavailable or misbehaving."""


class InvalidToken(ValueError):
    """A bearer token could not be verified."""


class ExpiredToken(InvalidToken):
    """A bearer token is well-formed and signed, but has expired."""
