"""Functions for issuing and verifying bearer tokens."""

from datetime import datetime, timedelta
from typing import Any, Mapping, NamedTuple, Optional

import jwt
from flask import Flask, current_app
from pytz import UTC

from .. import domain
from ..exceptions import ExpiredToken, InvalidToken

ALGORITHM = 'HS256'
EXTENSION_KEY = 'todos.tokens'


class TokenConfig(NamedTuple):
    """Everything needed to sign and verify tokens. Built once at startup."""

    secret: str
    issuer: str
    audience: str
    duration: int = 24 * 60 * 60
    """Token lifetime in seconds."""

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> 'TokenConfig':
        """Build from a Flask config (or any mapping)."""
        return cls(
            secret=config['JWT_SECRET'],
            issuer=config['JWT_ISSUER'],
            audience=config['JWT_AUDIENCE'],
            duration=int(config.get('JWT_EXPIRES', 24 * 60 * 60))
        )


def init_app(app: Flask) -> TokenConfig:
    """Read the token configuration and attach it to ``app``."""
    config = TokenConfig.from_config(app.config)
    app.extensions[EXTENSION_KEY] = config
    return config


def current_config(app: Optional[Flask] = None) -> TokenConfig:
    """Get the :class:`.TokenConfig` attached by :func:`init_app`."""
    if app is None:
        app = current_app
    token_config: TokenConfig = app.extensions[EXTENSION_KEY]
    return token_config


def issue(account: domain.Account, config: TokenConfig,
          now: Optional[datetime] = None) -> str:
    """
    Encode a signed token asserting the identity of ``account``.

    Parameters
    ----------
    account : :class:`domain.Account`
        Must already be persisted (i.e. have a ``user_id``).
    config : :class:`.TokenConfig`
    now : datetime
        Issue time; defaults to the current time.

    Returns
    -------
    str

    """
    if account.user_id is None:
        raise ValueError('Cannot issue a token for an unsaved account')
    if now is None:
        now = datetime.now(tz=UTC)
    claims = {
        'sub': account.user_id,
        'name': account.username,
        'iat': now,
        'exp': now + timedelta(seconds=config.duration),
        'iss': config.issuer,
        'aud': config.audience
    }
    return jwt.encode(claims, config.secret, algorithm=ALGORITHM)


def decode(token: str, config: TokenConfig) -> domain.Session:
    """
    Verify a bearer token and unpack the caller's session.

    Raises
    ------
    :class:`.ExpiredToken`
        The token was valid, but has expired.
    :class:`.InvalidToken`
        Bad signature, wrong issuer or audience, or missing claims.

    """
    try:
        data: dict = jwt.decode(
            token,
            config.secret,
            algorithms=[ALGORITHM],
            audience=config.audience,
            issuer=config.issuer,
            options={'require': ['sub', 'name', 'iat', 'exp']}
        )
    except jwt.exceptions.ExpiredSignatureError as e:
        raise ExpiredToken('Token has expired') from e
    except jwt.exceptions.InvalidTokenError as e:
        raise InvalidToken('Not a valid token') from e

    return domain.Session(
        user_id=str(data['sub']),
        username=str(data['name']),
        start_time=datetime.fromtimestamp(data['iat'], tz=UTC),
        end_time=datetime.fromtimestamp(data['exp'], tz=UTC)
    )
