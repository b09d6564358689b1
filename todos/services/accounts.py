"""
Registration and credential verification for user accounts.

Secrets are hashed and checked by :mod:`werkzeug.security`; nothing in this
module compares or stores a plain-text password.
"""

import re
from functools import lru_cache
from typing import Optional

from werkzeug.security import check_password_hash, generate_password_hash

from .. import domain, logging
from ..auth import tokens
from ..context import get_application_config
from ..exceptions import AuthenticationError, ConflictError, ValidationError
from .database import DBAccount, transaction

logger = logging.getLogger(__name__)

USERNAME_PATTERN = re.compile(r'^[A-Za-z0-9\-._@+]+$')
MAX_USERNAME_LENGTH = 256
DEFAULT_MIN_PASSWORD_LENGTH = 6
INVALID_CREDENTIALS = 'Invalid username or password'


def _normalize(username: str) -> str:
    return username.lower()


@lru_cache(maxsize=1)
def _dummy_hash() -> str:
    return generate_password_hash('there is no such user')


def _min_password_length() -> int:
    config = get_application_config()
    return int(config.get('MIN_PASSWORD_LENGTH',
                          DEFAULT_MIN_PASSWORD_LENGTH))


def _to_domain(db_account: DBAccount) -> domain.Account:
    return domain.Account(
        user_id=str(db_account.user_id),
        username=db_account.username,
        profile=domain.UserProfile(
            first_name=db_account.first_name,
            last_name=db_account.last_name,
            address=db_account.address,
            phone_number=db_account.phone_number
        ),
        created=db_account.created
    )


def _load_dbaccount(username: str) -> Optional[DBAccount]:
    with transaction() as session:
        db_account: Optional[DBAccount] = session.query(DBAccount) \
            .filter(DBAccount.normalized_username == _normalize(username)) \
            .first()
    return db_account


def username_exists(username: str) -> bool:
    """Determine whether or not a username is taken (ignoring case)."""
    return _load_dbaccount(username) is not None


def register(username: str, password: str,
             profile: Optional[domain.UserProfile] = None) -> domain.Account:
    """
    Create a new account.

    Parameters
    ----------
    username : str
    password : str
        Plain-text secret. Only its hash is stored.
    profile : :class:`domain.UserProfile`
        If not provided, placeholder profile values are used.

    Returns
    -------
    :class:`domain.Account`

    Raises
    ------
    :class:`.ValidationError`
        If the username is empty, malformed or already taken, or if the
        password is too short.
    :class:`.StoreError`
        If the data store is unavailable.

    """
    if not username:
        raise ValidationError('Username is required')
    if len(username) > MAX_USERNAME_LENGTH \
            or not USERNAME_PATTERN.match(username):
        raise ValidationError('Username may contain only letters, digits'
                              ' and -._@+')
    min_length = _min_password_length()
    if not password or len(password) < min_length:
        raise ValidationError(f'Password must be at least {min_length}'
                              ' characters long')
    if username_exists(username):
        logger.debug('Username %s is taken', username)
        raise ValidationError(f'Username {username} is already taken')

    if profile is None:
        profile = domain.UserProfile()
    try:
        with transaction() as session:
            db_account = DBAccount(
                username=username,
                normalized_username=_normalize(username),
                password_hash=generate_password_hash(password),
                first_name=profile.first_name,
                last_name=profile.last_name,
                address=profile.address,
                phone_number=profile.phone_number
            )
            session.add(db_account)
    except ConflictError as e:
        # Someone else registered the same name between our check and insert.
        raise ValidationError(f'Username {username} is already taken') from e
    account = _to_domain(db_account)
    logger.info('Registered account %s', account.user_id)
    return account


def verify_credentials(username: str, password: str) -> domain.Account:
    """
    Check a username and password against the stored credential.

    Raises
    ------
    :class:`.AuthenticationError`
        Raised with the same message whether the user does not exist or the
        password is wrong.

    """
    db_account = _load_dbaccount(username) if username else None
    if db_account is None:
        check_password_hash(_dummy_hash(), password or '')
        logger.debug('No such user')
        raise AuthenticationError(INVALID_CREDENTIALS)
    if not check_password_hash(db_account.password_hash, password or ''):
        logger.debug('Password check failed for %s', db_account.user_id)
        raise AuthenticationError(INVALID_CREDENTIALS)
    return _to_domain(db_account)


def authenticate(username: str, password: str,
                 config: tokens.TokenConfig) -> str:
    """
    Verify credentials and issue a signed bearer token.

    Parameters
    ----------
    username : str
    password : str
    config : :class:`.tokens.TokenConfig`
        Signing key, issuer, audience and lifetime.

    Returns
    -------
    str
        An encoded JWT.

    Raises
    ------
    :class:`.AuthenticationError`

    """
    account = verify_credentials(username, password)
    return tokens.issue(account, config)
