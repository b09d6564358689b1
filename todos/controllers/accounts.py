"""
Controllers for registration and login.

A user registers with a username and password, and then logs in with the
same credentials to obtain a signed bearer token. The token is attached to
subsequent requests in the ``Authorization`` header, where it is verified by
:class:`todos.auth.middleware.AuthMiddleware`.
"""

from typing import Any, Dict, Optional, Tuple

from werkzeug.datastructures import MultiDict
from werkzeug.exceptions import BadRequest, InternalServerError, \
    Unauthorized
from wtforms import Form, PasswordField, StringField, validators
from wtforms.validators import DataRequired, Length

from .. import domain, logging, status
from ..auth import tokens
from ..exceptions import AuthenticationError, StoreError, ValidationError
from ..services import accounts

logger = logging.getLogger(__name__)

ResponseData = Tuple[dict, int, dict]

REGISTERED = 'User registered successfully'


def _optional(max_length: int) -> list:
    return [validators.Optional(), Length(max=max_length)]


class RegistrationForm(Form):
    """User registration form."""

    username = StringField('Username', validators=[DataRequired(),
                                                   Length(max=256)])
    password = PasswordField('Password', validators=[DataRequired()])
    firstName = StringField('First name', validators=_optional(255))
    lastName = StringField('Last name', validators=_optional(255))
    address = StringField('Address', validators=_optional(255))
    phoneNumber = StringField('Phone number', validators=_optional(50))

    def to_profile(self) -> domain.UserProfile:
        """Build a profile, using placeholders for anything not provided."""
        defaults = domain.UserProfile()
        return domain.UserProfile(
            first_name=self.firstName.data or defaults.first_name,
            last_name=self.lastName.data or defaults.last_name,
            address=self.address.data or defaults.address,
            phone_number=self.phoneNumber.data or defaults.phone_number
        )


class LoginForm(Form):
    """Log in form."""

    username = StringField('Username', validators=[DataRequired()])
    password = PasswordField('Password', validators=[DataRequired()])


def _formdata(payload: Any) -> MultiDict:
    """Only string values from a JSON object are considered."""
    if not isinstance(payload, dict):
        raise BadRequest('Expected a JSON object')
    return MultiDict({key: value for key, value in payload.items()
                      if isinstance(value, str)})


def _errors(form: Form) -> str:
    return '; '.join(f'{field}: {", ".join(messages)}'
                     for field, messages in form.errors.items())


def _account_summary(account: domain.Account) -> Dict[str, Optional[str]]:
    return {
        'id': account.user_id,
        'username': account.username,
        'firstName': account.profile.first_name,
        'lastName': account.profile.last_name,
        'address': account.profile.address,
        'phoneNumber': account.profile.phone_number
    }


def register(payload: Any) -> ResponseData:
    """
    Register a new account.

    Parameters
    ----------
    payload : dict
        Should include ``username`` and ``password``. May include
        ``firstName``, ``lastName``, ``address`` and ``phoneNumber``.

    Returns
    -------
    dict
        A message, and a summary of the new account.
    int
        An HTTP status code.
    dict
        Some extra headers to add to the response.

    Raises
    ------
    :class:`.BadRequest`
        If the payload is invalid, or the username is taken.
    :class:`.InternalServerError`
        If the account could not be stored.

    """
    form = RegistrationForm(_formdata(payload))
    if not form.validate():
        logger.debug('Registration form not valid')
        raise BadRequest(_errors(form))

    try:
        account = accounts.register(form.username.data, form.password.data,
                                    profile=form.to_profile())
    except ValidationError as e:
        logger.debug('Registration failed: %s', e)
        raise BadRequest(str(e)) from e
    except StoreError as e:
        raise InternalServerError('Registration failed') from e

    data = {'message': REGISTERED, 'user': _account_summary(account)}
    return data, status.HTTP_200_OK, {}


def login(payload: Any) -> ResponseData:
    """
    Verify credentials and issue a bearer token.

    Parameters
    ----------
    payload : dict
        Should include ``username`` and ``password``.

    Returns
    -------
    dict
        ``{'token': ...}``
    int
        An HTTP status code.
    dict
        Some extra headers to add to the response.

    Raises
    ------
    :class:`.BadRequest`
        If ``username`` or ``password`` are missing.
    :class:`.Unauthorized`
        If the credentials are not valid. The reason is the same whether the
        user is unknown or the password is wrong.

    """
    form = LoginForm(_formdata(payload))
    if not form.validate():
        logger.debug('Login form not valid')
        raise BadRequest(_errors(form))

    try:
        token = accounts.authenticate(form.username.data, form.password.data,
                                      tokens.current_config())
    except AuthenticationError as e:
        logger.warning('Invalid username or password attempt')
        raise Unauthorized(str(e)) from e
    except StoreError as e:
        raise InternalServerError('Login failed') from e
    return {'token': token}, status.HTTP_200_OK, {}
