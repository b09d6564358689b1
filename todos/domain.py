"""Core data structures for the to-do service."""

from typing import Any, Dict, NamedTuple, Optional
from datetime import datetime

from pytz import UTC


class UserProfile(NamedTuple):
    """Contact details kept for an :class:`.Account`."""

    first_name: str = 'DefaultFirstName'
    last_name: str = 'DefaultLastName'
    address: str = 'DefaultAddress'
    phone_number: str = '1234567890'


class Account(NamedTuple):
    """A registered user."""

    username: str
    """Login name, as entered at registration."""

    user_id: Optional[str] = None
    """Opaque identifier assigned by the store. ``None`` until persisted."""

    profile: UserProfile = UserProfile()

    created: Optional[datetime] = None
    """When the account was registered."""


class Session(NamedTuple):
    """Verified identity of the caller, unpacked from a bearer token."""

    user_id: str
    """Subject of the token; the caller's :attr:`.Account.user_id`."""

    username: str

    start_time: datetime
    """When the token was issued."""

    end_time: datetime
    """When the token expires."""

    @property
    def expired(self) -> bool:
        """Expired if the current time is later than :attr:`.end_time`."""
        return datetime.now(tz=UTC) >= self.end_time


class ToDoItem(NamedTuple):
    """A single task belonging to an :class:`.Account`."""

    owner_id: str
    """The :attr:`.Account.user_id` of the owner. Never exposed to clients."""

    title: Optional[str] = None
    description: Optional[str] = None
    is_completed: bool = False

    created_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    """Set iff :attr:`.is_completed` is ``True``."""

    item_id: Optional[int] = None
    """Assigned by the store on creation."""


class Unset(object):
    """Marker for a :class:`.ToDoPatch` field that was not provided."""

    def __repr__(self) -> str:
        return 'UNSET'

    def __bool__(self) -> bool:
        return False


UNSET: Any = Unset()


class ToDoPatch(NamedTuple):
    """
    Changes to apply to a :class:`.ToDoItem`.

    Fields left as :data:`.UNSET` are not touched. ``title`` and
    ``description`` may be set to ``None`` to clear them.
    """

    title: Any = UNSET
    description: Any = UNSET
    is_completed: Any = UNSET

    def changes(self) -> Dict[str, Any]:
        """Get the fields that were provided, by name."""
        return {field: value for field, value in self._asdict().items()
                if value is not UNSET}
