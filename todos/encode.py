"""JSON encoding for API responses."""

from datetime import date, datetime
from typing import Any

from flask.json.provider import DefaultJSONProvider


class ISO8601JSONProvider(DefaultJSONProvider):
    """Renders dates and datetimes as ISO-8601 strings."""

    @staticmethod
    def default(obj: Any) -> Any:
        """Serialize date/datetime objects; defer everything else."""
        if isinstance(obj, (datetime, date)):
            return obj.isoformat()
        return DefaultJSONProvider.default(obj)
