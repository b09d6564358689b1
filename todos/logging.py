"""
Logging for the to-do service.

Loggers write JSON records to stderr, or to ``LOGFILE`` if it is configured.
The level is taken from ``LOGLEVEL`` (default: ``INFO``).

.. code-block:: python

   from todos import logging
   logger = logging.getLogger(__name__)
   logger.debug('Loaded %i items', len(items))

"""

import logging
import sys
from typing import Optional

from pythonjsonlogger.json import JsonFormatter

from .context import get_application_config

FORMAT = '%(asctime)s %(levelname)s %(name)s %(message)s'
RENAME_FIELDS = {'levelname': 'level', 'asctime': 'timestamp'}


def _level(value: Optional[str]) -> int:
    if value is None:
        return logging.INFO
    try:
        return int(value)
    except ValueError:
        level = logging.getLevelName(str(value).upper())
        return level if isinstance(level, int) else logging.INFO


def getLogger(name: str) -> logging.Logger:
    """
    Wrapper for :func:`logging.getLogger` that applies configuration.

    Parameters
    ----------
    name : str

    Returns
    -------
    :class:`logging.Logger`
    """
    config = get_application_config()
    logger = logging.getLogger(name)
    if logger.handlers:     # Already configured.
        return logger

    logfile = config.get('LOGFILE')
    handler: logging.Handler
    if logfile:
        handler = logging.FileHandler(logfile)
    else:
        handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JsonFormatter(FORMAT, rename_fields=RENAME_FIELDS))
    logger.addHandler(handler)
    logger.setLevel(_level(config.get('LOGLEVEL')))
    logger.propagate = False
    return logger
