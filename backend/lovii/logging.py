"""
Logging setup shared by the API server and the sync client.

Everything logs under the ``lovii`` namespace; ``get_logger('client.outbox')``
gives ``lovii.client.outbox``.
"""

import logging
import sys

ROOT_LOGGER = 'lovii'
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# Third-party loggers held at WARNING.
QUIET_LOGGERS = ('httpx', 'httpcore', 'aiosqlite', 'engineio', 'socketio')


def setup_logging(debug: bool = False) -> logging.Logger:
    """
    Send log records to stdout; ``debug`` lowers the threshold to DEBUG.

    :param debug: Log at DEBUG instead of INFO
    :type debug: bool
    :return: The ``lovii`` logger
    :rtype: logging.Logger
    """
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)]
    )
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return logging.getLogger(ROOT_LOGGER)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(f'{ROOT_LOGGER}.{name}')
