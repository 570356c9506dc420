"""Logger factory for AppMate clients.

The client never touches process-wide verbosity. Pass a logger to
``Database``/``Table`` to see request traces; by default they log to the
``"appmate"`` logger, which only has a ``NullHandler``.
"""

import logging

DEFAULT_LOGGER_NAME = "appmate"

_FORMAT = "%(asctime)s %(levelname)s - %(name)s - %(message)s"


def get_logger(
    name: str = DEFAULT_LOGGER_NAME,
    level: int | None = None,
    stream_handler: bool = False,
) -> logging.Logger:
    """Return a logger suitable for injection into the client.

    Args:
        name: Logger name.
        level: Verbosity to set on the logger (left untouched if None).
        stream_handler: Attach a stderr handler with the package format.

    Returns:
        The configured :class:`logging.Logger`.
    """
    logger = logging.getLogger(name)
    if level is not None:
        logger.setLevel(level)

    if not any(isinstance(h, logging.NullHandler) for h in logger.handlers):
        logger.addHandler(logging.NullHandler())

    if stream_handler and not any(
        type(h) is logging.StreamHandler for h in logger.handlers
    ):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_FORMAT))
        logger.addHandler(handler)

    return logger
