"""Root logger setup for the CLI and tests."""

from __future__ import annotations

import logging

# Loggers that report every HTTP exchange at INFO; one Graph sync makes thousands.
_CHATTY_LOGGERS = ("httpx", "httpcore", "hishel")


def configure_logging(*, level: int = logging.INFO, force: bool = False) -> None:
    """Route every module logger to stderr with a short timestamped format.

    Steps log their warnings through ``StepReport``; this only decides where they
    end up. ``force=True`` replaces handlers installed by an earlier call.
    """

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        force=force,
    )
    http_level = logging.DEBUG if level <= logging.DEBUG else logging.WARNING
    for name in _CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(http_level)
