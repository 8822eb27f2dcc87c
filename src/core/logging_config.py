"""Logging setup shared by the CLI and any other entry-point.

Modules only call `logging.getLogger(__name__)`; handlers are attached once,
here, so importing the core never prints anything on its own.
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

from core.config import AppSettings

_CONFIGURED = False


def configure_logging(settings: AppSettings | None = None) -> None:
    global _CONFIGURED

    settings = settings or AppSettings()
    level = logging.getLevelName(settings.log_level)
    if not isinstance(level, int):
        level = logging.WARNING
    # Request diagnostics are emitted at INFO.
    if settings.debug_requests and level > logging.INFO:
        level = logging.INFO

    root = logging.getLogger()
    root.setLevel(level)
    if _CONFIGURED:
        return

    handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(name)s - %(message)s"))
    root.addHandler(handler)
    # httpx logs every request at INFO; our transport already does that.
    logging.getLogger("httpx").setLevel(logging.WARNING)
    _CONFIGURED = True
