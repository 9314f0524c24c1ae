"""
Logging setup: stdlib logging routed through rich's console handler.
"""
# @file purpose: Configure logging for CLI runs.

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler


def configure_logging(level: str = "INFO", *, console: Console | None = None) -> None:
    handler = RichHandler(
        console=console,
        show_path=False,
        rich_tracebacks=True,
        markup=False,
    )
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[handler],
        force=True,
    )
    # asyncio selector chatter at DEBUG
    logging.getLogger("asyncio").setLevel(logging.WARNING)
