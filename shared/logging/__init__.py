"""
Structured logging for CoreTable.

Provides JSON Lines logging tagged with the grid id and request token, so a
single fetch cycle can be traced from the state transition that started it
to the render that finished it.

Usage:
    from shared.logging import get_logger, fetch_context

    log = get_logger("grid", "fetch")

    with fetch_context(grid_id=grid_id, token=token):
        log.info("grid.fetch.started", offset=0, limit=10)
"""

from .logger import get_logger, GridLogger
from .context import fetch_context, get_correlation_id

__all__ = [
    "get_logger",
    "GridLogger",
    "fetch_context",
    "get_correlation_id",
]
