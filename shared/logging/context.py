"""
Fetch-cycle context for grid logs.

A fetch cycle runs with its grid id and request token bound in ContextVars.
The task that completes the cycle is created inside fetch_context(), copies
those bindings, and so logs under the same ids as the cycle's preamble even
after the block has exited.
"""

import uuid
from contextvars import ContextVar
from contextlib import contextmanager
from typing import Optional, Generator

_correlation_id: ContextVar[Optional[str]] = ContextVar('correlation_id', default=None)
_grid_id: ContextVar[Optional[str]] = ContextVar('grid_id', default=None)
_token: ContextVar[Optional[int]] = ContextVar('token', default=None)


def new_correlation_id() -> str:
    return uuid.uuid4().hex[:12]


def get_correlation_id() -> str:
    """Correlation id of the current cycle; log lines outside a cycle get their own."""
    cid = _correlation_id.get()
    if cid is None:
        cid = new_correlation_id()
        _correlation_id.set(cid)
    return cid


def get_grid_id() -> Optional[str]:
    return _grid_id.get()


def get_token() -> Optional[int]:
    """Request token of the fetch cycle being logged, if any."""
    return _token.get()


def bind_token(token: int) -> None:
    _token.set(token)


@contextmanager
def fetch_context(
    grid_id: Optional[str] = None,
    token: Optional[int] = None,
) -> Generator[str, None, None]:
    """
    Bind a grid id and request token under a fresh correlation id.

    Args:
        grid_id: Id of the grid running the cycle
        token: Request token minted for the cycle

    Yields:
        The correlation id of the cycle

    Example:
        with fetch_context(grid_id="grid-1", token=7):
            task = asyncio.ensure_future(complete())   # task logs token=7
    """
    cid_reset = _correlation_id.set(new_correlation_id())
    grid_reset = _grid_id.set(grid_id or None)
    token_reset = _token.set(token)
    try:
        yield _correlation_id.get()
    finally:
        _token.reset(token_reset)
        _grid_id.reset(grid_reset)
        _correlation_id.reset(cid_reset)
