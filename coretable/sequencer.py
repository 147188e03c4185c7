"""
Request sequencing for fetch cycles.

Implements last-request-wins: only the most recently issued token may
update the view. Responses to earlier tokens are discarded on arrival;
the requests themselves are never cancelled.
"""

import itertools
from typing import Optional

from shared.logging import get_logger

log = get_logger("grid", "sequencer")


class RequestSequencer:
    """Mints strictly increasing tokens and accepts only the latest."""

    def __init__(self, start: int = 1):
        self._counter = itertools.count(start)
        self._latest_issued: Optional[int] = None
        self._outstanding: Optional[int] = None

    @property
    def latest_issued(self) -> Optional[int]:
        return self._latest_issued

    @property
    def outstanding(self) -> Optional[int]:
        """Latest token still waiting for its response, if any."""
        return self._outstanding

    def issue(self) -> int:
        """Mint a new token and record it as the latest outstanding one."""
        token = next(self._counter)
        self._latest_issued = token
        self._outstanding = token
        return token

    def is_latest(self, token: int) -> bool:
        return self._latest_issued is not None and token == self._latest_issued

    def accept(self, token: int) -> bool:
        """
        Decide whether a response may update the view.

        Returns True and clears the outstanding marker iff token is the
        latest issued; otherwise the response is stale and False is returned.
        """
        if not self.is_latest(token):
            log.debug("grid.sequencer.stale", token=token, latest=self._latest_issued)
            return False

        self._outstanding = None
        return True

    def settle(self, token: int) -> None:
        """Clear the outstanding marker after the latest request failed."""
        if self._outstanding == token:
            self._outstanding = None

    def invalidate(self) -> None:
        """Refuse every token issued so far (grid teardown)."""
        self._latest_issued = None
        self._outstanding = None
