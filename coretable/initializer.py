"""
Two-phase grid startup.

Phase one resolves the column sequence, either from the static options or
from the column-discovery endpoint. Phase two (the first fetch) is started
by the controller once the machine reaches READY. A failure in phase one is
terminal: the fatal error is rendered and no data request is ever made.
"""

from enum import Enum
from typing import Any, Optional

from shared.logging import get_logger

from .config import GridOptions
from .errors import ConfigurationError
from .models import ColumnDefinition, SortDirection, ViewState, first_sortable_index
from .render import DISCOVERY_ERROR_TEXT, NO_COLUMNS_TEXT, render_fatal
from .transport import Transport
from .view import Element

log = get_logger("grid", "initializer")


class InitPhase(str, Enum):
    """Initializer lifecycle states."""
    PENDING = "pending"
    AWAITING_COLUMNS = "awaiting_columns"
    READY = "ready"
    FAILED = "failed"


def parse_columns(payload: Any) -> list[ColumnDefinition]:
    """Decode a column-discovery body: a list of column objects."""
    if not isinstance(payload, list):
        raise ConfigurationError(f"Column discovery returned {type(payload).__name__}, expected a list")
    return [ColumnDefinition.from_dict(item) for item in payload]


class Initializer:
    """Resolves columns once and reports the resulting phase."""

    def __init__(self, options: GridOptions, transport: Transport, container: Element):
        self.options = options
        self.transport = transport
        self.container = container
        self.phase = InitPhase.PENDING
        self.columns: tuple[ColumnDefinition, ...] = ()
        self.error: Optional[str] = None

    async def run(self) -> Optional[tuple[ColumnDefinition, ...]]:
        """
        Resolve the visible column sequence.

        Returns:
            The columns when READY, None when the grid failed or when this
            initializer already ran (or is running)
        """
        if self.phase is not InitPhase.PENDING:
            log.debug("grid.init.already_started", phase=self.phase)
            return None

        if self.options.columns_url:
            self.phase = InitPhase.AWAITING_COLUMNS
            log.info("grid.init.discovering_columns", url=self.options.columns_url)
            try:
                payload = await self.transport.request("GET", self.options.columns_url, {})
                columns = parse_columns(payload)
            except Exception as e:
                log.exception(e, "grid.init.discovery_failed",
                              context={"url": self.options.columns_url})
                self._fail(DISCOVERY_ERROR_TEXT)
                return None
        else:
            columns = list(self.options.columns)

        visible = tuple(column for column in columns if column.visible)
        if not visible:
            self._fail(NO_COLUMNS_TEXT)
            return None

        self.columns = visible
        self.phase = InitPhase.READY
        log.info("grid.init.ready", columns=[c.key for c in visible],
                 hidden=len(columns) - len(visible))
        return visible

    def initial_state(self) -> ViewState:
        """First ViewState: page 0, ascending on the first sortable column."""
        return ViewState(
            page=0,
            page_size=self.options.page_size,
            search_term="",
            sort_column_index=first_sortable_index(self.columns),
            sort_direction=SortDirection.ASCENDING,
        )

    def _fail(self, message: str) -> None:
        self.phase = InitPhase.FAILED
        self.error = message
        render_fatal(self.container, self.options.class_names, message)
