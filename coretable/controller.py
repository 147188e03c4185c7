"""
GridController - owns the ViewState and wires user events to fetch cycles.

Every transition replaces the ViewState and starts its fetch cycle in the
same synchronous step, so no await can observe a half-applied change and
tokens are minted in transition order.
"""

import uuid
import weakref
from typing import Optional

from shared.logging import get_logger

from .config import GridOptions
from .debounce import DebounceScheduler
from .fetch import FetchOrchestrator
from .initializer import InitPhase, Initializer
from .models import ColumnDefinition, FetchResponse, PagingSummary, ViewState
from .render import GridLayout, RenderSync, build_layout
from .sequencer import RequestSequencer
from .transport import Transport
from .view import Element

log = get_logger("grid", "controller")


class GridController:
    """
    One grid bound to one container.

    Usage:
        grid = GridController(container, options, transport)
        await grid.initialize()
        grid.toggle_sort(1)
        await grid.wait_idle()
    """

    def __init__(
        self,
        container: Element,
        options: GridOptions,
        transport: Transport,
        grid_id: Optional[str] = None,
    ):
        self.container = container
        self.options = options
        self.transport = transport
        self.grid_id = grid_id or f"grid-{uuid.uuid4().hex[:8]}"

        self.sequencer = RequestSequencer()
        self.debouncer = DebounceScheduler()
        self.initializer = Initializer(options, transport, container)

        self.columns: tuple[ColumnDefinition, ...] = ()
        self.state: Optional[ViewState] = None
        self.layout: Optional[GridLayout] = None
        self.render: Optional[RenderSync] = None
        self.fetcher: Optional[FetchOrchestrator] = None

        # Paging of the last rendered response and the state it was rendered for
        self._rendered: Optional[tuple[ViewState, PagingSummary]] = None
        self.destroyed = False

    @property
    def phase(self) -> InitPhase:
        return self.initializer.phase

    @property
    def ready(self) -> bool:
        return self.phase is InitPhase.READY and not self.destroyed

    async def initialize(self) -> bool:
        """
        Resolve columns, build the layout and start the first fetch.

        Calling it again is a no-op. Returns True only on the call that
        brought the grid to READY.
        """
        if self.phase is not InitPhase.PENDING or self.destroyed:
            log.debug("grid.controller.init_skipped", grid_id=self.grid_id, phase=self.phase)
            return False

        columns = await self.initializer.run()
        if columns is None or self.destroyed:
            return False

        self.columns = columns
        self.state = self.initializer.initial_state()
        self.layout = build_layout(self.container, columns, self.options)
        self.render = RenderSync(self.layout, columns, self.options.class_names)
        self.fetcher = FetchOrchestrator(
            self.transport,
            self.options,
            self.sequencer,
            self.render,
            on_accepted=self._on_accepted,
            grid_id=self.grid_id,
        )
        self._bind_events()

        log.info("grid.controller.initialized", grid_id=self.grid_id, state=self.state.to_dict())
        self._transition(self.state)
        return True

    # --- State transitions ---

    def toggle_sort(self, column_index: int) -> bool:
        """Flip direction on the active column, or sort ascending by another one."""
        if not self.ready or not self.options.ordering:
            return False
        if not 0 <= column_index < len(self.columns) or not self.columns[column_index].sortable:
            log.debug("grid.controller.sort_ignored", column_index=column_index)
            return False

        self._transition(self.state.with_sort(column_index))
        return True

    def set_search(self, term: str) -> bool:
        """Apply a search term and go back to the first page."""
        if not self.ready or not self.options.searching:
            return False

        self._transition(self.state.with_search(term))
        return True

    def go_to_page(self, delta: int) -> bool:
        """
        Move one page back or forward.

        Moving before page 0 is a no-op, as is moving forward when the last
        response for the current state already covered every filtered record.
        """
        if delta not in (-1, 1):
            raise ValueError(f"delta must be -1 or +1, got {delta!r}")
        if not self.ready or not self.options.paging:
            return False

        page = max(self.state.page + delta, 0)
        if page == self.state.page:
            return False
        if delta > 0 and self._rendered is not None:
            rendered_state, paging = self._rendered
            if rendered_state == self.state and paging.next_disabled:
                log.debug("grid.controller.past_last_page", page=page)
                return False

        self._transition(self.state.with_page(page))
        return True

    def refresh(self) -> bool:
        """Re-fetch the current state, e.g. after an error row."""
        if not self.ready:
            return False
        self._transition(self.state)
        return True

    def _transition(self, state: ViewState) -> None:
        self.state = state
        log.debug("grid.controller.transition", grid_id=self.grid_id, state=state.to_dict())
        self.fetcher.run(state, self.columns)

    def _on_accepted(self, state: ViewState, response: FetchResponse) -> bool:
        """Clamp to the last page when the server reports fewer records than the offset."""
        filtered = response.filtered_records
        if state.page > 0 and filtered > 0 and state.offset >= filtered:
            last_page = (filtered - 1) // state.page_size
            log.info("grid.controller.page_clamped",
                     requested_page=state.page, last_page=last_page, filtered_records=filtered)
            self._transition(state.with_page(last_page))
            return False

        self._rendered = (state, PagingSummary.compute(state, response))
        return True

    # --- Events ---

    def _bind_events(self) -> None:
        cn = self.options.class_names
        layout = self.layout

        if self.options.ordering:
            for th in layout.headers:
                if th.has_class(cn.sortable):
                    th.bind("click", self._on_header_click)

        if self.options.searching:
            layout.search_input.bind("input", self._on_search_input)

        if self.options.paging:
            layout.previous_button.bind("click", self._on_page_click)
            layout.next_button.bind("click", self._on_page_click)

    def _on_header_click(self, th: Element, payload: dict) -> None:
        self.toggle_sort(int(th.data["column_index"]))

    def _on_search_input(self, el: Element, payload: dict) -> None:
        if "value" in payload:
            el.attrs["value"] = payload["value"]
        # Read the value when the timer fires, not when the key was pressed
        self.debouncer.schedule(
            lambda: self.set_search(str(el.attrs.get("value", ""))),
            self.options.search_delay_ms,
        )

    def _on_page_click(self, button: Element, payload: dict) -> None:
        if button.has_class(self.options.class_names.disabled):
            return
        self.go_to_page(1 if button.data.get("page") == "next" else -1)

    # --- Lifecycle ---

    async def wait_idle(self) -> None:
        """Wait for every in-flight fetch cycle to settle."""
        if self.fetcher is not None:
            await self.fetcher.wait_idle()

    def destroy(self) -> None:
        """Cancel pending timers, refuse outstanding tokens and unbind events."""
        if self.destroyed:
            return
        self.destroyed = True
        self.debouncer.cancel()
        self.sequencer.invalidate()
        if self.layout is not None:
            for el in [self.layout.search_input, self.layout.previous_button,
                       self.layout.next_button, *self.layout.headers]:
                el.unbind()
        log.info("grid.controller.destroyed", grid_id=self.grid_id)


class GridRegistry:
    """
    Maps containers to their controllers.

    Mounting a container that already has a live grid returns that grid,
    so a container is never bound twice.
    """

    def __init__(self):
        self._grids: "weakref.WeakKeyDictionary[Element, GridController]" = weakref.WeakKeyDictionary()

    def get(self, container: Element) -> Optional[GridController]:
        grid = self._grids.get(container)
        if grid is not None and grid.destroyed:
            return None
        return grid

    def mount(self, container: Element, options: GridOptions, transport: Transport) -> GridController:
        existing = self.get(container)
        if existing is not None:
            log.debug("grid.registry.already_mounted", grid_id=existing.grid_id)
            return existing

        grid = GridController(container, options, transport)
        self._grids[container] = grid
        return grid

    def unmount(self, container: Element) -> None:
        grid = self._grids.pop(container, None)
        if grid is not None:
            grid.destroy()


_registry = GridRegistry()


async def create_grid(
    container: Element,
    options: GridOptions,
    transport: Transport,
    registry: Optional[GridRegistry] = None,
) -> GridController:
    """Mount a grid on container (or reuse the one already there) and initialize it."""
    grid = (registry or _registry).mount(container, options, transport)
    await grid.initialize()
    return grid
