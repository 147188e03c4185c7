"""
Fetch cycles for the grid.

A cycle has a synchronous preamble (mint token, build the request from the
ViewState snapshot, show the loading row) and one asynchronous transport
call. Only the response to the latest token may reach the view; responses
and failures for older tokens are dropped on arrival.
"""

import asyncio
from typing import Callable, Optional, Sequence

from shared.logging import get_logger, fetch_context

from .config import GridOptions
from .models import ColumnDefinition, FetchRequest, FetchResponse, RenderModel, ViewState
from .render import RenderSync
from .sequencer import RequestSequencer
from .transport import Transport

log = get_logger("grid", "fetch")

# Called with the accepted response; returning False suppresses rendering
AcceptHook = Callable[[ViewState, FetchResponse], bool]


class FetchOrchestrator:
    """
    Turns ViewState snapshots into sequenced requests and renders the winners.

    Usage:
        fetcher = FetchOrchestrator(transport, options, sequencer, render)
        task = fetcher.run(state, columns)   # token minted before returning
        await fetcher.wait_idle()
    """

    def __init__(
        self,
        transport: Transport,
        options: GridOptions,
        sequencer: RequestSequencer,
        render: RenderSync,
        on_accepted: Optional[AcceptHook] = None,
        grid_id: str = "",
    ):
        self.transport = transport
        self.options = options
        self.sequencer = sequencer
        self.render = render
        self.on_accepted = on_accepted
        self.grid_id = grid_id
        self._inflight: set[asyncio.Task] = set()

    @property
    def inflight(self) -> int:
        return len(self._inflight)

    def run(self, state: ViewState, columns: Sequence[ColumnDefinition]) -> Optional[asyncio.Task]:
        """
        Start a fetch cycle for state.

        Everything up to scheduling the transport call happens before this
        returns, so token order always matches call order.

        Returns:
            The task completing the cycle, or None if the request parameters
            could not be built (the error row is shown instead)
        """
        columns = tuple(columns)
        token = self.sequencer.issue()
        request = FetchRequest.build(token, state, columns, ordering=self.options.ordering)

        with fetch_context(grid_id=self.grid_id, token=token):
            try:
                params = self.options.build_params(request.to_params())
            except Exception as e:
                log.exception(e, "grid.fetch.params_failed", context={"token": token})
                self.render.show_error()
                return None

            self.render.show_loading()
            start_time = log.cycle_start(
                token,
                self.options.url,
                offset=request.offset,
                limit=request.limit,
                search=request.search_term,
                sort_field=request.sort_field,
                sort_direction=request.sort_direction,
            )
            # The task copies the current context, correlation ids included
            task = asyncio.ensure_future(self._complete(state, columns, request, params, start_time))

        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)
        return task

    async def _complete(
        self,
        state: ViewState,
        columns: tuple,
        request: FetchRequest,
        params: dict,
        start_time: float,
    ) -> Optional[FetchResponse]:
        token = request.token
        try:
            payload = await self.transport.request(self.options.method, self.options.url, params)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            if self.sequencer.is_latest(token):
                log.cycle_error(token, str(e), type(e).__name__, start_time=start_time)
                self.sequencer.settle(token)
                self.render.show_error()
            else:
                log.debug("grid.fetch.stale_failure", token=token, error=str(e),
                          latest=self.sequencer.latest_issued)
            return None

        response = FetchResponse.parse(payload)
        accepted = self.sequencer.accept(token)
        log.cycle_complete(
            token,
            start_time,
            accepted,
            rows=len(response.rows),
            filtered_records=response.filtered_records,
            total_records=response.total_records,
            well_formed=response.well_formed,
        )
        if not accepted:
            return None

        if response.token is not None and response.token != token:
            log.debug("grid.fetch.token_mismatch", token=token, echoed=response.token)

        try:
            if self.on_accepted is not None and self.on_accepted(state, response) is False:
                return response
            self.render.apply(RenderModel.build(state, response, columns, ordering=self.options.ordering))
        except Exception as e:
            log.exception(e, "grid.fetch.render_failed", context={"token": token})
            self.render.show_error()
        return response

    async def wait_idle(self) -> None:
        """Wait until no cycle is in flight, including cycles started meanwhile."""
        while self._inflight:
            await asyncio.gather(*list(self._inflight), return_exceptions=True)
