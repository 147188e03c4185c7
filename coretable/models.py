"""
Data models for the grid controller.

ColumnDefinition and ViewState are frozen: a state transition builds a new
ViewState with dataclasses.replace() and never edits the live one.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Mapping, Optional, Sequence

from shared.logging import get_logger

from .errors import ConfigurationError

log = get_logger("grid", "models")


class SortDirection(str, Enum):
    """Sort direction, with its wire value."""
    ASCENDING = "asc"
    DESCENDING = "desc"

    def flipped(self) -> "SortDirection":
        if self is SortDirection.ASCENDING:
            return SortDirection.DESCENDING
        return SortDirection.ASCENDING


@dataclass(frozen=True)
class ColumnDefinition:
    """A grid column, in display order."""
    # Server-side field name; also the row lookup key
    key: str
    title: str
    sortable: bool = True
    visible: bool = True

    def to_dict(self) -> dict:
        return {
            "key": self.key,
            "title": self.title,
            "sortable": self.sortable,
            "visible": self.visible,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ColumnDefinition":
        """
        Build a column from a mapping.

        Accepts ``data`` as an alias of ``key`` and ``orderable`` as an alias
        of ``sortable``. The title falls back to the key.
        """
        if not isinstance(data, Mapping):
            raise ConfigurationError(f"Column definition must be a mapping, got {type(data).__name__}")

        key = data.get("key", data.get("data"))
        if key is None or key == "":
            raise ConfigurationError(f"Column definition has no key: {dict(data)!r}")

        sortable = data.get("sortable", data.get("orderable", True))
        return cls(
            key=str(key),
            title=str(data.get("title", key)),
            sortable=sortable is not False,
            visible=data.get("visible", True) is not False,
        )


def first_sortable_index(columns: Sequence[ColumnDefinition]) -> int:
    """Index of the first sortable column, or 0 when none is sortable."""
    for index, column in enumerate(columns):
        if column.sortable:
            return index
    return 0


@dataclass(frozen=True)
class ViewState:
    """Snapshot of the grid's page, search and sort configuration."""
    page: int = 0
    page_size: int = 10
    search_term: str = ""
    sort_column_index: int = 0
    sort_direction: SortDirection = SortDirection.ASCENDING

    @property
    def offset(self) -> int:
        return self.page * self.page_size

    def with_sort(self, column_index: int) -> "ViewState":
        """Toggle direction on the active column, else sort ascending by the new one."""
        if column_index == self.sort_column_index:
            return replace(self, sort_direction=self.sort_direction.flipped())
        return replace(self, sort_column_index=column_index, sort_direction=SortDirection.ASCENDING)

    def with_search(self, term: str) -> "ViewState":
        return replace(self, search_term=term, page=0)

    def with_page(self, page: int) -> "ViewState":
        return replace(self, page=max(page, 0))

    def to_dict(self) -> dict:
        return {
            "page": self.page,
            "page_size": self.page_size,
            "search_term": self.search_term,
            "sort_column_index": self.sort_column_index,
            "sort_direction": self.sort_direction.value,
        }


@dataclass(frozen=True)
class FetchRequest:
    """One data request, built from the ViewState live when the cycle starts."""
    token: int
    offset: int
    limit: int
    search_term: str = ""
    sort_field: Optional[str] = None
    sort_direction: Optional[SortDirection] = None

    @classmethod
    def build(
        cls,
        token: int,
        state: ViewState,
        columns: Sequence[ColumnDefinition],
        ordering: bool = True,
    ) -> "FetchRequest":
        sort_field = None
        sort_direction = None
        if ordering and 0 <= state.sort_column_index < len(columns):
            column = columns[state.sort_column_index]
            if column.sortable:
                sort_field = column.key
                sort_direction = state.sort_direction

        return cls(
            token=token,
            offset=state.offset,
            limit=state.page_size,
            search_term=state.search_term,
            sort_field=sort_field,
            sort_direction=sort_direction,
        )

    def to_params(self) -> dict:
        """Flat wire parameters; sort keys only present when sorting applies."""
        params = {
            "token": self.token,
            "offset": self.offset,
            "limit": self.limit,
            "search": self.search_term,
        }
        if self.sort_field is not None and self.sort_direction is not None:
            params["sortField"] = self.sort_field
            params["sortDirection"] = self.sort_direction.value
        return params


def _as_count(value: Any) -> int:
    """Coerce a record count from the wire, falling back to 0."""
    if isinstance(value, bool):
        return 0
    try:
        return max(int(value), 0)
    except (TypeError, ValueError):
        return 0


@dataclass
class FetchResponse:
    """Parsed response envelope for a data fetch."""
    token: Optional[int] = None
    total_records: int = 0
    filtered_records: int = 0
    rows: list[Mapping[str, Any]] = field(default_factory=list)
    # False when the payload had to be replaced by an empty result
    well_formed: bool = True

    @classmethod
    def parse(cls, payload: Any) -> "FetchResponse":
        """
        Interpret a decoded response body.

        Accepts ``rows``/``totalRecords``/``filteredRecords``/``token`` and the
        DataTables envelope ``data``/``recordsTotal``/``recordsFiltered``/``draw``.
        Anything malformed degrades to an empty result set.
        """
        if not isinstance(payload, Mapping):
            log.warning("grid.response.malformed", reason="not_a_mapping",
                        payload_type=type(payload).__name__)
            return cls(well_formed=False)

        rows = payload.get("rows", payload.get("data"))
        if not isinstance(rows, list):
            log.warning("grid.response.malformed", reason="rows_not_a_list",
                        rows_type=type(rows).__name__)
            return cls(token=_as_token(payload), well_formed=False)

        valid_rows = [row for row in rows if isinstance(row, Mapping)]
        if len(valid_rows) != len(rows):
            log.warning("grid.response.rows_dropped", dropped=len(rows) - len(valid_rows))

        total = payload.get("totalRecords", payload.get("recordsTotal"))
        filtered = payload.get("filteredRecords", payload.get("recordsFiltered"))
        total_records = _as_count(total) if total is not None else len(valid_rows)
        filtered_records = _as_count(filtered) if filtered is not None else total_records

        return cls(
            token=_as_token(payload),
            total_records=total_records,
            filtered_records=filtered_records,
            rows=valid_rows,
            well_formed=len(valid_rows) == len(rows),
        )


def _as_token(payload: Mapping[str, Any]) -> Optional[int]:
    value = payload.get("token", payload.get("draw"))
    try:
        return int(value) if value is not None else None
    except (TypeError, ValueError):
        return None


@dataclass(frozen=True)
class PagingSummary:
    """Pagination footer content."""
    start: int
    end: int
    filtered_records: int
    total_records: int
    previous_disabled: bool
    next_disabled: bool

    @property
    def text(self) -> str:
        return f"Showing {self.start} to {self.end} of {self.filtered_records} entries"

    @classmethod
    def compute(cls, state: ViewState, response: FetchResponse) -> "PagingSummary":
        filtered = response.filtered_records
        start = 0 if filtered == 0 else state.page * state.page_size + 1
        end = min(start + state.page_size - 1, filtered)
        return cls(
            start=start,
            end=end,
            filtered_records=filtered,
            total_records=response.total_records,
            previous_disabled=state.page == 0,
            next_disabled=end >= filtered,
        )


@dataclass(frozen=True)
class ActiveSort:
    column_index: int
    direction: SortDirection


@dataclass(frozen=True)
class RenderModel:
    """What the view shows after an accepted response. Derived, never stored."""
    rows: tuple
    paging: PagingSummary
    active_sort: Optional[ActiveSort]

    @classmethod
    def build(
        cls,
        state: ViewState,
        response: FetchResponse,
        columns: Sequence[ColumnDefinition],
        ordering: bool = True,
    ) -> "RenderModel":
        active_sort = None
        if ordering and 0 <= state.sort_column_index < len(columns):
            if columns[state.sort_column_index].sortable:
                active_sort = ActiveSort(state.sort_column_index, state.sort_direction)

        return cls(
            rows=tuple(response.rows),
            paging=PagingSummary.compute(state, response),
            active_sort=active_sort,
        )
