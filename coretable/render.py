"""
Projection of grid state onto the element tree.

build_layout() creates the static structure once the columns are known.
RenderSync then only swaps body rows, the paging footer and the sort
indicators. It decides what to show; it never decides when.
"""

from dataclasses import dataclass
from typing import Any, Mapping, Sequence

from shared.logging import get_logger

from .config import ClassNames, GridOptions
from .models import ColumnDefinition, RenderModel, SortDirection
from .view import Element

log = get_logger("grid", "render")

LOADING_TEXT = "Loading..."
EMPTY_TEXT = "No matching records found"
FETCH_ERROR_TEXT = "Error loading data."
DISCOVERY_ERROR_TEXT = "Error: Could not load column definitions."
NO_COLUMNS_TEXT = "Error: No columns defined."
SEARCH_PLACEHOLDER = "Search..."


@dataclass
class GridLayout:
    """Handles to the elements RenderSync updates."""
    container: Element
    search_input: Element
    headers: list[Element]
    body: Element
    info: Element
    previous_button: Element
    next_button: Element


def build_layout(container: Element, columns: Sequence[ColumnDefinition], options: GridOptions) -> GridLayout:
    """Replace the container's content with the grid skeleton."""
    cn = options.class_names
    container.empty().add_class(cn.container)

    search = Element("div", classes=[cn.search])
    search_input = Element("input", type="text", placeholder=SEARCH_PLACEHOLDER)
    search.append(search_input)
    search.set_hidden(not options.searching)

    wrapper = Element("div", classes=[cn.table_wrapper])
    table = Element("table", classes=[cn.table])
    thead = Element("thead")
    header_row = Element("tr")
    body = Element("tbody")
    wrapper.append(table)
    table.append(thead, body)
    thead.append(header_row)

    headers = []
    for index, column in enumerate(columns):
        th = Element("th", text=column.title)
        th.data["column_index"] = index
        if options.ordering and column.sortable:
            th.add_class(cn.sortable)
        header_row.append(th)
        headers.append(th)

    footer = Element("div", classes=[cn.footer])
    info = Element("span", classes=[cn.info])
    paging = Element("div", classes=[cn.paging])
    paging.set_hidden(not options.paging)

    previous_button = Element("button", text="Previous", classes=[cn.paginate_btn, cn.disabled])
    previous_button.data["page"] = "previous"
    next_button = Element("button", text="Next", classes=[cn.paginate_btn, cn.disabled])
    next_button.data["page"] = "next"
    paging.append(previous_button, next_button)
    footer.append(info, paging)

    container.append(search, wrapper, footer)

    return GridLayout(
        container=container,
        search_input=search_input,
        headers=headers,
        body=body,
        info=info,
        previous_button=previous_button,
        next_button=next_button,
    )


def render_fatal(container: Element, class_names: ClassNames, message: str) -> None:
    """Replace the whole container with a single error element."""
    container.empty()
    container.append(Element("div", text=message, classes=[class_names.error]))
    log.error("grid.render.fatal", message=message)


def cell_text(row: Mapping[str, Any], key: str) -> str:
    value = row.get(key)
    return "" if value is None else str(value)


class RenderSync:
    """Applies RenderModels and placeholders to a GridLayout."""

    def __init__(self, layout: GridLayout, columns: Sequence[ColumnDefinition], class_names: ClassNames):
        self.layout = layout
        self.columns = list(columns)
        self.cn = class_names

    def _placeholder(self, text: str, error: bool = False) -> None:
        cell = Element("td", text=text, colspan=len(self.columns))
        if error:
            cell.add_class(self.cn.error)
        self.layout.body.empty().append(Element("tr").append(cell))

    def show_loading(self) -> None:
        self._placeholder(LOADING_TEXT)

    def show_error(self) -> None:
        """Inline error row; footer and headers keep their last state."""
        self._placeholder(FETCH_ERROR_TEXT, error=True)

    def apply(self, model: RenderModel) -> None:
        """Rows, summary, paging buttons and sort indicators, together."""
        self._render_rows(model.rows)
        self._render_paging(model)
        self._render_sort(model)

    def _render_rows(self, rows: Sequence[Mapping[str, Any]]) -> None:
        if not rows:
            self._placeholder(EMPTY_TEXT)
            return

        trs = []
        for row in rows:
            tr = Element("tr")
            for column in self.columns:
                tr.append(Element("td", text=cell_text(row, column.key)))
            trs.append(tr)
        self.layout.body.empty().append(*trs)

    def _render_paging(self, model: RenderModel) -> None:
        paging = model.paging
        self.layout.info.set_text(paging.text)
        self.layout.previous_button.toggle_class(self.cn.disabled, paging.previous_disabled)
        self.layout.next_button.toggle_class(self.cn.disabled, paging.next_disabled)

    def _render_sort(self, model: RenderModel) -> None:
        active = model.active_sort
        for index, th in enumerate(self.layout.headers):
            th.remove_class(self.cn.sorting_asc, self.cn.sorting_desc)
            if active is not None and index == active.column_index:
                th.add_class(
                    self.cn.sorting_asc if active.direction is SortDirection.ASCENDING
                    else self.cn.sorting_desc
                )
