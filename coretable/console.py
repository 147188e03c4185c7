"""
Terminal rendering of a grid's element tree with rich.
"""

from typing import Optional

from rich.console import Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .config import ClassNames
from .view import Element

SORT_MARKERS = {"asc": " ▲", "desc": " ▼"}


def _sort_marker(th: Element, cn: ClassNames) -> str:
    if th.has_class(cn.sorting_asc):
        return SORT_MARKERS["asc"]
    if th.has_class(cn.sorting_desc):
        return SORT_MARKERS["desc"]
    if th.has_class(cn.sortable):
        return " ·"
    return ""


def render_container(container: Element, class_names: Optional[ClassNames] = None):
    """Build a rich renderable for a mounted grid container."""
    cn = class_names or ClassNames()

    table_el = container.find_one("table", cn.table)
    if table_el is None:
        error = container.find_one(cls=cn.error)
        message = error.text if error is not None else "Grid not initialized"
        return Panel(Text(message, style="bold red"), title="CoreTable", border_style="red")

    table = Table(expand=True, show_lines=False)
    for index, th in enumerate(table_el.find("th")):
        table.add_column(Text(f"{index}: {th.text}{_sort_marker(th, cn)}"))

    for tr in table_el.find_one("tbody").children:
        cells = tr.children
        if len(cells) == 1 and cells[0].attrs.get("colspan"):
            style = "red" if cells[0].has_class(cn.error) else "dim"
            span = int(cells[0].attrs["colspan"])
            table.add_row(Text(cells[0].text, style=style), *[""] * (span - 1))
        else:
            table.add_row(*[Text(td.text) for td in cells])

    parts = []
    search = container.find_one(cls=cn.search)
    if search is not None and not search.hidden:
        value = search.find_one("input").attrs.get("value", "")
        parts.append(Text(f"Search: {value}", style="cyan"))
    parts.append(table)

    footer = []
    info = container.find_one(cls=cn.info)
    if info is not None and info.text:
        footer.append(info.text)
    paging = container.find_one(cls=cn.paging)
    if paging is not None and not paging.hidden:
        for button in paging.find("button"):
            enabled = not button.has_class(cn.disabled)
            footer.append(f"[{button.text}]" if enabled else f"({button.text})")
    if footer:
        parts.append(Text("  ".join(footer), style="bold"))

    return Panel(Group(*parts), title="CoreTable", border_style="cyan")
