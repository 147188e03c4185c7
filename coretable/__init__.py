"""
CoreTable - server-backed data-grid controller.

Keeps a small view state (page, page size, search term, sort), turns each
change into exactly one sequenced fetch, and renders only the response to
the latest request:
- Last-request-wins sequencing of out-of-order responses
- Debounced search input
- Optional remote column discovery before the first load
- Class-name renaming table for every structural element

Usage:
    from coretable import Element, GridOptions, HttpTransport, create_grid

    options = GridOptions(url="https://example.org/rows", columns_url="https://example.org/columns")
    async with HttpTransport() as transport:
        grid = await create_grid(Element("div"), options, transport)
        grid.toggle_sort(1)
        await grid.wait_idle()
"""

from .models import (
    ColumnDefinition,
    ViewState,
    SortDirection,
    FetchRequest,
    FetchResponse,
    PagingSummary,
    ActiveSort,
    RenderModel,
)
from .errors import ConfigurationError, TransportError
from .config import GridOptions, ClassNames, load_options
from .view import Element
from .debounce import DebounceScheduler
from .sequencer import RequestSequencer
from .transport import Transport, HttpTransport
from .render import RenderSync, GridLayout, build_layout
from .fetch import FetchOrchestrator
from .initializer import Initializer, InitPhase
from .controller import GridController, GridRegistry, create_grid

__all__ = [
    # Models
    "ColumnDefinition",
    "ViewState",
    "SortDirection",
    "FetchRequest",
    "FetchResponse",
    "PagingSummary",
    "ActiveSort",
    "RenderModel",
    # Errors
    "ConfigurationError",
    "TransportError",
    # Config
    "GridOptions",
    "ClassNames",
    "load_options",
    # View
    "Element",
    # Engine
    "DebounceScheduler",
    "RequestSequencer",
    "Transport",
    "HttpTransport",
    "RenderSync",
    "GridLayout",
    "build_layout",
    "FetchOrchestrator",
    "Initializer",
    "InitPhase",
    "GridController",
    "GridRegistry",
    "create_grid",
]

__version__ = "2.1.0"
