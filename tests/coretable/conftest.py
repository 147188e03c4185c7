"""
Shared fixtures for grid controller tests.
"""

import pytest

from coretable.controller import GridController
from coretable.render import RenderSync, build_layout
from coretable.view import Element

from tests.helpers import FakeTransport, paged_responder


@pytest.fixture
def container() -> Element:
    return Element("div", id="grid")


@pytest.fixture
def layout(container, columns, options):
    return build_layout(container, columns, options)


@pytest.fixture
def render_sync(layout, columns, options) -> RenderSync:
    return RenderSync(layout, columns, options.class_names)


@pytest.fixture
def paged_transport() -> FakeTransport:
    """Transport serving a 25-row table."""
    return FakeTransport(paged_responder(25))


@pytest.fixture
def grid(container, options, paged_transport) -> GridController:
    return GridController(container, options, paged_transport, grid_id="grid-test")


@pytest.fixture
def parked_grid(container, options, fake_transport) -> GridController:
    """Controller whose requests stay pending until the test resolves them."""
    return GridController(container, options, fake_transport, grid_id="grid-parked")
