"""
Tests for coretable/models.py
"""

import dataclasses

import pytest

from coretable.errors import ConfigurationError
from coretable.models import (
    ColumnDefinition,
    FetchRequest,
    FetchResponse,
    PagingSummary,
    RenderModel,
    SortDirection,
    ViewState,
    first_sortable_index,
)


class TestColumnDefinition:
    """Tests for ColumnDefinition."""

    def test_defaults(self):
        col = ColumnDefinition(key="id", title="ID")
        assert col.sortable is True
        assert col.visible is True

    def test_is_frozen(self):
        col = ColumnDefinition(key="id", title="ID")
        with pytest.raises(dataclasses.FrozenInstanceError):
            col.title = "Other"

    def test_from_dict_accepts_aliases(self):
        """data/orderable are read as key/sortable."""
        col = ColumnDefinition.from_dict({"data": "name", "title": "Name", "orderable": False})
        assert col.key == "name"
        assert col.sortable is False

    def test_from_dict_title_defaults_to_key(self):
        assert ColumnDefinition.from_dict({"key": "email"}).title == "email"

    def test_from_dict_visible_flag(self):
        assert ColumnDefinition.from_dict({"key": "x", "visible": False}).visible is False

    def test_from_dict_requires_key(self):
        with pytest.raises(ConfigurationError):
            ColumnDefinition.from_dict({"title": "No key"})

    def test_from_dict_requires_mapping(self):
        with pytest.raises(ConfigurationError):
            ColumnDefinition.from_dict(["id", "ID"])

    def test_to_dict(self):
        col = ColumnDefinition(key="id", title="ID", sortable=False)
        assert col.to_dict() == {"key": "id", "title": "ID", "sortable": False, "visible": True}


class TestFirstSortableIndex:

    def test_skips_unsortable_leading_columns(self):
        cols = [
            ColumnDefinition("a", "A", sortable=False),
            ColumnDefinition("b", "B"),
            ColumnDefinition("c", "C"),
        ]
        assert first_sortable_index(cols) == 1

    def test_defaults_to_zero_when_none_sortable(self):
        cols = [ColumnDefinition("a", "A", sortable=False)]
        assert first_sortable_index(cols) == 0

    def test_empty(self):
        assert first_sortable_index([]) == 0


class TestViewState:
    """Tests for ViewState transitions."""

    def test_with_sort_same_column_flips(self):
        state = ViewState(sort_column_index=1, sort_direction=SortDirection.ASCENDING)
        new = state.with_sort(1)
        assert new.sort_column_index == 1
        assert new.sort_direction is SortDirection.DESCENDING
        assert new.with_sort(1).sort_direction is SortDirection.ASCENDING

    def test_with_sort_other_column_resets_to_ascending(self):
        state = ViewState(sort_column_index=0, sort_direction=SortDirection.DESCENDING)
        new = state.with_sort(2)
        assert new.sort_column_index == 2
        assert new.sort_direction is SortDirection.ASCENDING

    def test_transitions_do_not_touch_original(self):
        state = ViewState(page=3, search_term="old")
        state.with_search("new")
        state.with_page(4)
        assert state.page == 3
        assert state.search_term == "old"

    def test_with_search_resets_page(self):
        state = ViewState(page=4)
        new = state.with_search("abc")
        assert new.page == 0
        assert new.search_term == "abc"

    def test_with_page_clamps_at_zero(self):
        assert ViewState(page=0).with_page(-1).page == 0

    def test_offset(self):
        assert ViewState(page=2, page_size=25).offset == 50


class TestFetchRequest:
    """Tests for FetchRequest building and wire params."""

    def test_build_with_sortable_column(self, columns):
        state = ViewState(page=1, page_size=10, search_term="bob",
                          sort_column_index=1, sort_direction=SortDirection.DESCENDING)
        request = FetchRequest.build(7, state, columns)

        assert request.to_params() == {
            "token": 7,
            "offset": 10,
            "limit": 10,
            "search": "bob",
            "sortField": "name",
            "sortDirection": "desc",
        }

    def test_build_omits_sort_when_ordering_disabled(self, columns):
        request = FetchRequest.build(1, ViewState(), columns, ordering=False)
        params = request.to_params()
        assert "sortField" not in params
        assert "sortDirection" not in params

    def test_build_omits_sort_for_unsortable_column(self):
        cols = [ColumnDefinition("a", "A", sortable=False)]
        request = FetchRequest.build(1, ViewState(sort_column_index=0), cols)
        assert request.sort_field is None
        assert "sortField" not in request.to_params()


class TestFetchResponse:
    """Tests for response envelope parsing."""

    def test_parse_standard_envelope(self):
        response = FetchResponse.parse({
            "token": 3,
            "totalRecords": 100,
            "filteredRecords": 40,
            "rows": [{"id": 1}, {"id": 2}],
        })
        assert response.token == 3
        assert response.total_records == 100
        assert response.filtered_records == 40
        assert len(response.rows) == 2
        assert response.well_formed is True

    def test_parse_datatables_envelope(self):
        response = FetchResponse.parse({
            "draw": "5",
            "recordsTotal": 57,
            "recordsFiltered": 12,
            "data": [{"id": 1}],
        })
        assert response.token == 5
        assert response.total_records == 57
        assert response.filtered_records == 12
        assert response.rows == [{"id": 1}]

    def test_rows_not_a_list_is_empty_result(self):
        response = FetchResponse.parse({"totalRecords": 5, "filteredRecords": 5, "rows": "oops"})
        assert response.rows == []
        assert response.filtered_records == 0
        assert response.well_formed is False

    def test_non_mapping_payload_is_empty_result(self):
        response = FetchResponse.parse(["not", "an", "envelope"])
        assert response.rows == []
        assert response.well_formed is False

    def test_non_mapping_rows_are_dropped(self):
        response = FetchResponse.parse({"filteredRecords": 3, "rows": [{"id": 1}, 42, None]})
        assert response.rows == [{"id": 1}]
        assert response.well_formed is False

    def test_bad_counts_fall_back(self):
        response = FetchResponse.parse({"totalRecords": "many", "filteredRecords": -4, "rows": []})
        assert response.total_records == 0
        assert response.filtered_records == 0

    def test_missing_counts_derive_from_rows(self):
        response = FetchResponse.parse({"rows": [{"id": 1}, {"id": 2}]})
        assert response.total_records == 2
        assert response.filtered_records == 2


class TestPagingSummary:
    """Tests for the pagination footer computation."""

    def test_middle_page(self):
        summary = PagingSummary.compute(ViewState(page=1, page_size=10), FetchResponse(filtered_records=25))
        assert summary.text == "Showing 11 to 20 of 25 entries"
        assert summary.previous_disabled is False
        assert summary.next_disabled is False

    def test_last_partial_page(self):
        summary = PagingSummary.compute(ViewState(page=2, page_size=10), FetchResponse(filtered_records=25))
        assert (summary.start, summary.end) == (21, 25)
        assert summary.next_disabled is True

    def test_no_records(self):
        summary = PagingSummary.compute(ViewState(page=0, page_size=10), FetchResponse(filtered_records=0))
        assert summary.text == "Showing 0 to 0 of 0 entries"
        assert summary.previous_disabled is True
        assert summary.next_disabled is True

    def test_exact_page_boundary(self):
        summary = PagingSummary.compute(ViewState(page=1, page_size=10), FetchResponse(filtered_records=20))
        assert summary.end == 20
        assert summary.next_disabled is True


class TestRenderModel:

    def test_active_sort_for_sortable_column(self, columns):
        state = ViewState(sort_column_index=1, sort_direction=SortDirection.DESCENDING)
        model = RenderModel.build(state, FetchResponse(rows=[{"id": 1}], filtered_records=1), columns)
        assert model.active_sort.column_index == 1
        assert model.active_sort.direction is SortDirection.DESCENDING

    def test_no_active_sort_when_ordering_disabled(self, columns):
        model = RenderModel.build(ViewState(), FetchResponse(), columns, ordering=False)
        assert model.active_sort is None

    def test_no_active_sort_when_nothing_sortable(self):
        cols = [ColumnDefinition("a", "A", sortable=False)]
        model = RenderModel.build(ViewState(), FetchResponse(), cols)
        assert model.active_sort is None
