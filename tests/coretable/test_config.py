"""
Tests for coretable/config.py
"""

import os
from unittest.mock import patch

import pytest

from coretable.config import ClassNames, GridOptions, load_options, params_hook
from coretable.errors import ConfigurationError
from coretable.models import ColumnDefinition


class TestClassNames:

    def test_defaults(self):
        cn = ClassNames()
        assert cn.container == "core-table-container"
        assert cn.paginate_btn == "paginate-btn"
        assert cn.sorting_desc == "sorting-desc"

    def test_from_dict_accepts_camel_case(self):
        cn = ClassNames.from_dict({"tableWrapper": "wrap", "sortingAsc": "up"})
        assert cn.table_wrapper == "wrap"
        assert cn.sorting_asc == "up"
        assert cn.sorting_desc == "sorting-desc"

    def test_from_dict_ignores_unknown(self):
        cn = ClassNames.from_dict({"bogus": "x"})
        assert cn == ClassNames()


class TestParamsHook:

    def test_none_is_identity(self):
        assert params_hook(None)({"a": 1}) == {"a": 1}

    def test_mapping_merges_last_wins(self):
        hook = params_hook({"tenant": "acme", "limit": 99})
        assert hook({"limit": 10, "offset": 0}) == {"limit": 99, "offset": 0, "tenant": "acme"}

    def test_callable_is_used_as_is(self):
        hook = params_hook(lambda base: {**base, "computed": base["offset"] + 1})
        assert hook({"offset": 4})["computed"] == 5

    def test_rejects_other_types(self):
        with pytest.raises(ConfigurationError):
            params_hook(42)


class TestGridOptions:
    """Tests for GridOptions construction and validation."""

    def test_defaults(self):
        options = GridOptions(url="http://x/rows")
        assert options.method == "GET"
        assert options.page_size == 10
        assert options.search_delay_ms == 400
        assert options.paging and options.searching and options.ordering
        assert options.columns_url is None

    def test_url_required(self):
        with pytest.raises(ConfigurationError):
            GridOptions()

    def test_page_size_must_be_positive(self):
        with pytest.raises(ConfigurationError):
            GridOptions(url="http://x", page_size=0)

    def test_page_size_rejects_bool(self):
        """YAML ``true`` must not pass as a page size of 1."""
        with pytest.raises(ConfigurationError):
            GridOptions(url="http://x", page_size=True)

    @pytest.mark.parametrize("delay", [None, "400", True, -1])
    def test_search_delay_must_be_non_negative_number(self, delay):
        with pytest.raises(ConfigurationError):
            GridOptions(url="http://x", search_delay_ms=delay)

    @pytest.mark.parametrize("timeout", [None, "30", False, 0])
    def test_request_timeout_must_be_positive_number(self, timeout):
        with pytest.raises(ConfigurationError):
            GridOptions(url="http://x", request_timeout=timeout)

    def test_fractional_timeout_accepted(self):
        assert GridOptions(url="http://x", request_timeout=2.5).request_timeout == 2.5

    def test_bad_method_and_columns_types(self):
        with pytest.raises(ConfigurationError):
            GridOptions(url="http://x", method=None)
        with pytest.raises(ConfigurationError):
            GridOptions(url="http://x", columns=None)

    def test_method_upper_cased(self):
        assert GridOptions(url="http://x", method="post").method == "POST"

    def test_columns_from_dicts(self):
        options = GridOptions(url="http://x", columns=[{"data": "id", "title": "ID"}])
        assert options.columns == [ColumnDefinition("id", "ID")]

    def test_build_params_does_not_mutate_base(self):
        options = GridOptions(url="http://x", extra_params={"k": "v"})
        base = {"offset": 0}
        assert options.build_params(base) == {"offset": 0, "k": "v"}
        assert base == {"offset": 0}

    def test_from_dict_original_shape(self):
        """The nested ajax block and camelCase keys are understood."""
        options = GridOptions.from_dict({
            "ajax": {"url": "http://x/rows", "method": "post", "columnsUrl": "http://x/cols"},
            "pageLength": 25,
            "searching": False,
            "classNames": {"error": "oops"},
        })
        assert options.url == "http://x/rows"
        assert options.method == "POST"
        assert options.columns_url == "http://x/cols"
        assert options.page_size == 25
        assert options.searching is False
        assert options.class_names.error == "oops"

    def test_from_dict_ignores_unknown_keys(self):
        options = GridOptions.from_dict({"url": "http://x", "theme": "dark"})
        assert options.url == "http://x"


class TestLoadOptions:
    """Tests for YAML loading."""

    def test_load_yaml(self, temp_dir):
        path = temp_dir / "grid.yaml"
        path.write_text(
            "url: http://x/rows\n"
            "page_size: 5\n"
            "columns:\n"
            "  - {key: id, title: ID}\n"
            "  - {key: secret, title: Secret, visible: false}\n",
            encoding="utf-8",
        )
        options = load_options(path)
        assert options.page_size == 5
        assert [c.key for c in options.columns] == ["id", "secret"]
        assert options.columns[1].visible is False

    def test_missing_file(self, temp_dir):
        with pytest.raises(ConfigurationError):
            load_options(temp_dir / "nope.yaml")

    def test_non_mapping_file(self, temp_dir):
        path = temp_dir / "grid.yaml"
        path.write_text("- just\n- a list\n", encoding="utf-8")
        with pytest.raises(ConfigurationError):
            load_options(path)

    def test_env_url_override(self, temp_dir):
        path = temp_dir / "grid.yaml"
        path.write_text("ajax:\n  url: http://file/rows\n", encoding="utf-8")
        with patch.dict(os.environ, {"CORETABLE_URL": "http://env/rows"}):
            options = load_options(path)
        assert options.url == "http://env/rows"
