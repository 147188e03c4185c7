"""
Grid configuration.

GridOptions is the whole configuration surface: endpoints, HTTP method,
extra request parameters, page size, feature toggles and the class-name
renaming table. from_dict() merges user values over the defaults and
understands the original plugin's nested ``ajax`` block and camelCase keys.
"""

import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Callable, Mapping, Optional, Union

import yaml

from shared.logging import get_logger

from .errors import ConfigurationError
from .models import ColumnDefinition

log = get_logger("grid", "config")

ParamsHook = Callable[[dict], Mapping[str, Any]]
ExtraParams = Union[ParamsHook, Mapping[str, Any], None]

DEFAULT_PAGE_SIZE = 10
DEFAULT_SEARCH_DELAY_MS = 400

# camelCase spellings accepted in option files
_ALIASES = {
    "pageLength": "page_size",
    "pageSize": "page_size",
    "classNames": "class_names",
    "columnsUrl": "columns_url",
    "searchDelay": "search_delay_ms",
    "extraParams": "extra_params",
}


@dataclass(frozen=True)
class ClassNames:
    """Renaming table for every structural class the grid applies."""
    container: str = "core-table-container"
    search: str = "core-table-search"
    table_wrapper: str = "core-table-wrapper"
    table: str = "core-table"
    footer: str = "core-table-footer"
    info: str = "core-table-info"
    paging: str = "core-table-paging"
    paginate_btn: str = "paginate-btn"
    disabled: str = "disabled"
    sortable: str = "sortable"
    sorting_asc: str = "sorting-asc"
    sorting_desc: str = "sorting-desc"
    error: str = "core-table-error"

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "ClassNames":
        if not data:
            return cls()
        known = {f.name for f in fields(cls)}
        values = {}
        for name, value in data.items():
            key = _snake(name)
            if key not in known:
                log.warning("grid.config.unknown_class_name", name=name)
                continue
            values[key] = str(value)
        return cls(**values)


def _snake(name: str) -> str:
    out = []
    for ch in name:
        if ch.isupper():
            out.append("_")
            out.append(ch.lower())
        else:
            out.append(ch)
    return "".join(out)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def params_hook(extra: ExtraParams) -> ParamsHook:
    """
    Normalize extra request parameters to a single callback.

    A mapping becomes the constant function ``base -> {**base, **mapping}``:
    on a key collision the caller's value wins.
    """
    if extra is None:
        return lambda base: base
    if callable(extra):
        return extra
    if isinstance(extra, Mapping):
        static = dict(extra)
        return lambda base: {**base, **static}
    raise ConfigurationError(f"extra_params must be a mapping or callable, got {type(extra).__name__}")


@dataclass
class GridOptions:
    """Configuration for one grid instance."""
    url: str = ""
    method: str = "GET"
    columns_url: Optional[str] = None
    columns: list[ColumnDefinition] = field(default_factory=list)
    paging: bool = True
    searching: bool = True
    ordering: bool = True
    page_size: int = DEFAULT_PAGE_SIZE
    search_delay_ms: int = DEFAULT_SEARCH_DELAY_MS
    extra_params: ExtraParams = None
    class_names: ClassNames = field(default_factory=ClassNames)
    request_timeout: float = 30.0
    headers: dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        if not isinstance(self.method, str):
            raise ConfigurationError(f"method must be a string, got {self.method!r}")
        self.method = self.method.upper()
        if not isinstance(self.columns, (list, tuple)):
            raise ConfigurationError(f"columns must be a list, got {type(self.columns).__name__}")
        self.columns = [
            col if isinstance(col, ColumnDefinition) else ColumnDefinition.from_dict(col)
            for col in self.columns
        ]
        if isinstance(self.class_names, Mapping):
            self.class_names = ClassNames.from_dict(self.class_names)
        self.validate()

    def validate(self) -> None:
        if not self.url or not isinstance(self.url, str):
            raise ConfigurationError("A data url is required")
        if isinstance(self.page_size, bool) or not isinstance(self.page_size, int) or self.page_size < 1:
            raise ConfigurationError(f"page_size must be a positive integer, got {self.page_size!r}")
        if not _is_number(self.search_delay_ms) or self.search_delay_ms < 0:
            raise ConfigurationError(f"search_delay_ms must be a non-negative number, got {self.search_delay_ms!r}")
        if not _is_number(self.request_timeout) or self.request_timeout <= 0:
            raise ConfigurationError(f"request_timeout must be a positive number, got {self.request_timeout!r}")
        params_hook(self.extra_params)

    def build_params(self, base: dict) -> dict:
        """Apply the extra-params extension point to the computed parameters."""
        return dict(params_hook(self.extra_params)(dict(base)))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "GridOptions":
        """
        Build options from a plain mapping (e.g. parsed YAML).

        Keys may be snake_case or the original camelCase; an ``ajax`` block
        may carry url, method and columnsUrl.
        """
        if not isinstance(data, Mapping):
            raise ConfigurationError("Options must be a mapping")

        values: dict[str, Any] = {}
        for name, value in data.items():
            if name == "ajax":
                continue
            values[_ALIASES.get(name, name)] = value

        ajax = data.get("ajax") or {}
        if not isinstance(ajax, Mapping):
            raise ConfigurationError("ajax must be a mapping")
        for name, value in ajax.items():
            key = _ALIASES.get(name, name)
            if value is not None or key not in values:
                values[key] = value

        known = {f.name for f in fields(cls)}
        unknown = sorted(set(values) - known)
        if unknown:
            log.warning("grid.config.unknown_options", options=unknown)
        return cls(**{k: v for k, v in values.items() if k in known})


def load_options(path: Union[str, Path]) -> GridOptions:
    """
    Load options from a YAML file.

    CORETABLE_URL, when set, overrides the data url from the file.
    """
    config_path = Path(path)
    if not config_path.exists():
        raise ConfigurationError(f"Config file not found: {config_path}")

    data = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"{config_path} must contain a mapping")

    env_url = os.environ.get("CORETABLE_URL")
    if env_url:
        ajax = data.get("ajax")
        if isinstance(ajax, dict):
            ajax.pop("url", None)
        data["url"] = env_url

    options = GridOptions.from_dict(data)
    log.info("grid.config.loaded", path=str(config_path), url=options.url,
             columns=len(options.columns), columns_url=options.columns_url)
    return options
