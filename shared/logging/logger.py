"""
GridLogger - Structured logging for CoreTable components.
"""

import logging
import os
import time
import traceback
from pathlib import Path
from typing import Any, Optional
from logging.handlers import RotatingFileHandler

from .formatters import JsonLinesFormatter, ConsoleFormatter
from .context import bind_token

# Cache of loggers by module.component
_loggers: dict[str, "GridLogger"] = {}

_log_dir: Optional[Path] = None


def _get_log_dir() -> Path:
    """Get or create log directory (CORETABLE_LOG_DIR or ./logs)."""
    global _log_dir
    if _log_dir is None:
        _log_dir = Path(os.environ.get("CORETABLE_LOG_DIR", "logs"))
        _log_dir.mkdir(parents=True, exist_ok=True)
    return _log_dir


def get_logger(module: str, component: str, console: bool = True) -> "GridLogger":
    """
    Get or create a GridLogger for a module/component.

    Args:
        module: Module name (grid, transport, cli)
        component: Component within module (fetch, controller, etc.)
        console: Whether to also output to console

    Returns:
        GridLogger instance
    """
    key = f"{module}.{component}"
    if key not in _loggers:
        _loggers[key] = GridLogger(module, component, console)
    return _loggers[key]


class GridLogger:
    """
    Structured logger for grid components.

    Outputs JSON Lines to file and optionally human-readable to console.
    All events include the correlation ID of the current context.
    """

    def __init__(self, module: str, component: str, console: bool = True):
        self.module = module
        self.component = component
        self._logger = logging.getLogger(f"coretable.{module}.{component}")
        self._logger.setLevel(logging.DEBUG)
        self._logger.propagate = False

        self._logger.handlers.clear()

        log_file = _get_log_dir() / f"{module}.jsonl"
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=10 * 1024 * 1024,  # 10MB
            backupCount=5,
            encoding='utf-8',
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(JsonLinesFormatter())
        self._logger.addHandler(file_handler)

        if console:
            level_name = os.environ.get("CORETABLE_CONSOLE_LEVEL", "WARNING")
            console_handler = logging.StreamHandler()
            console_handler.setLevel(getattr(logging, level_name.upper(), logging.WARNING))
            console_handler.setFormatter(ConsoleFormatter())
            self._logger.addHandler(console_handler)

    def event(
        self,
        event_type: str,
        level: str = "INFO",
        **data: Any,
    ) -> None:
        """
        Log a structured event.

        Args:
            event_type: Event type identifier (e.g., "grid.fetch.accepted")
            level: Log level (DEBUG, INFO, WARNING, ERROR)
            **data: Event-specific data fields
        """
        log_level = getattr(logging, level.upper(), logging.INFO)

        event_data = {
            "event_type": event_type,
            "grid_module": self.module,
            "component": self.component,
            **data,
        }

        self._logger.log(
            log_level,
            event_type,
            extra={
                "event_type": event_type,
                "grid_module": self.module,
                "component": self.component,
                "event_data": event_data,
                "event_fields": data,
            },
        )

    def debug(self, event_type: str, **data: Any) -> None:
        """Log a DEBUG level event."""
        self.event(event_type, level="DEBUG", **data)

    def info(self, event_type: str, **data: Any) -> None:
        """Log an INFO level event."""
        self.event(event_type, level="INFO", **data)

    def warning(self, event_type: str, **data: Any) -> None:
        """Log a WARNING level event."""
        self.event(event_type, level="WARNING", **data)

    def error(self, event_type: str, **data: Any) -> None:
        """Log an ERROR level event."""
        self.event(event_type, level="ERROR", **data)

    def exception(
        self,
        error: BaseException,
        event_type: str = "error",
        context: Optional[dict] = None,
    ) -> None:
        """
        Log an exception with its stack trace.

        Args:
            error: The exception to log
            event_type: Event type (default: "error")
            context: Additional context about what was happening
        """
        self.event(
            event_type,
            level="ERROR",
            error_class=type(error).__name__,
            error_message=str(error),
            stack_trace="".join(traceback.format_exception(type(error), error, error.__traceback__)),
            context=context or {},
        )

    # Fetch cycle helpers

    def cycle_start(self, token: int, url: str, **kwargs: Any) -> float:
        """
        Log the start of a fetch cycle and return its start time.

        Args:
            token: Request token minted for the cycle
            url: Endpoint the cycle fetches from
            **kwargs: Additional fields (offset, limit, search...)

        Returns:
            Start time (for duration calculation)
        """
        bind_token(token)
        self.event(
            f"{self.module}.fetch.started",
            action="started",
            token=token,
            url=url,
            **kwargs,
        )
        return time.time()

    def cycle_complete(
        self,
        token: int,
        start_time: float,
        accepted: bool,
        **kwargs: Any,
    ) -> None:
        """
        Log completion of a fetch cycle.

        Args:
            token: Request token
            start_time: Time from cycle_start()
            accepted: Whether the sequencer accepted the response
            **kwargs: Additional fields
        """
        duration_ms = (time.time() - start_time) * 1000
        self.event(
            f"{self.module}.fetch.{'accepted' if accepted else 'discarded'}",
            level="INFO" if accepted else "DEBUG",
            action="completed",
            token=token,
            accepted=accepted,
            duration_ms=round(duration_ms, 2),
            **kwargs,
        )

    def cycle_error(
        self,
        token: int,
        error: str,
        error_type: str,
        start_time: Optional[float] = None,
        **kwargs: Any,
    ) -> None:
        """
        Log a failed fetch cycle.

        Args:
            token: Request token
            error: Error message
            error_type: Error type/category
            start_time: Optional start time for duration
            **kwargs: Additional fields
        """
        event_data = {
            "action": "failed",
            "token": token,
            "error": error,
            "error_type": error_type,
            **kwargs,
        }
        if start_time:
            event_data["duration_ms"] = round((time.time() - start_time) * 1000, 2)

        self.event(f"{self.module}.fetch.failed", level="ERROR", **event_data)
