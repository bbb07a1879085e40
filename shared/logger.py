"""
Execview Structured Logger
===========================

Provides :class:`ExecviewLogger`, a thin facade over :mod:`logging` that
tags every record with the emitting *component* (``"parser"``,
``"dispatch"``, ``"cli"``) and the current *operation*, renders to the
terminal through Rich, and can additionally write JSON lines to a
rotating file.

A logger built without a console handler or log file leaves the named
:mod:`logging` logger untouched: level, handlers and propagation stay as
the host application configured them, and the ``execview`` root only
carries a :class:`logging.NullHandler`.

References:
    - Python logging HOWTO. https://docs.python.org/3/howto/logging.html
    - Rich library. https://github.com/Textualize/rich
"""

from __future__ import annotations

import json
import logging
import time
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, TYPE_CHECKING

from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme

if TYPE_CHECKING:
    from shared.config import GlobalConfig

_LOG_THEME = Theme(
    {
        "log.level.debug": "dim cyan",
        "log.level.info": "bold bright_blue",
        "log.level.warning": "bold yellow",
        "log.level.error": "bold red",
        "log.level.critical": "bold white on red",
    }
)

_ROOT_LOGGER_NAME = "execview"


class _JSONFormatter(logging.Formatter):
    """Emit each record as a single-line JSON object.

    Output fields::

        {"timestamp": "...", "level": "DEBUG", "logger": "execview.parser",
         "message": "...", "component": "parser", "operation": "sections",
         "extra": {"count": 31}}
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for attr in ("component", "operation"):
            val = getattr(record, attr, None)
            if val is not None:
                entry[attr] = val

        extra = getattr(record, "execview_extra", None)
        if extra is not None:
            entry["extra"] = extra

        if record.exc_info and record.exc_info[1] is not None:
            entry["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(entry, ensure_ascii=False, default=str)


class _ConsoleHandler(RichHandler):
    """RichHandler writing to stderr with the execview theme."""

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(
            console=Console(theme=_LOG_THEME, stderr=True),
            show_path=False,
            show_time=True,
            rich_tracebacks=True,
            tracebacks_show_locals=False,
            markup=False,
            **kwargs,
        )


class _FileHandler(RotatingFileHandler):
    """Rotating log file attached by :class:`ExecviewLogger`."""


_OWNED_HANDLERS = (_ConsoleHandler, _FileHandler)

# Hosts attach real handlers; the package root only carries a NullHandler.
logging.getLogger(_ROOT_LOGGER_NAME).addHandler(logging.NullHandler())


class ExecviewLogger:
    """Component-scoped structured logger.

    Usage::

        log = ExecviewLogger("parser", log_level="DEBUG", console_output=True)
        with log.operation("program_headers"):
            log.debug("Decoding %d entries", count, table_offset=0x40)
        with log.timed("decode"):
            ...

    Extra keyword arguments to the log methods are collected into the
    record's ``extra`` payload (visible in JSON output).

    Args:
        component:       Emitting part of the decoder.
        log_level:       Minimum severity name, ``None`` keeps the current level.
        log_file:        Rotating log file path, ``None`` disables it.
        json_logs:       Emit JSON lines to the log file.
        max_bytes:       Rotation threshold for the log file.
        backup_count:    Number of rotated files to keep.
        console_output:  Attach a Rich console handler on stderr.
    """

    def __init__(
        self,
        component: str,
        *,
        log_level: str | None = None,
        log_file: str | Path | None = None,
        json_logs: bool = False,
        max_bytes: int = 10_485_760,
        backup_count: int = 5,
        console_output: bool = False,
    ) -> None:
        self._component = component
        self._operation: str | None = None
        self._logger = logging.getLogger(f"{_ROOT_LOGGER_NAME}.{component}")

        # A bare logger only looks the named logger up; level, handlers and
        # propagation stay whatever the host application configured.
        if log_level is not None:
            self._logger.setLevel(getattr(logging, log_level.upper(), logging.WARNING))
        if not console_output and log_file is None:
            return

        level = self._logger.getEffectiveLevel()
        for handler in [h for h in self._logger.handlers if isinstance(h, _OWNED_HANDLERS)]:
            self._logger.removeHandler(handler)
            handler.close()

        if console_output:
            self._logger.addHandler(_ConsoleHandler(level=level))

        if log_file is not None:
            file_path = Path(log_file)
            file_path.parent.mkdir(parents=True, exist_ok=True)
            fh = _FileHandler(
                filename=str(file_path),
                maxBytes=max_bytes,
                backupCount=backup_count,
                encoding="utf-8",
            )
            fh.setLevel(level)
            if json_logs:
                fh.setFormatter(_JSONFormatter())
            else:
                fh.setFormatter(
                    logging.Formatter(
                        fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
                        datefmt="%Y-%m-%dT%H:%M:%S%z",
                    )
                )
            self._logger.addHandler(fh)

        # Own handlers take over from the host application's.
        self._logger.propagate = False

    @classmethod
    def from_config(
        cls, component: str, settings: GlobalConfig, *, console_output: bool = False
    ) -> ExecviewLogger:
        """Build a logger from the ``[global]`` configuration table."""
        return cls(
            component,
            log_level=settings.log_level,
            log_file=settings.log_file,
            json_logs=settings.log_json,
            console_output=console_output,
        )

    # ------------------------------------------------------------------ #
    #  Operation scope
    # ------------------------------------------------------------------ #

    class _OperationContext:
        """Temporarily binds an operation name."""

        def __init__(self, parent: ExecviewLogger, operation: str) -> None:
            self._parent = parent
            self._operation = operation
            self._prev: str | None = None

        def __enter__(self) -> ExecviewLogger:
            self._prev = self._parent._operation
            self._parent._operation = self._operation
            return self._parent

        def __exit__(self, *exc: Any) -> None:
            self._parent._operation = self._prev

    def operation(self, name: str) -> _OperationContext:
        """Context manager tagging records with ``operation=<name>``."""
        return self._OperationContext(self, name)

    # ------------------------------------------------------------------ #
    #  Log methods
    # ------------------------------------------------------------------ #

    def _enrich(self, kwargs: dict[str, Any]) -> dict[str, Any]:
        extra = kwargs.pop("extra", {}) or {}

        payload: dict[str, Any] = {}
        for key in list(kwargs):
            if key not in {"exc_info", "stack_info", "stacklevel"}:
                payload[key] = kwargs.pop(key)

        extra["component"] = self._component
        extra["operation"] = self._operation
        if payload:
            extra["execview_extra"] = payload

        kwargs["extra"] = extra
        return kwargs

    def debug(self, msg: str, *args: Any, **kwargs: Any) -> None:
        if self._logger.isEnabledFor(logging.DEBUG):
            self._logger.debug(msg, *args, **self._enrich(kwargs))

    def info(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._logger.info(msg, *args, **self._enrich(kwargs))

    def warning(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._logger.warning(msg, *args, **self._enrich(kwargs))

    # ------------------------------------------------------------------ #
    #  Timing helper
    # ------------------------------------------------------------------ #

    class _TimingContext:
        """Logs start and elapsed time of a block at DEBUG level."""

        def __init__(self, logger_inst: ExecviewLogger, label: str) -> None:
            self._logger = logger_inst
            self._label = label
            self._start: float = 0.0

        def __enter__(self) -> ExecviewLogger._TimingContext:
            self._start = time.perf_counter()
            self._logger.debug("Started: %s", self._label)
            return self

        def __exit__(self, *exc: Any) -> None:
            self._logger.debug(
                "Completed: %s (%.3f ms)", self._label, self.elapsed * 1000.0
            )

        @property
        def elapsed(self) -> float:
            return time.perf_counter() - self._start

    def timed(self, label: str) -> _TimingContext:
        """Context manager logging the duration of a block."""
        return self._TimingContext(self, label)

    @property
    def component(self) -> str:
        return self._component

    @property
    def underlying(self) -> logging.Logger:
        return self._logger
