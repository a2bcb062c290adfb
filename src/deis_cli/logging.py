"""Structured operation logging for deis commands.

Every command runs inside :meth:`StructuredLogger.operation`, which records a
single JSON line per invocation in ``operations.jsonl``. Logging is strictly
best effort: when the log directory cannot be created or a write fails the
logger disables itself and the command carries on.

A conventional :mod:`logging` logger named ``deis_cli`` is used for debug
traces of HTTP traffic and is configured by :func:`configure_logging`.
"""
from __future__ import annotations

import json
import logging
import time
from collections.abc import Iterator, Mapping, Sequence
from contextlib import contextmanager
from datetime import UTC, datetime
from pathlib import Path

LOGGER_NAME = "deis_cli"
OPERATIONS_LOG_NAME = "operations.jsonl"
REDACTED = "***"
SENSITIVE_ARGS = frozenset({"password", "new_password", "token"})

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _json_safe(value: object) -> object:
    """Coerce *value* into something :func:`json.dumps` accepts."""
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, Path):
        return str(value)
    if isinstance(value, Mapping):
        return {str(key): _json_safe(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_json_safe(item) for item in value]
    return str(value)


def sanitize_args(args: Mapping[str, object] | None) -> dict[str, object]:
    """Return a JSON-safe copy of *args* with secrets redacted."""
    cleaned: dict[str, object] = {}
    for key, value in (args or {}).items():
        if key in SENSITIVE_ARGS and value not in (None, ""):
            cleaned[key] = REDACTED
        else:
            cleaned[key] = _json_safe(value)
    return cleaned


class OperationScope:
    """Collects the outcome of a single logged operation."""

    def __init__(self, name: str) -> None:
        self.name = name
        self.result: dict[str, object] | None = None

    def _record(
        self,
        status: str,
        message: str,
        *,
        changed: int | None,
        errors: Sequence[str] | None,
        warnings: Sequence[str] | None,
        context: Mapping[str, object] | None,
        extra: Mapping[str, object],
    ) -> None:
        result: dict[str, object] = {"status": status, "message": message}
        if changed is not None:
            result["changed"] = changed
        if errors is not None:
            result["errors"] = list(errors)
        if warnings is not None:
            result["warnings"] = list(warnings)
        if context:
            result["context"] = _json_safe(context)
        for key, value in extra.items():
            result[key] = _json_safe(value)
        self.result = result

    def success(
        self,
        message: str,
        *,
        changed: int | None = None,
        warnings: Sequence[str] | None = None,
        context: Mapping[str, object] | None = None,
        **extra: object,
    ) -> None:
        """Mark the operation as successful."""
        self._record(
            "success",
            message,
            changed=changed,
            errors=None,
            warnings=warnings,
            context=context,
            extra=extra,
        )

    def warning(
        self,
        message: str,
        *,
        changed: int | None = None,
        warnings: Sequence[str] | None = None,
        errors: Sequence[str] | None = None,
        context: Mapping[str, object] | None = None,
        **extra: object,
    ) -> None:
        """Mark the operation as completed with warnings."""
        self._record(
            "warning",
            message,
            changed=changed,
            errors=errors,
            warnings=list(warnings) if warnings else [message],
            context=context,
            extra=extra,
        )

    def error(
        self,
        message: str,
        *,
        errors: Sequence[str] | None = None,
        rc: int | None = None,
        context: Mapping[str, object] | None = None,
        **extra: object,
    ) -> None:
        """Mark the operation as failed."""
        if rc is not None:
            extra = {**extra, "rc": rc}
        self._record(
            "error",
            message,
            changed=None,
            errors=list(errors) if errors else [message],
            warnings=None,
            context=context,
            extra=extra,
        )


class StructuredLogger:
    """Append JSON operation records beneath *log_dir*."""

    def __init__(self, log_dir: Path) -> None:
        self._log_dir = Path(log_dir)
        self._operations_log_path = self._log_dir / OPERATIONS_LOG_NAME
        self._enabled = True
        try:
            self._log_dir.mkdir(parents=True, exist_ok=True)
        except OSError:
            self._enabled = False

    @property
    def enabled(self) -> bool:
        """Return whether records are still being written."""
        return self._enabled

    @contextmanager
    def operation(
        self,
        name: str,
        *,
        args: Mapping[str, object] | None = None,
        target: Mapping[str, object] | None = None,
    ) -> Iterator[OperationScope]:
        """Record the outcome of the enclosed block as a single operation."""
        scope = OperationScope(name)
        started = time.monotonic()
        try:
            yield scope
        except BaseException as exc:
            if scope.result is None:
                scope.error(str(exc) or type(exc).__name__)
            raise
        finally:
            if scope.result is None:
                scope.success("Completed.")
            self._write(
                {
                    "timestamp": datetime.now(UTC).isoformat(),
                    "operation": name,
                    "args": sanitize_args(args),
                    "target": _json_safe(target or {}),
                    "duration_ms": int((time.monotonic() - started) * 1000),
                    "result": scope.result,
                }
            )

    def _write(self, record: Mapping[str, object]) -> None:
        if not self._enabled:
            return
        try:
            with self._operations_log_path.open("a", encoding="utf-8") as handle:
                handle.write(json.dumps(record, sort_keys=True) + "\n")
        except OSError:
            self._enabled = False


def configure_logging(level: str | int | None = None) -> logging.Logger:
    """Configure and return the ``deis_cli`` debug logger."""
    logger = logging.getLogger(LOGGER_NAME)
    if isinstance(level, str):
        resolved = logging.getLevelName(level.strip().upper())
        if not isinstance(resolved, int):
            resolved = logging.WARNING
    elif isinstance(level, int):
        resolved = level
    else:
        resolved = logging.WARNING
    logger.setLevel(resolved)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_LOG_FORMAT))
        logger.addHandler(handler)
    return logger


__all__ = [
    "LOGGER_NAME",
    "OperationScope",
    "StructuredLogger",
    "configure_logging",
    "sanitize_args",
]
