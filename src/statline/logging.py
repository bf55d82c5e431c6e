"""Structured logging for the table engine.

`EngineLogger` stamps every record with a session id and an event id, and
exposes `.event()` for domain events under the ``statline`` namespace. Payloads
of registered events are validated against the models in
:mod:`statline.models.events`.
"""

from __future__ import annotations

import json
import logging
import sys
import uuid
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, TypeAlias

from pydantic import ValidationError

from statline.models.events import DEFAULT_EVENT, ENGINE_EVENT_SCHEMAS, ENGINE_NAMESPACE

EventData: TypeAlias = Mapping[str, Any]


def normalize_dotpath(value: str | None) -> str:
    return "" if not value else value.strip().strip(".")


def qualify_event_name(event_name: str, namespace: str) -> str:
    """Fully qualify `event_name` under `namespace` unless it already is."""
    name = normalize_dotpath(event_name)
    ns = normalize_dotpath(namespace)

    if not ns:
        return name or "invalid_event"
    if not name:
        return f"{ns}.invalid_event"
    if name == ns or name.startswith(f"{ns}."):
        return name
    return f"{ns}.{name}"


def _is_engine_event(full_event: str) -> bool:
    return full_event == ENGINE_NAMESPACE or full_event.startswith(f"{ENGINE_NAMESPACE}.")


def _validate_payload(full_event: str, payload: dict[str, Any]) -> dict[str, Any]:
    if _is_engine_event(full_event):
        if full_event not in ENGINE_EVENT_SCHEMAS:
            raise ValueError(f"Unknown engine event '{full_event}' (add to ENGINE_EVENT_SCHEMAS)")
        schema = ENGINE_EVENT_SCHEMAS[full_event]
    else:
        schema = ENGINE_EVENT_SCHEMAS.get(full_event)

    if schema is None:
        return payload

    try:
        model = schema.model_validate(payload, strict=True)
    except ValidationError as e:
        raise ValueError(f"Invalid payload for event '{full_event}': {e}") from e

    return model.model_dump(mode="python")


class EngineLogger(logging.LoggerAdapter):
    """LoggerAdapter that stamps session/event ids and emits validated domain events."""

    def __init__(
        self,
        logger: logging.Logger,
        *,
        namespace: str = ENGINE_NAMESPACE,
        session_id: str | None = None,
    ) -> None:
        self._namespace = normalize_dotpath(namespace)
        self._session_id = session_id or uuid.uuid4().hex
        super().__init__(logger, {"namespace": self._namespace, "session_id": self._session_id})

    @property
    def namespace(self) -> str:
        return str((self.extra or {}).get("namespace", ""))

    @property
    def session_id(self) -> str:
        return self._session_id

    def process(self, msg: Any, kwargs: dict[str, Any]) -> tuple[Any, dict[str, Any]]:
        caller_extra = kwargs.pop("extra", None)
        extra = dict(self.extra or {})

        if caller_extra is not None:
            if not isinstance(caller_extra, Mapping):
                raise TypeError("logging 'extra' must be a mapping")
            extra.update(caller_extra)

        extra["session_id"] = self._session_id
        extra["event_id"] = uuid.uuid4().hex

        ns = normalize_dotpath(str(extra.get("namespace") or ""))
        extra.setdefault("event", qualify_event_name(DEFAULT_EVENT, ns) if ns else DEFAULT_EVENT)

        kwargs["extra"] = extra
        return msg, kwargs

    def event(
        self,
        name: str,
        *,
        message: str | None = None,
        level: int = logging.INFO,
        data: EventData | None = None,
        exc: BaseException | None = None,
    ) -> None:
        if not self.isEnabledFor(level):
            return

        ns = self.namespace
        full_name = qualify_event_name(name, ns) if ns else normalize_dotpath(name) or "invalid_event"

        payload = _validate_payload(full_name, dict(data or {}))

        extra: dict[str, Any] = {"event": full_name}
        if payload:
            extra["data"] = payload

        exc_info = (type(exc), exc, exc.__traceback__) if exc is not None else None
        self.log(level, message or full_name, extra=extra, exc_info=exc_info)


class NullLogger(EngineLogger):
    """An EngineLogger that discards all log/event output."""

    def __init__(self, *, namespace: str = ENGINE_NAMESPACE, session_id: str = "null") -> None:
        base_logger = logging.Logger("statline.null")
        base_logger.addHandler(logging.NullHandler())
        base_logger.propagate = False
        base_logger.disabled = True
        super().__init__(base_logger, namespace=namespace, session_id=session_id)

    def __bool__(self) -> bool:
        return False


# ---------------------------------------------------------------------------
# Formatters
# ---------------------------------------------------------------------------


def _rfc3339_utc(created: float) -> str:
    return (
        datetime.fromtimestamp(created, tz=timezone.utc)
        .isoformat(timespec="milliseconds")
        .replace("+00:00", "Z")
    )


def _truncate(value: Any, *, max_len: int = 120) -> str:
    text = str(value)
    return text if len(text) <= max_len else (text[: max_len - 1] + "…")


class _StructuredFormatter(logging.Formatter):
    def _to_event_record(self, record: logging.LogRecord) -> dict[str, Any]:
        # Injected by EngineLogger.process; fallbacks keep formatters usable on plain records.
        event_id = getattr(record, "event_id", None) or uuid.uuid4().hex
        session_id = getattr(record, "session_id", None) or ""
        event = getattr(record, "event", None) or DEFAULT_EVENT
        data = getattr(record, "data", None)

        out: dict[str, Any] = {
            "event_id": str(event_id),
            "session_id": str(session_id),
            "timestamp": _rfc3339_utc(record.created),
            "level": record.levelname.lower(),
            "event": str(event),
            "message": record.getMessage(),
        }

        if isinstance(data, Mapping) and data:
            out["data"] = dict(data)

        if record.exc_info:
            exc_type, exc, _tb = record.exc_info
            out["error"] = {
                "type": getattr(exc_type, "__name__", str(exc_type)),
                "message": "" if exc is None else str(exc),
                "stack_trace": self.formatException(record.exc_info),
            }

        return out


class NdjsonFormatter(_StructuredFormatter):
    def format(self, record: logging.LogRecord) -> str:  # noqa: A003
        payload = self._to_event_record(record)
        return json.dumps(payload, ensure_ascii=False, default=str, separators=(",", ":"))


class TextFormatter(_StructuredFormatter):
    def format(self, record: logging.LogRecord) -> str:  # noqa: A003
        payload = self._to_event_record(record)
        event = payload.get("event") or ""
        msg = payload["message"]

        head = f"[{payload['timestamp']}] {payload['level'].upper()} {event}"
        if msg and msg != event:
            head += f": {msg}"

        data = payload.get("data")
        if isinstance(data, Mapping) and data:
            items = [f"{key}={_truncate(data[key])}" for key in sorted(data, key=str)[:8]]
            if len(data) > 8:
                items.append("…")
            head += " (" + ", ".join(items) + ")"

        err = payload.get("error")
        if isinstance(err, Mapping) and err.get("stack_trace"):
            head += "\n" + str(err["stack_trace"]).rstrip("\n")

        return head


# ---------------------------------------------------------------------------
# Handler-owning context
# ---------------------------------------------------------------------------


@dataclass
class LoggerContext:
    logger: EngineLogger
    _base_logger: logging.Logger
    _handlers: list[logging.Handler]

    def close(self) -> None:
        for h in list(self._handlers):
            self._base_logger.removeHandler(h)
            h.close()

    def __enter__(self) -> "LoggerContext":
        return self

    def __exit__(self, _exc_type, _exc, _tb) -> None:
        self.close()


def create_logger_context(
    *,
    log_format: str = "text",
    log_level: int = logging.INFO,
    enable_console_logging: bool = True,
    log_file: Path | None = None,
) -> LoggerContext:
    fmt = (log_format or "text").strip().lower()
    if fmt == "json":
        fmt = "ndjson"
    if fmt not in {"text", "ndjson"}:
        raise ValueError("log_format must be 'text' or 'ndjson' (or 'json')")

    formatter: logging.Formatter = NdjsonFormatter() if fmt == "ndjson" else TextFormatter()

    handlers: list[logging.Handler] = []
    if enable_console_logging:
        h = logging.StreamHandler(sys.stderr)
        h.setLevel(log_level)
        h.setFormatter(formatter)
        handlers.append(h)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(log_file, mode="w", encoding="utf-8")
        fh.setLevel(log_level)
        fh.setFormatter(formatter)
        handlers.append(fh)

    session_id = uuid.uuid4().hex
    base_logger = logging.getLogger(f"statline.session.{session_id}")
    base_logger.setLevel(min((h.level for h in handlers), default=log_level))
    base_logger.handlers.clear()
    base_logger.propagate = False
    for h in handlers:
        base_logger.addHandler(h)

    logger = EngineLogger(base_logger, session_id=session_id)
    return LoggerContext(logger=logger, _base_logger=base_logger, _handlers=handlers)


__all__ = [
    "EngineLogger",
    "LoggerContext",
    "NdjsonFormatter",
    "NullLogger",
    "TextFormatter",
    "create_logger_context",
    "normalize_dotpath",
    "qualify_event_name",
]
