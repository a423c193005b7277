"""Structured observability hook for the sync pipeline."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, List

logger = logging.getLogger("learnsync.telemetry")

TelemetryListener = Callable[["TelemetryEvent"], None]


@dataclass(frozen=True)
class TelemetryEvent:
    name: str
    payload: Dict[str, Any]


class Telemetry:
    """Fans structured events out to in-process listeners and the log.

    Components receive an instance at construction, so tests and the app can
    observe fetch starts, fetch results, fallbacks and refresh cycles without
    patching module state.
    """

    def __init__(self) -> None:
        self._listeners: List[TelemetryListener] = []

    def register_listener(self, listener: TelemetryListener) -> None:
        self._listeners.append(listener)

    def clear_listeners(self) -> None:
        self._listeners.clear()

    def emit(self, name: str, **fields: Any) -> None:
        payload = _sanitize(fields)
        event = TelemetryEvent(name=name, payload=payload)

        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:  # noqa: BLE001
                logger.exception("Telemetry listener failed for %s", name)

        structured = {"event": name, **payload}
        logger.info("TELEMETRY %s", json.dumps(structured, default=_json_default))


def _sanitize(fields: Dict[str, Any]) -> Dict[str, Any]:
    sanitized: Dict[str, Any] = {}
    for key, value in fields.items():
        if isinstance(value, datetime):
            sanitized[key] = value.isoformat()
        elif isinstance(value, (set, frozenset)):
            sanitized[key] = sorted(value)
        else:
            sanitized[key] = value
    return sanitized


def _json_default(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


__all__ = [
    "Telemetry",
    "TelemetryEvent",
    "TelemetryListener",
]
