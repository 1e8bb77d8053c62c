"""Parsing and classification of inbound voice-platform webhook events."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from calls.errors import InvalidWebhookPayload

STATUS_UPDATE = "status-update"


class EventClass(str, Enum):
    START = "start"
    END = "end"
    OTHER = "other"


@dataclass(frozen=True)
class CallEvent:
    event_type: str
    call_id: str | None
    control_url: str | None
    status: str | None


def lookup_path(data: Any, path: str) -> Any:
    """Follow a dotted path through nested mappings; None when any step is missing."""

    node = data
    for key in path.split("."):
        if not isinstance(node, Mapping):
            return None
        node = node.get(key)
    return node


def _text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def parse_event(payload: Any, control_url_paths: Iterable[str]) -> CallEvent:
    """Pull the fields the tracker cares about out of a raw webhook body.

    Raises InvalidWebhookPayload when the body has no ``message`` object.
    A missing call id is not an error here; the dispatcher discards those.
    """

    if not isinstance(payload, Mapping):
        raise InvalidWebhookPayload("Webhook body must be a JSON object.")
    message = payload.get("message")
    if not isinstance(message, Mapping):
        raise InvalidWebhookPayload("Webhook body has no 'message' object.")

    call = message.get("call")
    if not isinstance(call, Mapping):
        call = {}

    control_url = None
    for path in control_url_paths:
        control_url = _text(lookup_path(call, path))
        if control_url:
            break

    return CallEvent(
        event_type=_text(message.get("type")) or "",
        call_id=_text(call.get("id")),
        control_url=control_url,
        status=_text(call.get("status")),
    )


class EventClassifier:
    """Table from raw event-type tag to EventClass.

    Unknown tags classify as OTHER. ``status-update`` events are START when
    the call status is one of ``start_statuses``.
    """

    def __init__(
        self,
        start_types: Iterable[str],
        end_types: Iterable[str],
        start_statuses: Iterable[str] = (),
    ) -> None:
        self._table: dict[str, EventClass] = {}
        for tag in start_types:
            self.register(tag, EventClass.START)
        for tag in end_types:
            self.register(tag, EventClass.END)
        self._start_statuses = {status.strip().lower() for status in start_statuses}

    @classmethod
    def from_settings(cls, settings) -> EventClassifier:
        return cls(
            settings.start_event_types,
            settings.end_event_types,
            settings.start_status_updates,
        )

    def register(self, tag: str, outcome: EventClass) -> None:
        self._table[tag.strip().lower()] = outcome

    def classify(self, event_type: str, status: str | None = None) -> EventClass:
        tag = (event_type or "").strip().lower()
        if tag == STATUS_UPDATE and status and status.strip().lower() in self._start_statuses:
            return EventClass.START
        return self._table.get(tag, EventClass.OTHER)
