"""Routes classified webhook events to the call registry."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from calls.events import CallEvent, EventClass, EventClassifier, parse_event
from calls.registry import CallRegistry

LOGGER = logging.getLogger(__name__)


class WebhookDispatcher:
    def __init__(
        self,
        registry: CallRegistry,
        classifier: EventClassifier,
        control_url_paths: Iterable[str],
    ) -> None:
        self._registry = registry
        self._classifier = classifier
        self._control_url_paths = tuple(control_url_paths)

    async def dispatch(self, payload: Any) -> EventClass | None:
        """Handle one raw webhook body.

        Returns the class the event was routed as, or None when it was
        discarded for lacking a call id. Raises InvalidWebhookPayload only
        when the body itself is unusable.
        """

        event = parse_event(payload, self._control_url_paths)
        return await self.dispatch_event(event)

    async def dispatch_event(self, event: CallEvent) -> EventClass | None:
        if not event.call_id:
            LOGGER.warning("No call id in webhook event %r; discarding", event.event_type)
            return None

        outcome = self._classifier.classify(event.event_type, event.status)
        LOGGER.debug("Call %s: %s -> %s", event.call_id, event.event_type, outcome.value)

        if outcome is EventClass.START:
            await self._registry.start(event.call_id, event.control_url)
        elif outcome is EventClass.END:
            await self._registry.handle_natural_end(event.call_id)
        else:
            await self._registry.check_expired(event.call_id)
        return outcome
