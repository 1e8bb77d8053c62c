"""Domain-specific exceptions for call tracking.

Each error carries the HTTP status the API layer should answer with.
"""

from __future__ import annotations


class CallTimerError(Exception):
    status_code: int = 500
    default_detail: str = "Call timer error"

    def __init__(self, detail: str | None = None) -> None:
        super().__init__(detail or self.default_detail)
        self.detail = detail or self.default_detail


class InvalidWebhookPayload(CallTimerError):
    status_code = 400
    default_detail = "Invalid webhook payload."


class CallNotTracked(CallTimerError):
    status_code = 404
    default_detail = "Call is not tracked."


class ControlCommandError(CallTimerError):
    status_code = 502
    default_detail = "Control command failed."

    def __init__(
        self,
        detail: str | None = None,
        *,
        status: int | None = None,
        body: str | None = None,
    ) -> None:
        super().__init__(detail)
        self.status = status
        self.body = body
