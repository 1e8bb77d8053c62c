"""FastAPI routes for the voice-platform webhook and call operations."""

from __future__ import annotations

import json
import logging

from fastapi import APIRouter, Depends, HTTPException, Request

from api.dependencies import get_control_client, get_dispatcher, get_registry
from api.schemas import (
    EndCallResponse,
    HealthResponse,
    TestEndCallRequest,
    TestEndCallResponse,
    TrackedCallResponse,
    WebhookAck,
)
from calls.dispatcher import WebhookDispatcher
from calls.errors import CallNotTracked, CallTimerError
from calls.registry import CallRegistry
from integrations.call_control import CallControlClient

LOGGER = logging.getLogger(__name__)

router = APIRouter()


def _http_error(exc: CallTimerError) -> HTTPException:
    return HTTPException(status_code=exc.status_code, detail=exc.detail)


def _format_seconds(value: float) -> str:
    return f"{value:g}s"


@router.get("/", response_model=HealthResponse)
async def health(registry: CallRegistry = Depends(get_registry)) -> HealthResponse:
    return HealthResponse(
        max_duration=_format_seconds(registry.max_duration),
        active_calls=len(registry),
    )


@router.post("/webhook", response_model=WebhookAck)
@router.post("/vapi/webhook", response_model=WebhookAck, include_in_schema=False)
async def receive_webhook(
    request: Request,
    dispatcher: WebhookDispatcher = Depends(get_dispatcher),
) -> WebhookAck:
    try:
        payload = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        LOGGER.warning("Webhook body is not valid JSON: %s", exc)
        raise HTTPException(status_code=400, detail="Webhook body is not valid JSON.") from exc

    try:
        await dispatcher.dispatch(payload)
    except CallTimerError as exc:
        LOGGER.warning("Webhook rejected: %s", exc.detail)
        raise _http_error(exc) from exc
    return WebhookAck()


@router.post("/test/end-call", response_model=TestEndCallResponse)
async def test_end_call(
    payload: TestEndCallRequest,
    control: CallControlClient = Depends(get_control_client),
) -> TestEndCallResponse:
    """Send an end-call command straight to a control URL, bypassing the registry."""

    if not payload.control_url:
        raise HTTPException(status_code=400, detail="controlUrl required")

    try:
        response = await control.end_call(payload.control_url)
    except CallTimerError as exc:
        LOGGER.error("Manual end-call for %s failed: %s", payload.call_id, exc.detail)
        raise _http_error(exc) from exc

    return TestEndCallResponse(call_id=payload.call_id, response=response.text)


@router.get("/calls", response_model=list[TrackedCallResponse])
async def list_calls(registry: CallRegistry = Depends(get_registry)) -> list[TrackedCallResponse]:
    return [
        TrackedCallResponse(
            call_id=record.call_id,
            control_url=record.control_url,
            elapsed_seconds=round(record.elapsed, 3),
            ended=record.ended,
            end_reason=record.end_reason,
        )
        for record in registry.snapshot()
    ]


@router.post("/calls/{call_id}/end", response_model=EndCallResponse)
async def end_tracked_call(
    call_id: str,
    registry: CallRegistry = Depends(get_registry),
) -> EndCallResponse:
    record = registry.get(call_id)
    if record is None:
        raise _http_error(CallNotTracked(f"Call {call_id} is not tracked."))
    if not await registry.terminate(call_id, reason="manual"):
        return EndCallResponse(call_id=call_id, status="already-ended")
    return EndCallResponse(call_id=call_id)
