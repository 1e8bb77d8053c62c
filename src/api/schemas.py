"""API-facing Pydantic models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class HealthResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    status: str = "healthy"
    service: str = "Call Timer"
    max_duration: str = Field(alias="maxDuration")
    active_calls: int = Field(alias="activeCalls")


class WebhookAck(BaseModel):
    success: bool = True


class TestEndCallRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    call_id: str | None = Field(default=None, alias="callId")
    control_url: str | None = Field(default=None, alias="controlUrl")


class TestEndCallResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    call_id: str | None = Field(default=None, alias="callId")
    response: str


class TrackedCallResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    call_id: str = Field(alias="callId")
    control_url: str = Field(alias="controlUrl")
    elapsed_seconds: float = Field(alias="elapsedSeconds")
    ended: bool
    end_reason: str | None = Field(default=None, alias="endReason")


class EndCallResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    call_id: str = Field(alias="callId")
    status: str = "ending"
