"""Shared FastAPI dependencies.

The registry, dispatcher and control client live on ``app.state`` and are
built in the application lifespan.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import Request

if TYPE_CHECKING:  # pragma: no cover
    from calls.dispatcher import WebhookDispatcher
    from calls.registry import CallRegistry
    from integrations.call_control import CallControlClient


def get_registry(request: Request) -> CallRegistry:
    return request.app.state.registry


def get_dispatcher(request: Request) -> WebhookDispatcher:
    return request.app.state.dispatcher


def get_control_client(request: Request) -> CallControlClient:
    return request.app.state.control
