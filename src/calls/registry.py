"""In-memory tracking of active calls and their deadline timers."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Coroutine
from dataclasses import dataclass, field
from typing import Any

from integrations.call_control import CallControlClient

LOGGER = logging.getLogger(__name__)


@dataclass
class CallRecord:
    call_id: str
    control_url: str
    started_at: float = field(default_factory=time.monotonic)
    deadline: asyncio.Task | None = None
    cleanup: asyncio.Task | None = None
    ended: bool = False
    end_reason: str | None = None

    @property
    def elapsed(self) -> float:
        return time.monotonic() - self.started_at


class CallRegistry:
    """Owns every tracked call and all timer tasks attached to them.

    Operations on the same call id are serialized by a per-id lock. The
    remote hang-up runs in its own task so that lock is never held across
    network I/O.

    Must be created and used from inside a running event loop.
    """

    def __init__(
        self,
        control: CallControlClient,
        *,
        max_duration: float,
        grace_period: float = 30.0,
        closing_message: str | None = None,
        closing_delay: float = 0.0,
    ) -> None:
        self._control = control
        self.max_duration = max_duration
        self.grace_period = grace_period
        self.closing_message = closing_message
        self.closing_delay = closing_delay
        self._records: dict[str, CallRecord] = {}
        self._locks: dict[str, asyncio.Lock] = {}
        self._commands: set[asyncio.Task] = set()
        self._closed = False

    def __contains__(self, call_id: object) -> bool:
        return call_id in self._records

    def __len__(self) -> int:
        return len(self._records)

    def get(self, call_id: str) -> CallRecord | None:
        return self._records.get(call_id)

    def snapshot(self) -> list[CallRecord]:
        return list(self._records.values())

    def _lock(self, call_id: str) -> asyncio.Lock:
        lock = self._locks.get(call_id)
        if lock is None:
            lock = self._locks[call_id] = asyncio.Lock()
        return lock

    def _spawn(self, coro: Coroutine[Any, Any, Any], name: str) -> asyncio.Task:
        return asyncio.get_running_loop().create_task(coro, name=name)

    @staticmethod
    def _cancel(task: asyncio.Task | None) -> None:
        # The deadline task may be the one running terminate().
        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()

    def _remove(self, call_id: str) -> CallRecord | None:
        record = self._records.pop(call_id, None)
        self._locks.pop(call_id, None)
        return record

    async def start(self, call_id: str, control_url: str | None) -> bool:
        """Begin tracking a call and arm its deadline. Returns True if tracking started."""

        if self._closed:
            LOGGER.warning("Registry closed; not tracking call %s", call_id)
            return False
        if not control_url:
            LOGGER.warning("No control URL for call %s; cannot track it", call_id)
            return False

        async with self._lock(call_id):
            if call_id in self._records:
                return False
            record = CallRecord(call_id=call_id, control_url=control_url)
            record.deadline = self._spawn(self._expire_after(call_id, self.max_duration), f"deadline:{call_id}")
            self._records[call_id] = record

        LOGGER.info(
            "Tracking call %s (will end in %ss) control_url=%s",
            call_id,
            self.max_duration,
            control_url,
        )
        return True

    async def _expire_after(self, call_id: str, delay: float) -> None:
        await asyncio.sleep(delay)
        await self.on_deadline(call_id)

    async def on_deadline(self, call_id: str) -> None:
        await self.terminate(call_id, reason="timeout")

    async def terminate(self, call_id: str, reason: str) -> bool:
        """Mark a call ended, hang it up remotely and schedule its removal.

        Returns False when the call is unknown or already ended.
        """

        if call_id not in self._records:
            return False
        async with self._lock(call_id):
            record = self._records.get(call_id)
            if record is None or record.ended:
                return False

            record.ended = True
            record.end_reason = reason
            self._cancel(record.deadline)
            record.deadline = None
            record.cleanup = self._spawn(self._remove_after(call_id, self.grace_period), f"cleanup:{call_id}")

        LOGGER.info("Ending call %s after %.1fs (%s)", call_id, record.elapsed, reason)
        command = self._spawn(self._hang_up(record), f"end-call:{call_id}")
        self._commands.add(command)
        command.add_done_callback(self._commands.discard)
        return True

    async def _hang_up(self, record: CallRecord) -> None:
        ok = await self._control.terminate(
            record.control_url,
            closing_message=self.closing_message,
            delay=self.closing_delay,
        )
        if ok:
            LOGGER.info("Call %s ended successfully", record.call_id)

    async def _remove_after(self, call_id: str, delay: float) -> None:
        await asyncio.sleep(delay)
        async with self._lock(call_id):
            if self._remove(call_id) is not None:
                LOGGER.info("Cleaned up call %s", call_id)

    async def handle_natural_end(self, call_id: str) -> bool:
        """Forget a call the platform already hung up. No remote command is sent."""

        if call_id not in self._records:
            return False
        async with self._lock(call_id):
            record = self._records.get(call_id)
            if record is None:
                return False
            if record.ended:
                # Already terminated; the pending cleanup removes it.
                return False
            self._cancel(record.deadline)
            record.deadline = None
            record.ended = True
            record.end_reason = "natural"
            self._remove(call_id)

        LOGGER.info("Call %s ended naturally after %.1fs", call_id, record.elapsed)
        return True

    async def check_expired(self, call_id: str) -> bool:
        """Terminate a tracked call whose deadline has already passed."""

        record = self._records.get(call_id)
        if record is None or record.ended:
            return False
        if record.elapsed < self.max_duration:
            return False
        return await self.terminate(call_id, reason="exceeded")

    async def aclose(self) -> None:
        """Cancel every pending timer and in-flight command, then drop all records."""

        self._closed = True
        tasks: list[asyncio.Task] = list(self._commands)
        for record in self._records.values():
            tasks.extend(task for task in (record.deadline, record.cleanup) if task is not None)
        for task in tasks:
            self._cancel(task)
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._records.clear()
        self._locks.clear()
        self._commands.clear()
