"""Request/response correlation over the notify/write channel pair.

The sensor's protocol has no request identifiers: each command is
answered by the next complete message on the notify characteristic. The
correlator therefore relies on strict one-request-at-a-time use. Callers
that issue more than one exchange hold :meth:`CommandCorrelator.exclusive`
for the duration.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import AsyncIterator
from typing import Any

from pyawairble._reassembly import FragmentReassembler
from pyawairble._redact import redact_for_log
from pyawairble._transport import Transport
from pyawairble.config import AwairConfig
from pyawairble.exceptions import (
    AwairReassemblyError,
    AwairResponseTimeout,
    AwairTransportError,
    AwairTransportWriteError,
)
from pyawairble.models.commands import OutboundPayload
from pyawairble.models.messages import DecodedMessage

_logger = logging.getLogger(__name__)


class CommandCorrelator:
    """Pairs outbound commands with the next decoded inbound message.

    Usage::

        async with CommandCorrelator(transport, config) as correlator:
            async with correlator.exclusive():
                reply = await correlator.send_and_await(wifi_setup())

    A background task drains received fragments through a
    :class:`FragmentReassembler` and hands each message over through a
    single slot. The task waits while the slot is occupied, so fragments
    queue up until the current message has been taken.
    """

    def __init__(self, transport: Transport, config: AwairConfig | None = None) -> None:
        self._transport = transport
        self._config = config or AwairConfig()
        self._reassembler = FragmentReassembler(max_buffer_bytes=self._config.max_buffer_bytes)
        self._fragments: asyncio.Queue[bytes] = asyncio.Queue()
        self._messages: asyncio.Queue[DecodedMessage | AwairReassemblyError] = asyncio.Queue(maxsize=1)
        self._loop: asyncio.AbstractEventLoop | None = None
        self._pump_task: asyncio.Task[None] | None = None
        self._lock = asyncio.Lock()

    @property
    def config(self) -> AwairConfig:
        return self._config

    @property
    def is_running(self) -> bool:
        return self._pump_task is not None and not self._pump_task.done()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> CommandCorrelator:
        await self.start()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.stop()

    async def start(self) -> None:
        """Start the reassembly task and subscribe to notifications."""
        if self.is_running:
            return
        self._loop = asyncio.get_running_loop()
        self._pump_task = asyncio.create_task(self._pump(), name="pyawairble-reassembly")
        try:
            await self._transport.subscribe(self.on_fragment)
        except BaseException:
            await self.stop()
            raise

    async def stop(self) -> None:
        task = self._pump_task
        self._pump_task = None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    def on_fragment(self, fragment: bytes) -> None:
        """Transport callback; safe to call from any thread."""
        loop = self._loop
        if loop is None:
            _logger.debug("Dropping %d-byte fragment received before start()", len(fragment))
            return
        loop.call_soon_threadsafe(self._fragments.put_nowait, bytes(fragment))

    async def _pump(self) -> None:
        while True:
            fragment = await self._fragments.get()
            try:
                for message in self._reassembler.feed(fragment):
                    await self._messages.put(message)
            except AwairReassemblyError as exc:
                await self._messages.put(exc)

    # ------------------------------------------------------------------
    # Exchanges
    # ------------------------------------------------------------------

    @contextlib.asynccontextmanager
    async def exclusive(self) -> AsyncIterator[None]:
        """Hold the channel for a sequence of exchanges."""
        async with self._lock:
            yield

    async def await_message(self, timeout: float | None = None) -> DecodedMessage:
        """Wait for the next decoded message.

        ``timeout`` defaults to ``config.response_timeout``. Raises
        :class:`AwairResponseTimeout` when nothing arrives in time. A timed
        out wait does not disturb reassembly; a late message is handed to
        the next caller.
        """
        wait = self._config.response_timeout if timeout is None else timeout
        try:
            item = await asyncio.wait_for(self._messages.get(), wait)
        except TimeoutError as exc:
            raise AwairResponseTimeout(f"No response within {wait}s", timeout=wait) from exc
        if isinstance(item, AwairReassemblyError):
            raise item
        _logger.debug("Received %s", redact_for_log(item.obj if item.obj is not None else item.items))
        return item

    async def send_command(self, command: OutboundPayload) -> None:
        """Serialize *command* and write it to the outbound characteristic."""
        data = command.to_wire()
        _logger.debug("Sending %s", redact_for_log(command.to_payload()))
        try:
            await self._transport.write(data)
        except AwairTransportWriteError:
            raise
        except (AwairTransportError, OSError) as exc:
            raise AwairTransportWriteError(f"Failed to write command: {exc}") from exc

    async def send_and_await(self, command: OutboundPayload, timeout: float | None = None) -> DecodedMessage:
        """Write *command* and return the next decoded message."""
        if self._config.drain_stale_messages:
            self.drain_stale()
        await self.send_command(command)
        return await self.await_message(timeout)

    def drain_stale(self) -> int:
        """Discard messages already waiting to be consumed; return how many."""
        dropped = 0
        while True:
            try:
                item = self._messages.get_nowait()
            except asyncio.QueueEmpty:
                break
            dropped += 1
            _logger.warning("Discarding stale message: %s", item)
        return dropped
