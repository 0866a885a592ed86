"""Single-flight request lane.

Usage example:
    from pdf_service_client.infrastructure.queue import SerialQueue

    queue = SerialQueue(delay_seconds=lambda: 0.1)
    envelope = await queue.enqueue(lambda: run_with_retry(send_once, policy))
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any

from ..exceptions import QueueClosedError
from ..observability import get_logger
from ..protocols import Sleep

logger = get_logger("pdf_service_client.infrastructure.queue")

_QueueItem = tuple[Callable[[], Awaitable[Any]], "asyncio.Future[Any]"]


class SerialQueue:
    """FIFO lane that runs one attempt sequence at a time.

    A single consumer task drains the channel. It is started by the first
    `enqueue` that finds no consumer running and exits once the channel is
    empty; items appended while it runs are picked up by the same task. After
    each item settles the consumer waits `delay_seconds()` before the next.
    """

    def __init__(
        self,
        delay_seconds: Callable[[], float] = lambda: 0.1,
        *,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._delay_seconds = delay_seconds
        self._sleep = sleep
        self._items: asyncio.Queue[_QueueItem] = asyncio.Queue()
        self._consumer: asyncio.Task[None] | None = None
        self._current: asyncio.Future[Any] | None = None
        self._closed = False

    @property
    def pending(self) -> int:
        """Number of items waiting behind the one in progress."""
        return self._items.qsize()

    @property
    def is_draining(self) -> bool:
        return self._consumer is not None and not self._consumer.done()

    async def enqueue[ResultT](self, attempt: Callable[[], Awaitable[ResultT]]) -> ResultT:
        """Append `attempt` and wait for its result."""
        if self._closed:
            raise QueueClosedError()
        future: asyncio.Future[ResultT] = asyncio.get_running_loop().create_future()
        self._items.put_nowait((attempt, future))
        if not self.is_draining:
            self._consumer = asyncio.create_task(self._drain(), name="serial-queue-drain")
        return await future

    async def _drain(self) -> None:
        while not self._items.empty():
            attempt, future = self._items.get_nowait()
            if future.done():
                # Caller gave up while waiting.
                continue
            self._current = future
            try:
                result = await attempt()
            except Exception as error:
                if not future.done():
                    future.set_exception(error)
            else:
                if not future.done():
                    future.set_result(result)
            self._current = None
            await self._sleep(self._delay_seconds())
        logger.debug("Request queue drained")

    async def close(self) -> None:
        """Stop the consumer and fail every unsettled item with QueueClosedError."""
        self._closed = True
        consumer, self._consumer = self._consumer, None
        if consumer is not None and not consumer.done():
            consumer.cancel()
            try:
                await consumer
            except asyncio.CancelledError:
                pass
        unsettled = [self._current] if self._current is not None else []
        while not self._items.empty():
            _, future = self._items.get_nowait()
            unsettled.append(future)
        for future in unsettled:
            if not future.done():
                future.set_exception(QueueClosedError())
        self._current = None
