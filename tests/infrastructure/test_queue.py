"""Tests for the serial request queue."""

import asyncio

import pytest

from pdf_service_client.exceptions import QueueClosedError
from pdf_service_client.infrastructure.queue import SerialQueue
from tests.fakes import RecordingSleep


class TestSerialQueue:
    """Tests for FIFO, single-flight execution."""

    @pytest.mark.asyncio
    async def test_runs_items_one_at_a_time_in_submission_order(self) -> None:
        sleep = RecordingSleep()
        queue = SerialQueue(delay_seconds=lambda: 0.1, sleep=sleep)
        events: list[str] = []
        in_flight = 0
        peak = 0

        def job(name: str):
            async def attempt() -> str:
                nonlocal in_flight, peak
                in_flight += 1
                peak = max(peak, in_flight)
                events.append(f"start {name}")
                await asyncio.sleep(0)
                events.append(f"end {name}")
                in_flight -= 1
                return name

            return attempt

        results = await asyncio.gather(
            queue.enqueue(job("a")), queue.enqueue(job("b")), queue.enqueue(job("c"))
        )

        assert results == ["a", "b", "c"]
        assert events == ["start a", "end a", "start b", "end b", "start c", "end c"]
        assert peak == 1

    @pytest.mark.asyncio
    async def test_waits_delay_after_each_item(self) -> None:
        sleep = RecordingSleep()
        queue = SerialQueue(delay_seconds=lambda: 0.25, sleep=sleep)

        async def attempt() -> int:
            return 1

        await asyncio.gather(queue.enqueue(attempt), queue.enqueue(attempt))
        while queue.is_draining:
            await asyncio.sleep(0)

        assert sleep.delays == [0.25, 0.25]

    @pytest.mark.asyncio
    async def test_failure_settles_only_its_own_item(self) -> None:
        queue = SerialQueue(sleep=RecordingSleep())

        async def fails() -> str:
            raise ValueError("boom")

        async def succeeds() -> str:
            return "ok"

        results = await asyncio.gather(
            queue.enqueue(fails), queue.enqueue(succeeds), return_exceptions=True
        )

        assert isinstance(results[0], ValueError)
        assert results[1] == "ok"

    @pytest.mark.asyncio
    async def test_consumer_stops_when_empty_and_restarts_on_enqueue(self) -> None:
        queue = SerialQueue(sleep=RecordingSleep())

        async def attempt() -> str:
            return "done"

        assert await queue.enqueue(attempt) == "done"
        while queue.is_draining:
            await asyncio.sleep(0)

        assert queue.pending == 0
        assert await queue.enqueue(attempt) == "done"

    @pytest.mark.asyncio
    async def test_close_fails_pending_items(self) -> None:
        queue = SerialQueue(sleep=RecordingSleep())
        release = asyncio.Event()

        async def blocks() -> str:
            await release.wait()
            return "never"

        first = asyncio.create_task(queue.enqueue(blocks))
        second = asyncio.create_task(queue.enqueue(blocks))
        while queue.pending != 1 or not queue.is_draining:
            await asyncio.sleep(0)

        await queue.close()

        with pytest.raises(QueueClosedError):
            await first
        with pytest.raises(QueueClosedError):
            await second

    @pytest.mark.asyncio
    async def test_enqueue_after_close_is_rejected(self) -> None:
        queue = SerialQueue(sleep=RecordingSleep())
        await queue.close()

        async def attempt() -> str:
            return "late"

        with pytest.raises(QueueClosedError):
            await queue.enqueue(attempt)
