"""In-process stream channels that outlive the request that started them.

A producer runs as its own task and publishes every SSE chunk to a channel.
Clients subscribe to the channel; a subscriber that joins late (a reconnect)
replays everything published so far and then follows live output. Because
the producer never runs inside the request task, a client disconnect does not
cancel tool side effects that are already under way.
"""

import asyncio
import logging
import time
from typing import AsyncIterator, Callable

logger = logging.getLogger(__name__)

StreamFactory = Callable[[], AsyncIterator[str]]


class StreamChannel:
    def __init__(self) -> None:
        self._chunks: list[str] = []
        self._done = False
        self._cond = asyncio.Condition()
        self.finished_at: float | None = None

    @property
    def done(self) -> bool:
        return self._done

    async def publish(self, chunk: str) -> None:
        async with self._cond:
            self._chunks.append(chunk)
            self._cond.notify_all()

    async def close(self) -> None:
        async with self._cond:
            self._done = True
            self.finished_at = time.monotonic()
            self._cond.notify_all()

    async def subscribe(self) -> AsyncIterator[str]:
        """Replay from the first chunk, then follow until the producer closes."""
        index = 0
        while True:
            async with self._cond:
                await self._cond.wait_for(lambda: index < len(self._chunks) or self._done)
                pending = self._chunks[index:]
                done = self._done
            index += len(pending)
            for chunk in pending:
                yield chunk
            if done and index >= len(self._chunks):
                return


class BackgroundStreams:
    """Runs stream producers as tasks detached from the consuming request."""

    def __init__(self) -> None:
        self._tasks: set[asyncio.Task] = set()

    def detach(self, make_stream: StreamFactory) -> StreamChannel:
        channel = StreamChannel()
        task = asyncio.create_task(_produce(channel, make_stream))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return channel

    async def stream(self, make_stream: StreamFactory) -> AsyncIterator[str]:
        """Run ``make_stream`` in the background and follow its output."""
        return self.detach(make_stream).subscribe()

    async def drain(self, timeout: float = 5.0) -> None:
        """Wait for in-flight producers, cancelling any still running after ``timeout``."""
        if not self._tasks:
            return
        tasks = list(self._tasks)
        _, pending = await asyncio.wait(tasks, timeout=timeout)
        for task in pending:
            task.cancel()
        if pending:
            logger.warning("Cancelled %d stream producer(s) at shutdown", len(pending))
            await asyncio.gather(*pending, return_exceptions=True)


class ResumableStreamContext(BackgroundStreams):
    """Background streams registered by stream id so clients can reconnect.

    Finished channels stay replayable for ``retention_seconds``.
    """

    def __init__(self, retention_seconds: float = 900.0) -> None:
        super().__init__()
        self.retention_seconds = retention_seconds
        self._channels: dict[str, StreamChannel] = {}

    async def resumable_stream(
        self, stream_id: str, make_stream: StreamFactory
    ) -> AsyncIterator[str]:
        self._evict_expired()
        channel = self.detach(make_stream)
        self._channels[stream_id] = channel
        return channel.subscribe()

    async def resume_existing_stream(self, stream_id: str) -> AsyncIterator[str] | None:
        """Subscribe to a known stream, or ``None`` if it is unknown or expired."""
        self._evict_expired()
        channel = self._channels.get(stream_id)
        if channel is None:
            return None
        return channel.subscribe()

    def has_stream(self, stream_id: str) -> bool:
        return stream_id in self._channels

    def _evict_expired(self) -> None:
        cutoff = time.monotonic() - self.retention_seconds
        expired = [
            stream_id
            for stream_id, channel in self._channels.items()
            if channel.finished_at is not None and channel.finished_at < cutoff
        ]
        for stream_id in expired:
            del self._channels[stream_id]


async def _produce(channel: StreamChannel, make_stream: StreamFactory) -> None:
    try:
        async for chunk in make_stream():
            await channel.publish(chunk)
    except Exception:
        logger.exception("Stream producer failed")
    finally:
        await channel.close()
