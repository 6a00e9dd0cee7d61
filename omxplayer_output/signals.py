import asyncio
import json
import logging

from typing import Optional

import redis.exceptions

from omxplayer_output.conf import settings
from omxplayer_output.utils import get_redis_conn


logger = logging.getLogger(__name__)


class SignalListener:
    """
    Standing subscription to the signal bus.

    Signals are only logged for now. Subclasses may override
    ``on_signal`` to act on them.
    """

    def __init__(self, pattern: Optional[str] = None):
        self._pattern = pattern or settings.SIGNAL_PATTERN
        self._redis = None
        self._pubsub = None
        self._task: Optional[asyncio.Task] = None

    @property
    def connected(self) -> bool:
        return self._pubsub is not None

    def start(self) -> asyncio.Task:
        if self._task is None:
            self._task = asyncio.create_task(self._run())
            self._task.add_done_callback(self._on_done)
        return self._task

    async def connect(self) -> bool:
        logger.info("Subscribing to signal bus with pattern %r", self._pattern)
        self._redis = get_redis_conn()
        pubsub = self._redis.pubsub()
        try:
            await pubsub.psubscribe(self._pattern)
        except (redis.exceptions.RedisError, OSError) as e:
            logger.error("Unable to connect to signal bus: %s", e)
            await pubsub.aclose()
            await self._redis.aclose()
            self._redis = None
            return False
        self._pubsub = pubsub
        logger.info("Subscribed to signal bus")
        return True

    async def listen(self) -> None:
        try:
            async for msg in self._pubsub.listen():
                if msg["type"] != "pmessage":
                    continue
                self.on_signal(msg["channel"], msg["pattern"], msg["data"])
        except (redis.exceptions.RedisError, OSError) as e:
            logger.error("Signal bus connection lost: %s", e)

    def on_signal(self, channel, pattern, data) -> None:
        try:
            payload = json.loads(data)
        except (TypeError, ValueError):
            payload = data
        logger.info(
            "Signal on channel %s (pattern %s): %r", channel, pattern, payload
        )

    async def close(self) -> None:
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        if self._pubsub is not None:
            await self._pubsub.aclose()
            self._pubsub = None
        if self._redis is not None:
            await self._redis.aclose()
            self._redis = None

    async def _run(self) -> bool:
        if not await self.connect():
            return False
        await self.listen()
        return True

    @staticmethod
    def _on_done(task: asyncio.Task) -> None:
        if task.cancelled():
            return
        if task.exception() is not None:
            logger.error(
                "Signal listener failed", exc_info=task.exception()
            )
        elif not task.result():
            logger.warning(
                "Signal listener unavailable, bus signals will not be observed"
            )
