import asyncio
import json
import logging
import traceback

import redis.exceptions

from omxplayer_output.conf import settings
from omxplayer_output.output_modules.base import OutputModule
from omxplayer_output.types import PlayTransition
from omxplayer_output.utils import decode_redis_message, get_redis_conn


logger = logging.getLogger(__name__)


class Player:
    """
    Feeds commands received on the player channel into an output module
    and reports its transitions on the renderer channel.
    """

    POLL_TIMEOUT = 0.1

    def __init__(self, output_module: OutputModule):
        self._output = output_module
        self._redis = get_redis_conn()
        self._redis_pipe = self._redis.pubsub()
        self._pending_acks = set()
        self._signal_map = {
            "SET_URI": self._on_set_uri,
            "SET_NEXT_URI": self._on_set_next_uri,
            "PLAY": self._on_play,
            "STOP": self._on_stop,
            "PAUSE": self._on_pause,
            "SEEK": self._on_seek,
            "SET_VOLUME": self._on_set_volume,
            "SET_MUTE": self._on_set_mute,
        }

    async def run(self):
        await self._redis_pipe.subscribe(settings.PLAYER_REDIS_CHANNEL)
        await self._output.init()
        try:
            while self._should_run():
                signal = await self._get_signal()
                if signal:
                    await self._dispatch_signal(signal)
        finally:
            await self._output.close()
            await self._redis_pipe.aclose()
            await self._redis.aclose()

    @classmethod
    def _should_run(cls):
        return True

    async def _get_signal(self):
        try:
            msg = await self._redis_pipe.get_message(
                ignore_subscribe_messages=True, timeout=self.POLL_TIMEOUT
            )
        except redis.exceptions.RedisError as e:
            logger.error("Redis connection failed: {}".format(e))
            await asyncio.sleep(1)
            return
        return decode_redis_message(msg, logger)

    async def _dispatch_signal(self, signal):
        try:
            name, args = signal
            if not isinstance(name, str):
                raise TypeError(name)
        except (TypeError, ValueError):
            logger.error("Invalid signal: {}".format(signal))
            return
        func = self._signal_map.get(name)
        if func is None:
            logger.warning("Unknown signal: {}".format(name))
            return
        try:
            await func(*args)
        except Exception as e:
            logger.error(
                "Invalid func call {}: {} \n {}".format(
                    func, e, traceback.format_exc()
                )
            )

    def _on_transition(self, transition: PlayTransition):
        logger.debug("Output transition: %s", transition.name)
        task = asyncio.create_task(self._ack_transition(transition))
        self._pending_acks.add(task)
        task.add_done_callback(self._pending_acks.discard)

    async def _ack_transition(self, transition: PlayTransition):
        signal = json.dumps(("TRANSITION", [transition.name]))
        try:
            receivers = await self._redis.publish(
                settings.RENDERER_REDIS_CHANNEL, signal
            )
        except redis.exceptions.RedisError:
            logger.error("Unable to report transition %s", transition.name)
            return
        if not receivers:
            logger.debug("Nobody listens for transition %s", transition.name)

    # local signals
    async def _on_set_uri(self, uri):
        self._output.set_uri(uri)

    async def _on_set_next_uri(self, uri):
        self._output.set_next_uri(uri)

    async def _on_play(self):
        if not await self._output.play(self._on_transition):
            logger.error("Unable to start playback")

    async def _on_stop(self):
        await self._output.stop()

    async def _on_pause(self):
        if not await self._output.pause():
            logger.error("Unable to toggle pause")

    async def _on_seek(self, position_nanos):
        await self._output.seek(int(position_nanos))

    async def _on_set_volume(self, val):
        await self._output.set_volume(float(val))

    async def _on_set_mute(self, val):
        await self._output.set_mute(bool(val))
