import logging

from typing import Optional, Tuple

from omxplayer_output.types import (
    MetadataCallback,
    PlayerState,
    PlayTransition,
    TrackMetadata,
    TransitionCallback,
)
from omxplayer_output.utils import Null, normalize_uri


logger = logging.getLogger(__name__)


class DummyOutput:

    shortname = "dummy"
    description = "In-memory output without a player process."

    _state = PlayerState.STOPPED
    _uri = None
    _next_uri = None
    _volume = 1.0
    _mute = False
    _position = 0

    def __init__(self):
        self._callback: TransitionCallback = Null()
        self._metadata = TrackMetadata()

    async def init(self) -> bool:
        return True

    def set_uri(
        self, uri: Optional[str], meta_cb: Optional[MetadataCallback] = None
    ) -> None:
        self._uri = normalize_uri(uri)
        self._metadata = TrackMetadata()

    def set_next_uri(self, uri: Optional[str]) -> None:
        self._next_uri = normalize_uri(uri)

    async def play(self, callback: Optional[TransitionCallback] = None) -> bool:
        if self._uri is None:
            return False
        if self._state is not PlayerState.STOPPED:
            await self.stop()
        self._callback = callback or Null()
        self._position = 0
        self._state = PlayerState.RUNNING
        logger.debug("Playing %s", self._uri)
        return True

    async def stop(self) -> bool:
        if self._state is not PlayerState.STOPPED:
            self._state = PlayerState.STOPPED
            self._callback(PlayTransition.PLAY_STOPPED)
        return True

    async def pause(self) -> bool:
        if self._state is PlayerState.RUNNING:
            self._state = PlayerState.PAUSED
        elif self._state is PlayerState.PAUSED:
            self._state = PlayerState.RUNNING
        return True

    async def seek(self, position_nanos: int) -> bool:
        self._position = position_nanos
        return True

    async def get_position(self) -> Tuple[int, int]:
        return 0, self._position

    async def get_volume(self) -> float:
        return self._volume

    async def set_volume(self, value: float) -> bool:
        self._volume = min(max(value, 0.0), 1.0)
        return True

    async def get_mute(self) -> bool:
        return self._mute

    async def set_mute(self, value: bool) -> bool:
        self._mute = bool(value)
        return True

    def get_current_state(self) -> PlayerState:
        return self._state

    async def close(self) -> None:
        await self.stop()
