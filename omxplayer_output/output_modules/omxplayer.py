import asyncio
import logging

from dataclasses import dataclass, field
from typing import Optional, Tuple

from omxplayer_output.conf import settings
from omxplayer_output.process import (
    QUIT,
    TOGGLE_PAUSE,
    ChannelWriteFailed,
    PlayerProcess,
    SpawnFailed,
    build_argv,
)
from omxplayer_output.signals import SignalListener
from omxplayer_output.types import (
    MetadataCallback,
    PlayerState,
    PlayTransition,
    TrackMetadata,
    TransitionCallback,
)
from omxplayer_output.utils import Null, normalize_uri


logger = logging.getLogger(__name__)


@dataclass
class PlaybackSession:
    uri: str
    process: PlayerProcess
    callback: TransitionCallback
    superseded: bool = False
    exited: asyncio.Event = field(default_factory=asyncio.Event)
    watcher: Optional[asyncio.Task] = None
    watchdog: Optional[asyncio.Task] = None


class OMXPlayerOutput:
    """
    Output module driving an external omxplayer process.

    A session exists exactly while the state is not STOPPED. The child is
    controlled through single-character commands on its stdin, and the
    session is torn down only when the child's exit is observed.
    """

    shortname = "omxplayer"
    description = "OMXPlayer used by Raspberry Pi's."

    def __init__(
        self,
        binary: Optional[str] = None,
        audio_output: Optional[str] = None,
        stop_timeout: Optional[float] = None,
        kill_timeout: Optional[float] = None,
        signal_listener: Optional[SignalListener] = None,
    ):
        self._binary = binary or settings.PLAYER_BINARY
        self._audio_output = audio_output or settings.PLAYER_AUDIO_OUTPUT
        self._stop_timeout = (
            settings.STOP_TIMEOUT if stop_timeout is None else stop_timeout
        )
        self._kill_timeout = (
            settings.KILL_TIMEOUT if kill_timeout is None else kill_timeout
        )
        self._signal_listener = signal_listener or SignalListener()

        self._state = PlayerState.STOPPED
        self._uri: Optional[str] = None
        self._next_uri: Optional[str] = None
        self._meta_callback: MetadataCallback = Null()
        self._metadata = TrackMetadata()
        self._session: Optional[PlaybackSession] = None
        self._play_lock = asyncio.Lock()

    @property
    def uri(self) -> Optional[str]:
        return self._uri

    @property
    def next_uri(self) -> Optional[str]:
        return self._next_uri

    @property
    def metadata(self) -> TrackMetadata:
        return self._metadata

    async def init(self) -> bool:
        logger.info("init")
        self._metadata = TrackMetadata()
        # bus setup completes in the background, failures only disable
        # signal observation
        self._signal_listener.start()
        return True

    def get_current_state(self) -> PlayerState:
        return self._state

    def set_uri(
        self, uri: Optional[str], meta_cb: Optional[MetadataCallback] = None
    ) -> None:
        logger.info("Set uri to '%s'", uri)
        self._uri = normalize_uri(uri)
        self._meta_callback = meta_cb or Null()
        self._metadata = TrackMetadata()

    def set_next_uri(self, uri: Optional[str]) -> None:
        logger.info("Set next uri to '%s'", uri)
        self._next_uri = normalize_uri(uri)

    async def play(self, callback: Optional[TransitionCallback] = None) -> bool:
        logger.info("play")
        async with self._play_lock:
            if self._uri is None:
                logger.error("Unable to play, no uri set")
                return False

            if self._session is not None:
                # the host only hears about the replacement stream
                self._session.superseded = True
                await self._shutdown(self._session)

            argv = build_argv(self._binary, self._uri, self._audio_output)
            try:
                process = await PlayerProcess.spawn(argv)
            except SpawnFailed as e:
                logger.error(e)
                return False
            logger.info("%s spawned", self._binary)

            session = PlaybackSession(
                uri=self._uri, process=process, callback=callback or Null()
            )
            self._session = session
            self._state = PlayerState.RUNNING
            session.watcher = asyncio.create_task(self._watch(session))
            logger.info("%s watcher added", self._binary)
            return True

    async def stop(self) -> bool:
        logger.info("stop")
        session = self._session
        if self._state is PlayerState.STOPPED or session is None:
            return True
        # cleanup happens once the watcher sees the exit
        return await self._request_quit(session)

    async def pause(self) -> bool:
        logger.info("pause")
        session = self._session
        if self._state is PlayerState.STOPPED or session is None:
            logger.debug("Player is stopped, nothing to pause")
            return True
        try:
            await session.process.send(TOGGLE_PAUSE)
        except ChannelWriteFailed as e:
            logger.error(e)
            return False
        if self._session is session:
            self._state = (
                PlayerState.PAUSED
                if self._state is PlayerState.RUNNING
                else PlayerState.RUNNING
            )
        return True

    # Not supported by the stdin protocol, kept as successful no-ops so
    # hosts relying on the full contract do not see errors.
    async def seek(self, position_nanos: int) -> bool:
        logger.info("seek %d position_nanos (not supported)", position_nanos)
        return True

    async def get_position(self) -> Tuple[int, int]:
        logger.info("get_position (not supported)")
        return 0, 0

    async def get_volume(self) -> float:
        logger.info("get_volume (not supported)")
        return 1.0

    async def set_volume(self, value: float) -> bool:
        logger.info("Set volume fraction to %f (not supported)", value)
        return True

    async def get_mute(self) -> bool:
        logger.info("get_mute (not supported)")
        return False

    async def set_mute(self, value: bool) -> bool:
        logger.info("Set mute to %s (not supported)", "on" if value else "off")
        return True

    async def close(self) -> None:
        logger.info("close")
        async with self._play_lock:
            if self._session is not None:
                await self._shutdown(self._session)
        await self._signal_listener.close()

    async def _request_quit(self, session: PlaybackSession) -> bool:
        sent = True
        try:
            await session.process.send(QUIT)
        except ChannelWriteFailed as e:
            logger.error(e)
            sent = False
        if session.watchdog is None and not session.exited.is_set():
            session.watchdog = asyncio.create_task(
                session.process.terminate(
                    self._stop_timeout, self._kill_timeout
                )
            )
        return sent

    async def _shutdown(self, session: PlaybackSession) -> None:
        await self._request_quit(session)
        await session.exited.wait()

    async def _watch(self, session: PlaybackSession) -> None:
        status = await session.process.wait()
        await self._on_exit(session, status)

    async def _on_exit(self, session: PlaybackSession, status: int) -> None:
        logger.info(
            "%s closed with status %s... cleaning up", self._binary, status
        )
        try:
            if self._session is session:
                self._session = None
                self._state = PlayerState.STOPPED
            if not session.superseded:
                session.callback(PlayTransition.PLAY_STOPPED)
        except Exception:
            logger.exception("Transition callback failed")
        finally:
            await session.process.close_input()
            if session.watchdog is not None:
                session.watchdog.cancel()
            session.exited.set()
