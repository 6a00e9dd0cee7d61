import asyncio
import logging

from typing import List, Optional


logger = logging.getLogger(__name__)


QUIT = "q"
TOGGLE_PAUSE = "p"


class SpawnFailed(Exception):
    pass


class ChannelWriteFailed(Exception):
    pass


def build_argv(binary: str, uri: str, audio_output: str = "both") -> List[str]:
    return [binary, "-b", "-o", audio_output, "--live", uri]


class PlayerProcess:
    """
    Handle on a single spawned player.

    Commands are single characters written to the child's stdin without
    any acknowledgement, the child's own state is never read back.
    """

    def __init__(self, argv: List[str]):
        self.argv = argv
        self._process: Optional[asyncio.subprocess.Process] = None
        self._input_closed = False

    @classmethod
    async def spawn(cls, argv: List[str]) -> "PlayerProcess":
        player = cls(argv)
        try:
            player._process = await asyncio.create_subprocess_exec(
                *argv, stdin=asyncio.subprocess.PIPE
            )
        except (OSError, ValueError) as e:
            raise SpawnFailed("Unable to spawn {}: {}".format(argv[0], e))
        logger.debug("Spawned %s with pid %s", argv[0], player.pid)
        return player

    @property
    def pid(self) -> Optional[int]:
        return self._process.pid if self._process else None

    @property
    def returncode(self) -> Optional[int]:
        return self._process.returncode if self._process else None

    async def send(self, command: str) -> None:
        if self._input_closed:
            raise ChannelWriteFailed("Input stream of {} is closed".format(self.pid))
        stdin = self._process.stdin
        try:
            stdin.write(command.encode("ascii"))
            await stdin.drain()
        except (ConnectionError, OSError) as e:
            raise ChannelWriteFailed(
                "Unable to write {!r} to {}: {}".format(command, self.pid, e)
            )

    async def wait(self) -> int:
        return await self._process.wait()

    async def close_input(self) -> None:
        if self._input_closed:
            return
        self._input_closed = True
        stdin = self._process.stdin
        try:
            stdin.close()
            await stdin.wait_closed()
        except (ConnectionError, OSError) as e:
            logger.debug("Input stream of %s closed with error: %s", self.pid, e)

    async def terminate(self, stop_timeout: float, kill_timeout: float) -> int:
        """
        Wait for the child to exit on its own, then escalate to SIGTERM
        and finally SIGKILL.
        """
        for timeout, escalate in (
            (stop_timeout, self._process.terminate),
            (kill_timeout, self._process.kill),
        ):
            try:
                return await asyncio.wait_for(
                    asyncio.shield(self.wait()), timeout
                )
            except asyncio.TimeoutError:
                logger.warning(
                    "Player %s did not exit in %ss, sending %s",
                    self.pid,
                    timeout,
                    escalate.__name__,
                )
                try:
                    escalate()
                except ProcessLookupError:
                    pass
        return await self.wait()
