import asyncio

import redis


def is_redis_running(**kwargs):
    try:
        r = redis.Redis(**kwargs)
        r.ping()
        return True
    except redis.exceptions.ConnectionError:
        return False
    except Exception:
        raise


class ExitAfter:
    def __init__(self, log_count):
        self.loops = iter(range(log_count))

    def __call__(self, *args, **kwargs):
        step = next(self.loops, None)
        return step is not None


class FakeStdin:
    def __init__(self, on_write=None):
        self.written = b""
        self.close_count = 0
        self.broken = False
        self._on_write = on_write

    def write(self, data):
        if self.broken:
            raise BrokenPipeError("broken pipe")
        self.written += data
        if self._on_write:
            self._on_write(data)

    async def drain(self):
        pass

    def close(self):
        self.close_count += 1

    async def wait_closed(self):
        if self.broken:
            raise BrokenPipeError("broken pipe")


class FakeProcess:
    """
    Stand-in for asyncio.subprocess.Process, exits when told to or,
    with ``quits`` set, when it reads a quit command.
    """

    def __init__(self, pid, quits=True, obeys_terminate=True):
        self.pid = pid
        self.returncode = None
        self.quits = quits
        self.obeys_terminate = obeys_terminate
        self.signals = []
        self.stdin = FakeStdin(on_write=self._on_write)
        self._exited = asyncio.Event()

    def _on_write(self, data):
        if self.quits and b"q" in data:
            self.exit(0)

    def exit(self, status=0):
        if self.returncode is None:
            self.returncode = status
            self._exited.set()

    async def wait(self):
        await self._exited.wait()
        return self.returncode

    def terminate(self):
        self.signals.append("terminate")
        if self.obeys_terminate:
            self.exit(-15)

    def kill(self):
        self.signals.append("kill")
        self.exit(-9)


class FakeSpawner:
    def __init__(self, quits=True, obeys_terminate=True, error=None):
        self.quits = quits
        self.obeys_terminate = obeys_terminate
        self.error = error
        self.calls = []
        self.processes = []

    async def __call__(self, *argv, **kwargs):
        self.calls.append(list(argv))
        if self.error is not None:
            raise self.error
        process = FakeProcess(
            pid=1000 + len(self.processes),
            quits=self.quits,
            obeys_terminate=self.obeys_terminate,
        )
        self.processes.append(process)
        return process
