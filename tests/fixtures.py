import pytest

from unittest import mock

from omxplayer_output.output_modules.omxplayer import OMXPlayerOutput

from .utils import FakeSpawner


@pytest.fixture
def signal_listener():
    listener = mock.MagicMock()
    listener.close = mock.AsyncMock()
    return listener


@pytest.fixture
def spawner():
    spawner = FakeSpawner()
    with mock.patch(
        "omxplayer_output.process.asyncio.create_subprocess_exec", new=spawner
    ):
        yield spawner


@pytest.fixture
def output(signal_listener):
    return OMXPlayerOutput(
        binary="omxplayer.bin",
        audio_output="both",
        stop_timeout=0.05,
        kill_timeout=0.05,
        signal_listener=signal_listener,
    )
