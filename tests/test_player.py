import asyncio
import json

import pytest
import redis.exceptions

from unittest import mock

from omxplayer_output.conf import settings
from omxplayer_output.output_modules.dummy import DummyOutput
from omxplayer_output.player import Player
from omxplayer_output.types import PlayerState, PlayTransition

from .utils import ExitAfter


def _message(name, args):
    return {
        "type": "message",
        "channel": settings.PLAYER_REDIS_CHANNEL,
        "data": json.dumps((name, args)),
    }


@pytest.fixture
def redis_conn():
    conn = mock.MagicMock()
    conn.aclose = mock.AsyncMock()
    conn.publish = mock.AsyncMock(return_value=1)
    pipe = mock.MagicMock()
    pipe.subscribe = mock.AsyncMock()
    pipe.get_message = mock.AsyncMock(return_value=None)
    pipe.aclose = mock.AsyncMock()
    conn.pubsub.return_value = pipe
    with mock.patch(
        "omxplayer_output.player.get_redis_conn", return_value=conn
    ):
        yield conn


def test_dispatch_commands(redis_conn):
    output = DummyOutput()
    player = Player(output)

    async def scenario():
        await player._dispatch_signal(("SET_URI", ["http://x/a.mp3"]))
        await player._dispatch_signal(("SET_NEXT_URI", ["http://x/b.mp3"]))
        await player._dispatch_signal(("PLAY", []))
        assert output.get_current_state() is PlayerState.RUNNING
        await player._dispatch_signal(("PAUSE", []))
        assert output.get_current_state() is PlayerState.PAUSED
        await player._dispatch_signal(("SET_VOLUME", [0.25]))
        await player._dispatch_signal(("SET_MUTE", [1]))
        await player._dispatch_signal(("SEEK", [1000]))
        await player._dispatch_signal(("STOP", []))

    asyncio.run(scenario())
    assert output._uri == "http://x/a.mp3"
    assert output._next_uri == "http://x/b.mp3"
    assert output._volume == 0.25
    assert output._mute is True
    assert output._position == 1000
    assert output.get_current_state() is PlayerState.STOPPED


def test_transition_is_published(redis_conn):
    player = Player(DummyOutput())

    async def scenario():
        await player._dispatch_signal(("SET_URI", ["a"]))
        await player._dispatch_signal(("PLAY", []))
        await player._dispatch_signal(("STOP", []))
        await asyncio.gather(*player._pending_acks)

    asyncio.run(scenario())
    redis_conn.publish.assert_called_once_with(
        settings.RENDERER_REDIS_CHANNEL,
        json.dumps(("TRANSITION", [PlayTransition.PLAY_STOPPED.name])),
    )


@pytest.mark.parametrize(
    ["signal"],
    [
        (("UNKNOWN", []),),
        (("PLAY", ["unexpected"]),),
        (("SET_URI",),),
        (None,),
        ([["PLAY"], []],),
        ([{"a": 1}, []],),
    ],
)
def test_invalid_signals_are_ignored(signal, redis_conn):
    output = DummyOutput()
    asyncio.run(Player(output)._dispatch_signal(signal))
    assert output.get_current_state() is PlayerState.STOPPED


def test_failing_handler_does_not_propagate(redis_conn):
    output = DummyOutput()
    player = Player(output)

    with mock.patch.object(output, "play", side_effect=RuntimeError("boom")):
        asyncio.run(player._dispatch_signal(("PLAY", [])))


@mock.patch("omxplayer_output.player.Player._should_run")
def test_run(should_run, redis_conn):
    should_run.side_effect = ExitAfter(3)
    pipe = redis_conn.pubsub.return_value
    pipe.get_message.side_effect = [
        _message("SET_URI", ["a"]),
        {"type": "subscribe", "data": 1},
        _message("PLAY", []),
    ]
    output = DummyOutput()
    output.close = mock.AsyncMock()

    asyncio.run(Player(output).run())
    pipe.subscribe.assert_called_once_with(settings.PLAYER_REDIS_CHANNEL)
    assert output.get_current_state() is PlayerState.RUNNING
    assert output.close.called
    assert pipe.aclose.called
    assert redis_conn.aclose.called


@pytest.mark.parametrize(
    ["error"],
    [
        (redis.exceptions.ConnectionError("closed"),),
        (redis.exceptions.TimeoutError("timeout"),),
    ],
)
@mock.patch("omxplayer_output.player.asyncio.sleep", new_callable=mock.AsyncMock)
def test_get_signal_survives_redis_errors(sleep, error, redis_conn):
    redis_conn.pubsub.return_value.get_message.side_effect = error
    player = Player(DummyOutput())

    assert asyncio.run(player._get_signal()) is None
    assert sleep.called
