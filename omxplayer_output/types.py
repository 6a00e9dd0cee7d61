import enum

from typing import Callable, TypedDict


class PlayerState(enum.Enum):
    STOPPED = 0
    RUNNING = 1
    PAUSED = 2


class PlayTransition(enum.Enum):
    PLAY_STOPPED = "PLAY_STOPPED"
    PLAY_STARTED_NEXT_STREAM = "PLAY_STARTED_NEXT_STREAM"


class TrackMetadata(TypedDict, total=False):
    title: str
    artist: str
    album: str
    genre: str
    composer: str


TransitionCallback = Callable[[PlayTransition], None]
MetadataCallback = Callable[[TrackMetadata], None]
