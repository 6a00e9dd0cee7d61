from typing import Optional, Protocol, Tuple


from omxplayer_output.types import (
    MetadataCallback,
    PlayerState,
    TransitionCallback,
)


class OutputModule(Protocol):
    shortname: str
    description: str

    async def init(self) -> bool:
        pass

    def set_uri(
        self, uri: Optional[str], meta_cb: Optional[MetadataCallback] = None
    ) -> None:
        pass

    def set_next_uri(self, uri: Optional[str]) -> None:
        pass

    async def play(self, callback: Optional[TransitionCallback] = None) -> bool:
        pass

    async def stop(self) -> bool:
        pass

    async def pause(self) -> bool:
        pass

    async def seek(self, position_nanos: int) -> bool:
        pass

    async def get_position(self) -> Tuple[int, int]:
        pass

    async def get_volume(self) -> float:
        pass

    async def set_volume(self, value: float) -> bool:
        pass

    async def get_mute(self) -> bool:
        pass

    async def set_mute(self, value: bool) -> bool:
        pass

    def get_current_state(self) -> PlayerState:
        pass

    async def close(self) -> None:
        pass
