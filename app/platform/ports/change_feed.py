from typing import Protocol, Sequence, runtime_checkable

@runtime_checkable
class ChangeFeedPort(Protocol):
    async def listen(self, channels: Sequence[str]) -> None: ...
    async def next(self) -> tuple[str, str]: ...
    async def close(self) -> None: ...
