"""
Ports used by the purge pass and the orchestrator.

The cleaner only talks to Discord through these contracts, so tests can
drive it with in-memory fakes.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import AsyncIterator, Protocol, Sequence, Union

from core.errors import describe


class MessageLike(Protocol):
    """The parts of a chat message the classifier reads."""

    id: int
    content: str
    created_at: datetime
    attachments: Sequence[object]


@dataclass(frozen=True)
class FetchError:
    """Yielded by a history iterator in place of a message it failed to fetch."""
    channel_id: int
    cause: BaseException

    def __str__(self) -> str:
        return f"channel {self.channel_id}: {describe(self.cause)}"


HistoryItem = Union[MessageLike, FetchError]


class ChatClientPort(Protocol):
    """Chat platform operations required by the cleaner."""

    async def resolve_channel_name(self, channel_id: int) -> str:
        ...

    def history(self, channel_id: int) -> AsyncIterator[HistoryItem]:
        ...

    async def delete(self, message: MessageLike) -> None:
        ...

    async def send(self, channel_id: int, text: str) -> None:
        ...
