from __future__ import annotations

import asyncio

import pytest

from core.config import CleanerConfig
from core.errors import SessionError
from tests.fakes import FakeSessionClient, aged
from worker.main import CleanerWorker

ADMIN = 1
GALLERY = 10


def _config(**overrides) -> CleanerConfig:
    values = dict(
        token="token",
        admin_channel_id=ADMIN,
        threshold_seconds=3600,
        purge_channel_ids=(GALLERY,),
    )
    values.update(overrides)
    return CleanerConfig(**values)


def _client(**kwargs) -> FakeSessionClient:
    return FakeSessionClient(
        channels={GALLERY: [aged(1, 7200), aged(2, 10)]},
        names={GALLERY: "gallery"},
        **kwargs,
    )


def test_single_run_cleans_and_exits_zero() -> None:
    client = _client()

    status = asyncio.run(CleanerWorker(_config(), client=client).start())

    assert status == 0
    assert client.deleted == [1]
    assert client.sent == [(ADMIN, "I have deleted 1 messages in #gallery and kept 0 images.")]
    assert client.stopped


def test_session_error_exits_nonzero_and_closes_client() -> None:
    client = _client(start_error=SessionError("Invalid bot token"))

    status = asyncio.run(CleanerWorker(_config(), client=client).start())

    assert status == 1
    assert client.calls == []
    assert client.stopped


def test_aborted_run_exits_nonzero() -> None:
    client = _client()
    client.names.clear()

    status = asyncio.run(CleanerWorker(_config(), client=client).start())

    assert status == 1
    assert client.deleted == []
    assert client.stopped


def test_interval_mode_runs_until_stopped() -> None:
    client = _client()
    worker = CleanerWorker(_config(interval_seconds=3600), client=client)

    async def run():
        task = asyncio.create_task(worker.start())
        while ("send", ADMIN) not in client.calls:
            await asyncio.sleep(0)
        worker.stop()
        return await task

    status = asyncio.run(run())

    assert status == 0
    assert client.deleted == [1]
    assert client.stopped


class FlakyHistoryClient(FakeSessionClient):
    """Fails the first history read with an unexpected error."""

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.history_reads = 0

    async def history(self, channel_id: int):
        self.history_reads += 1
        if self.history_reads == 1:
            raise ConnectionResetError(104, "Connection reset by peer")
        async for item in super().history(channel_id):
            yield item


def test_interval_mode_survives_a_failed_run() -> None:
    client = FlakyHistoryClient(
        channels={GALLERY: [aged(1, 7200)]},
        names={GALLERY: "gallery"},
    )
    worker = CleanerWorker(_config(interval_seconds=0), client=client)

    async def run():
        task = asyncio.create_task(worker.start())
        while ("send", ADMIN) not in client.calls:
            await asyncio.sleep(0)
        worker.stop()
        return await task

    status = asyncio.run(run())

    assert status == 0
    assert client.history_reads >= 2
    assert client.deleted == [1]
    assert client.stopped


def test_single_run_lets_unexpected_errors_through() -> None:
    client = FlakyHistoryClient(
        channels={GALLERY: [aged(1, 7200)]},
        names={GALLERY: "gallery"},
    )

    with pytest.raises(ConnectionResetError):
        asyncio.run(CleanerWorker(_config(), client=client).start())

    assert client.stopped
