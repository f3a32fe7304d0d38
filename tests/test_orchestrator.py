from __future__ import annotations

import asyncio

import pytest

from core.config import CleanerConfig, LookupPolicy, ReportPolicy
from core.errors import ChannelLookupError, SendError
from core.orchestrator import GalleryCleaner, format_summary, total_deleted
from core.purge import PurgeResult
from tests.fakes import FakeChatClient, aged

ADMIN = 1
GALLERY = 10
MEMES = 20


def _config(**overrides) -> CleanerConfig:
    values = dict(
        token="token",
        admin_channel_id=ADMIN,
        threshold_seconds=3600,
        purge_channel_ids=(GALLERY, MEMES),
        allowed_uris=("cdn.example.com",),
    )
    values.update(overrides)
    return CleanerConfig(**values)


def _client() -> FakeChatClient:
    return FakeChatClient(
        channels={
            GALLERY: [aged(1, 7200), aged(2, 7200, attachments=["a.png"]), aged(3, 60)],
            MEMES: [aged(4, 7200), aged(5, 7200), aged(6, 7200, "http://cdn.example.com/x")],
        },
        names={GALLERY: "gallery", MEMES: "memes"},
    )


def test_format_summary_default_wording() -> None:
    result = PurgeResult(deleted=3, kept=7)
    text = format_summary(_config().report_template, "gallery", result)
    assert text == "I have deleted 3 messages in #gallery and kept 7 images."


def test_format_summary_custom_template() -> None:
    template = "Ich habe in #{channel} {deleted} Nachrichten gelöscht und {kept} Bilder behalten."
    text = format_summary(template, "galerie", PurgeResult(deleted=2, kept=1))
    assert text == "Ich habe in #galerie 2 Nachrichten gelöscht und 1 Bilder behalten."


def test_reports_each_channel_in_order() -> None:
    client = _client()

    reports = asyncio.run(GalleryCleaner(client, _config()).run())

    assert [r.channel_name for r in reports] == ["gallery", "memes"]
    assert client.sent == [
        (ADMIN, "I have deleted 1 messages in #gallery and kept 1 images."),
        (ADMIN, "I have deleted 2 messages in #memes and kept 1 images."),
    ]
    assert total_deleted(reports) == 3
    assert all(r.delivered for r in reports)


def test_channels_are_processed_sequentially() -> None:
    client = _client()

    asyncio.run(GalleryCleaner(client, _config()).run())

    assert client.calls == [
        ("resolve", GALLERY),
        ("history", GALLERY),
        ("send", ADMIN),
        ("resolve", MEMES),
        ("history", MEMES),
        ("send", ADMIN),
    ]


def test_lookup_failure_aborts_run_by_default() -> None:
    client = _client()
    del client.names[GALLERY]

    with pytest.raises(ChannelLookupError):
        asyncio.run(GalleryCleaner(client, _config()).run())

    assert client.deleted == []
    assert client.sent == []


def test_lookup_failure_can_fall_back_to_id() -> None:
    client = _client()
    del client.names[GALLERY]
    config = _config(on_lookup_error=LookupPolicy.USE_ID)

    reports = asyncio.run(GalleryCleaner(client, config).run())

    assert reports[0].channel_name == str(GALLERY)
    assert client.sent[0][1] == f"I have deleted 1 messages in #{GALLERY} and kept 1 images."
    assert len(reports) == 2


def test_report_failure_continues_by_default() -> None:
    client = _client()
    client.failing_sends.add(ADMIN)

    reports = asyncio.run(GalleryCleaner(client, _config()).run())

    assert len(reports) == 2
    assert not any(r.delivered for r in reports)
    assert sorted(client.deleted) == [1, 4, 5]


def test_report_failure_can_abort_run() -> None:
    client = _client()
    client.failing_sends.add(ADMIN)
    config = _config(on_report_error=ReportPolicy.ABORT)

    with pytest.raises(SendError):
        asyncio.run(GalleryCleaner(client, config).run())

    # Second channel was never touched
    assert ("resolve", MEMES) not in client.calls
    assert client.deleted == [1]


def test_dry_run_marks_summary() -> None:
    client = _client()

    reports = asyncio.run(GalleryCleaner(client, _config(), dry_run=True).run())

    assert client.deleted == []
    assert reports[0].summary.startswith("[dry run] ")
    assert reports[0].result.deleted == 1


def test_no_channels_configured() -> None:
    client = _client()

    reports = asyncio.run(GalleryCleaner(client, _config(purge_channel_ids=())).run())

    assert reports == []
    assert client.calls == []
