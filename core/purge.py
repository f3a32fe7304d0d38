"""
Purge Pass

Walks one channel's message history once, front to back, and deletes every
text-only message past the age threshold. Fetch and delete failures are
logged and counted; they never abort the pass.
"""

import logging
from dataclasses import dataclass
from typing import Sequence

from core.classifier import Disposition, classify
from core.errors import DeleteError
from core.ports import ChatClientPort, FetchError

logger = logging.getLogger(__name__)


@dataclass
class PurgeResult:
    """Counters for one channel. Every history item lands in exactly one."""
    deleted: int = 0
    kept: int = 0
    skipped: int = 0
    fetch_errors: int = 0
    delete_errors: int = 0

    @property
    def errors(self) -> int:
        return self.fetch_errors + self.delete_errors

    @property
    def total(self) -> int:
        return self.deleted + self.kept + self.skipped + self.errors


async def purge_channel(
    client: ChatClientPort,
    channel_id: int,
    threshold_seconds: int,
    allowed_uris: Sequence[str],
    *,
    dry_run: bool = False,
) -> PurgeResult:
    """
    Classify and act on every message in the channel's history.

    In dry-run mode nothing is deleted; deletion candidates are still counted
    under `deleted`.
    """
    result = PurgeResult()

    async for item in client.history(channel_id):
        if isinstance(item, FetchError):
            logger.error(f"Error fetching messages: {item}")
            result.fetch_errors += 1
            continue

        disposition = classify(item, allowed_uris, threshold_seconds)

        if disposition is Disposition.KEEP:
            result.kept += 1
        elif disposition is Disposition.SKIP:
            result.skipped += 1
        elif dry_run:
            logger.debug(f"Dry run: would delete msg {item.id}")
            result.deleted += 1
        else:
            try:
                await client.delete(item)
                result.deleted += 1
            except DeleteError as e:
                logger.error(str(e))
                result.delete_errors += 1

    logger.debug(
        f"Purge of channel {channel_id} done: "
        f"deleted={result.deleted}, kept={result.kept}, skipped={result.skipped}, "
        f"errors={result.errors}"
    )
    return result
