"""
Gallery Cleaner Orchestrator

Runs the purge pass over every configured channel, one after another, and
posts a summary for each to the admin channel.
"""

import logging
from dataclasses import dataclass

from core.config import CleanerConfig, LookupPolicy, ReportPolicy
from core.errors import ChannelLookupError, SendError
from core.ports import ChatClientPort
from core.purge import PurgeResult, purge_channel

logger = logging.getLogger(__name__)


@dataclass
class ChannelReport:
    """Outcome of cleaning one channel"""
    channel_id: int
    channel_name: str
    result: PurgeResult
    summary: str
    delivered: bool


def format_summary(template: str, channel_name: str, result: PurgeResult) -> str:
    return template.format(deleted=result.deleted, kept=result.kept, channel=channel_name)


class GalleryCleaner:
    """
    Cleans the configured channels of a guild.

    Channel N+1 is only started after the summary for channel N has been
    sent. What happens on lookup or report failures is decided by the
    config's LookupPolicy and ReportPolicy.
    """

    def __init__(
        self,
        client: ChatClientPort,
        config: CleanerConfig,
        dry_run: bool = False,
    ):
        self.client = client
        self.config = config
        self.dry_run = dry_run

    async def run(self) -> list[ChannelReport]:
        """Clean every configured channel in order"""
        logger.info("Starting clean job.")
        logger.info(f"Allowed URIs: {list(self.config.allowed_uris)}")
        logger.info(f"Clean time seconds threshold: {self.config.threshold_seconds}")
        if self.dry_run:
            logger.info("Dry run: no messages will be deleted")

        reports = []
        for channel_id in self.config.purge_channel_ids:
            reports.append(await self.clean_channel(channel_id))

        logger.info(f"Clean job finished for {len(reports)} channel(s)")
        return reports

    async def clean_channel(self, channel_id: int) -> ChannelReport:
        channel_name = await self._resolve_name(channel_id)

        result = await purge_channel(
            self.client,
            channel_id,
            self.config.threshold_seconds,
            self.config.allowed_uris,
            dry_run=self.dry_run,
        )

        summary = format_summary(self.config.report_template, channel_name, result)
        if self.dry_run:
            summary = f"[dry run] {summary}"

        delivered = await self._report(summary)
        logger.info(summary)
        if result.errors:
            logger.warning(
                f"#{channel_name}: {result.fetch_errors} fetch error(s), "
                f"{result.delete_errors} delete error(s)"
            )

        return ChannelReport(
            channel_id=channel_id,
            channel_name=channel_name,
            result=result,
            summary=summary,
            delivered=delivered,
        )

    async def _resolve_name(self, channel_id: int) -> str:
        try:
            return await self.client.resolve_channel_name(channel_id)
        except ChannelLookupError as e:
            if self.config.on_lookup_error is LookupPolicy.ABORT:
                logger.error(f"{e}, aborting clean job")
                raise
            logger.warning(f"{e}, reporting under the raw id")
            return str(channel_id)

    async def _report(self, summary: str) -> bool:
        """Send the summary to the admin channel. Returns False if it was dropped."""
        try:
            await self.client.send(self.config.admin_channel_id, summary)
        except SendError as e:
            if self.config.on_report_error is ReportPolicy.ABORT:
                logger.error(f"{e}, aborting clean job")
                raise
            logger.error(f"{e}, continuing with next channel")
            return False
        return True


async def run_once(
    client: ChatClientPort,
    config: CleanerConfig,
    dry_run: bool = False,
) -> list[ChannelReport]:
    return await GalleryCleaner(client, config, dry_run=dry_run).run()


def total_deleted(reports: list[ChannelReport]) -> int:
    return sum(r.result.deleted for r in reports)
