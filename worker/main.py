"""
Gallery Cleaner Worker

Entry point for scheduled runs:
1. Loads configuration from the environment (and .env if present)
2. Logs in to Discord
3. Purges every configured channel and reports to the admin channel
4. Optionally repeats every CLEAN_INTERVAL_SECONDS until stopped
"""

import asyncio
import logging
import os
import signal
import sys
from typing import Optional

from core.config import CleanerConfig
from core.discord_client import DiscordChatClient
from core.errors import ChannelLookupError, ConfigError, SendError, SessionError
from core.orchestrator import run_once, total_deleted

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
)
logger = logging.getLogger(__name__)


class CleanerWorker:
    """
    Runs the gallery cleaner once, or on an interval.

    A run aborted by a lookup or report failure ends the process in one-shot
    mode. In interval mode any failed run is logged and the next one starts
    on schedule.
    """

    def __init__(self, config: CleanerConfig, client: Optional[DiscordChatClient] = None):
        self.config = config
        self.client = client or DiscordChatClient(config.token)
        self._shutdown_event = asyncio.Event()

    async def start(self) -> int:
        """Run the worker. Returns the process exit status."""
        try:
            try:
                await self.client.start()
            except SessionError as e:
                logger.error(f"Err creating client: {e}")
                return 1

            if self.config.interval_seconds is None:
                return await self._run_job()
            return await self._run_loop()
        finally:
            await self.client.stop()

    async def _run_job(self) -> int:
        try:
            reports = await run_once(self.client, self.config)
        except (ChannelLookupError, SendError) as e:
            logger.error(f"Clean job aborted: {e}")
            return 1

        logger.info(f"Deleted {total_deleted(reports)} messages in total")
        return 0

    async def _run_loop(self) -> int:
        self._install_signal_handlers()
        logger.info(f"Running clean job every {self.config.interval_seconds}s")

        while not self._shutdown_event.is_set():
            try:
                await self._run_job()
            except Exception as e:
                logger.error(f"Cleanup error: {e!r}")

            # Wait for next run or shutdown
            try:
                await asyncio.wait_for(
                    self._shutdown_event.wait(),
                    timeout=self.config.interval_seconds,
                )
            except asyncio.TimeoutError:
                pass

        logger.info("Gallery cleaner stopped")
        return 0

    def stop(self):
        self._shutdown_event.set()

    def _install_signal_handlers(self):
        loop = asyncio.get_running_loop()

        def handle_signal():
            logger.info("Received shutdown signal")
            self.stop()

        for sig in (signal.SIGTERM, signal.SIGINT):
            try:
                loop.add_signal_handler(sig, handle_signal)
            except NotImplementedError:
                # Windows doesn't support add_signal_handler
                pass


async def main() -> int:
    """Main entry point"""
    # Load .env file
    from dotenv import load_dotenv
    load_dotenv()

    try:
        config = CleanerConfig.from_env(os.environ)
    except ConfigError as e:
        logger.error(str(e))
        return 1

    logging.getLogger().setLevel(config.log_level)

    if not config.purge_channel_ids:
        logger.warning("No PURGE_CHANNEL_ID* set, nothing to clean")

    worker = CleanerWorker(config)
    return await worker.start()


def run():
    sys.exit(asyncio.run(main()))


if __name__ == '__main__':
    run()
