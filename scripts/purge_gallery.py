"""
Gallery Purge Utility

One-time manual run of the gallery cleaner, with a confirmation prompt.

Usage:
    python scripts/purge_gallery.py [--dry-run] [--channel ID ...] [--yes]

Options:
    --dry-run       Count what would be deleted without deleting anything
    --channel ID    Clean this channel instead of the configured ones (repeatable)
    --yes           Skip the confirmation prompt
"""

import asyncio
import argparse
import logging
import os
import sys

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv
from core.config import CleanerConfig, parse_u64
from core.discord_client import DiscordChatClient
from core.errors import GalleryCleanerError
from core.orchestrator import run_once, total_deleted


async def main():
    parser = argparse.ArgumentParser(description="Purge old text messages from gallery channels")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Only count messages that would be deleted",
    )
    parser.add_argument(
        "--channel",
        action="append",
        default=[],
        metavar="ID",
        help="Channel id to clean instead of PURGE_CHANNEL_ID* (repeatable)",
    )
    parser.add_argument(
        "--yes",
        action="store_true",
        help="Do not ask for confirmation",
    )
    args = parser.parse_args()

    # Load environment
    load_dotenv()

    try:
        config = CleanerConfig.from_env(os.environ)
        if args.channel:
            config = config.with_channels([parse_u64(c, "--channel") for c in args.channel])
    except GalleryCleanerError as e:
        print(f"ERROR: {e}")
        sys.exit(1)

    logging.basicConfig(
        level=config.log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    )

    if not config.purge_channel_ids:
        print("ERROR: no channels to clean (set PURGE_CHANNEL_ID* or pass --channel)")
        sys.exit(1)

    print(f"Gallery Purge Utility")
    print(f"Channels: {', '.join(str(c) for c in config.purge_channel_ids)}")
    print(f"Admin channel: {config.admin_channel_id}")
    print(f"Threshold: {config.threshold_seconds}s")
    print(f"Allowed URIs: {', '.join(config.allowed_uris) or '(none)'}")
    print()

    # Confirm
    if not (args.yes or args.dry_run):
        confirm = input("Are you sure you want to delete messages? (yes/no): ")
        if confirm.lower() != "yes":
            print("Aborted.")
            sys.exit(0)

    print()
    print("Running purge...")

    client = DiscordChatClient(config.token)
    try:
        await client.start()
        reports = await run_once(client, config, dry_run=args.dry_run)
    except GalleryCleanerError as e:
        print(f"  Error: {e}")
        sys.exit(1)
    finally:
        await client.stop()

    print()
    print("Results:")
    for report in reports:
        result = report.result
        print(f"  #{report.channel_name} ({report.channel_id})")
        print(f"    Messages deleted: {result.deleted}")
        print(f"    Images kept: {result.kept}")
        print(f"    Too recent: {result.skipped}")
        if result.errors:
            print(f"    Errors: {result.errors}")
        if not report.delivered:
            print(f"    Summary not delivered to admin channel")
    print(f"  Total deleted: {total_deleted(reports)}")

    print()
    print("Done!")


if __name__ == "__main__":
    asyncio.run(main())
