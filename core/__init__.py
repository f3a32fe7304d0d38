"""
Gallery Cleaner Core Module

Deletes old text-only messages from Discord gallery channels while keeping
images and allowed links.
"""

from core.classifier import Disposition, classify, has_media, is_allowed_link, is_older_than_threshold
from core.config import CleanerConfig, LookupPolicy, ReportPolicy
from core.discord_client import DiscordChatClient
from core.errors import (
    GalleryCleanerError, ConfigError, SessionError, ChannelLookupError, DeleteError, SendError,
)
from core.orchestrator import GalleryCleaner, ChannelReport, format_summary
from core.ports import FetchError
from core.purge import PurgeResult, purge_channel

__all__ = [
    'Disposition',
    'classify',
    'has_media',
    'is_allowed_link',
    'is_older_than_threshold',
    'CleanerConfig',
    'LookupPolicy',
    'ReportPolicy',
    'DiscordChatClient',
    'GalleryCleanerError',
    'ConfigError',
    'SessionError',
    'ChannelLookupError',
    'DeleteError',
    'SendError',
    'GalleryCleaner',
    'ChannelReport',
    'format_summary',
    'FetchError',
    'PurgeResult',
    'purge_channel',
]
