"""
Gallery Cleaner Errors

Exceptions raised by the config layer and the Discord adapter.
"""

from typing import Optional


def describe(cause: Optional[BaseException]) -> str:
    """Error text, falling back to the type name for bare exceptions like timeouts"""
    if cause is None:
        return "unknown error"
    return str(cause) or type(cause).__name__


class GalleryCleanerError(Exception):
    """Base exception for gallery cleaner errors."""
    pass


class ConfigError(GalleryCleanerError):
    """Raised when a required environment value is missing or unparsable."""
    pass


class SessionError(GalleryCleanerError):
    """Raised when the bot cannot log in."""
    pass


class ChannelLookupError(GalleryCleanerError):
    """Raised when a channel does not exist or is not accessible."""

    def __init__(self, channel_id: int, reason: str):
        self.channel_id = channel_id
        self.reason = reason
        super().__init__(f"Cannot resolve channel {channel_id}: {reason}")


class DeleteError(GalleryCleanerError):
    """Raised when a message could not be deleted."""

    def __init__(self, message_id: int, cause: Optional[BaseException] = None):
        self.message_id = message_id
        self.cause = cause
        super().__init__(f"Error deleting msg: {message_id}. Error: {describe(cause)}")


class SendError(GalleryCleanerError):
    """Raised when a message could not be sent to a channel."""

    def __init__(self, channel_id: int, cause: Optional[BaseException] = None):
        self.channel_id = channel_id
        self.cause = cause
        super().__init__(f"Error sending to channel {channel_id}: {describe(cause)}")
