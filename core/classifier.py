"""
Message Classifier

Decides what happens to a single message during a purge pass:
- Messages with attachments are kept
- Messages linking to an allowed host are kept
- Remaining messages older than the threshold are deleted
- Everything else is left alone
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Iterable, Optional

from core.ports import MessageLike


class Disposition(Enum):
    KEEP = "keep"
    DELETE = "delete"
    SKIP = "skip"


def has_media(message: MessageLike) -> bool:
    """True if the message carries at least one attachment"""
    return len(message.attachments) > 0


def is_allowed_link(message: MessageLike, allowed_uris: Iterable[str]) -> bool:
    """
    True if the message text links to one of the allowed URIs.

    Plain case-sensitive substring checks, no URL parsing. Text without
    "http" is rejected before the allow-list is scanned.
    """
    content = message.content
    if "http" not in content:
        return False

    for uri in allowed_uris:
        if uri in content:
            return True

    return False


def is_older_than_threshold(
    message: MessageLike,
    threshold_seconds: int,
    now: Optional[datetime] = None,
) -> bool:
    """
    True if the message is more than threshold_seconds old.

    Ages are compared in whole Unix seconds. The clock is read on every call
    unless `now` is given. Messages dated in the future have a negative age.
    """
    if now is None:
        now = datetime.now(timezone.utc)

    age = int(now.timestamp()) - int(message.created_at.timestamp())
    return age > threshold_seconds


def classify(
    message: MessageLike,
    allowed_uris: Iterable[str],
    threshold_seconds: int,
    now: Optional[datetime] = None,
) -> Disposition:
    """Media and allowed links win over age."""
    if has_media(message) or is_allowed_link(message, allowed_uris):
        return Disposition.KEEP
    if is_older_than_threshold(message, threshold_seconds, now):
        return Disposition.DELETE
    return Disposition.SKIP
