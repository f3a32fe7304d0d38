"""
Gallery Cleaner Configuration

Everything is read from environment variables once at startup. Target
channels and allowed URIs come from any key starting with PURGE_CHANNEL_ID
or ALLOWED_URI, so a deployment can add entries without renaming others.
"""

import logging
import re
from dataclasses import dataclass, replace
from enum import Enum
from typing import Mapping, Optional

from core.errors import ConfigError

MAX_SNOWFLAKE = 2**64 - 1

DEFAULT_REPORT_TEMPLATE = "I have deleted {deleted} messages in #{channel} and kept {kept} images."

PURGE_CHANNEL_PREFIX = "PURGE_CHANNEL_ID"
ALLOWED_URI_PREFIX = "ALLOWED_URI"


class LookupPolicy(Enum):
    ABORT = "abort"
    USE_ID = "use_id"


class ReportPolicy(Enum):
    ABORT = "abort"
    CONTINUE = "continue"


def parse_u64(value: str, key: str) -> int:
    """Parse an unsigned 64-bit integer, raising ConfigError with the key name"""
    text = value.strip() if isinstance(value, str) else ""
    # Plain ASCII digits only: no sign, underscores or other scripts
    if not (text.isascii() and text.isdigit()):
        raise ConfigError(f"{key} must be an unsigned integer, got {value!r}")
    number = int(text)
    if number > MAX_SNOWFLAKE:
        raise ConfigError(f"{key} is out of range for an unsigned 64-bit integer: {number}")
    return number


def _natural_key(key: str) -> list:
    return [int(part) if part.isdigit() else part for part in re.split(r"(\d+)", key)]


def _prefixed(environ: Mapping[str, str], prefix: str) -> list[tuple[str, str]]:
    keys = sorted((k for k in environ if k.startswith(prefix)), key=_natural_key)
    return [(k, environ[k]) for k in keys]


def _require(environ: Mapping[str, str], key: str) -> str:
    value = environ.get(key)
    if value is None or not value.strip():
        raise ConfigError(f"{key} not set in environment")
    return value.strip()


def _parse_policy(environ: Mapping[str, str], key: str, policy_type, default):
    raw = environ.get(key)
    if raw is None or not raw.strip():
        return default
    try:
        return policy_type(raw.strip().lower())
    except ValueError:
        choices = ", ".join(p.value for p in policy_type)
        raise ConfigError(f"{key} must be one of: {choices}, got {raw!r}")


@dataclass(frozen=True)
class CleanerConfig:
    """Immutable cleaner settings, loaded once per process."""
    token: str
    admin_channel_id: int
    threshold_seconds: int
    purge_channel_ids: tuple[int, ...] = ()
    allowed_uris: tuple[str, ...] = ()
    interval_seconds: Optional[int] = None
    on_lookup_error: LookupPolicy = LookupPolicy.ABORT
    on_report_error: ReportPolicy = ReportPolicy.CONTINUE
    report_template: str = DEFAULT_REPORT_TEMPLATE
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Mapping[str, str]) -> "CleanerConfig":
        """
        Build the config from an environment mapping.

        Raises ConfigError for missing or unparsable values.
        """
        token = _require(environ, "DISCORD_TOKEN")
        admin_channel_id = parse_u64(_require(environ, "ADMIN_CHANNEL_ID"), "ADMIN_CHANNEL_ID")
        threshold_seconds = parse_u64(
            _require(environ, "CLEAN_TIME_SECONDS_THRESHOLD"), "CLEAN_TIME_SECONDS_THRESHOLD"
        )

        channel_ids: list[int] = []
        for key, value in _prefixed(environ, PURGE_CHANNEL_PREFIX):
            for part in value.split(","):
                if not part.strip():
                    continue
                channel_id = parse_u64(part, key)
                if channel_id not in channel_ids:
                    channel_ids.append(channel_id)

        # An empty allow-list entry would match every link
        allowed_uris = tuple(value for _, value in _prefixed(environ, ALLOWED_URI_PREFIX) if value)

        interval_seconds = None
        interval_raw = environ.get("CLEAN_INTERVAL_SECONDS")
        if interval_raw and interval_raw.strip():
            interval_seconds = parse_u64(interval_raw, "CLEAN_INTERVAL_SECONDS")
            if interval_seconds == 0:
                raise ConfigError("CLEAN_INTERVAL_SECONDS must be greater than zero")

        report_template = environ.get("REPORT_TEMPLATE") or DEFAULT_REPORT_TEMPLATE
        try:
            report_template.format(deleted=0, kept=0, channel="")
        except (AttributeError, KeyError, IndexError, ValueError) as e:
            raise ConfigError(f"REPORT_TEMPLATE is not a valid template: {e}")

        log_level = (environ.get("LOG_LEVEL") or "INFO").strip().upper()
        if not isinstance(logging.getLevelName(log_level), int):
            raise ConfigError(f"LOG_LEVEL is not a logging level: {log_level!r}")

        return cls(
            token=token,
            admin_channel_id=admin_channel_id,
            threshold_seconds=threshold_seconds,
            purge_channel_ids=tuple(channel_ids),
            allowed_uris=allowed_uris,
            interval_seconds=interval_seconds,
            on_lookup_error=_parse_policy(
                environ, "ON_CHANNEL_LOOKUP_ERROR", LookupPolicy, LookupPolicy.ABORT
            ),
            on_report_error=_parse_policy(
                environ, "ON_REPORT_ERROR", ReportPolicy, ReportPolicy.CONTINUE
            ),
            report_template=report_template,
            log_level=log_level,
        )

    def with_channels(self, channel_ids: list[int]) -> "CleanerConfig":
        """Copy of this config targeting the given channels instead"""
        unique: list[int] = []
        for channel_id in channel_ids:
            if channel_id not in unique:
                unique.append(channel_id)
        return replace(self, purge_channel_ids=tuple(unique))
