"""
Timezone utilities.

Rules:
1. Database: always store UTC
2. Engine: compare instants in UTC
3. Local clock attributes: derived from UTC using a configured zone,
   or the host zone when none is configured
"""

from datetime import datetime, timezone, tzinfo
from zoneinfo import ZoneInfo

UTC = timezone.utc


def utc_now() -> datetime:
    """
    Current time in UTC (timezone-aware).

    Usage:
        from abac.utils.timezone import utc_now
        collector = AttributeCollector(identities, clock=utc_now)
    """
    return datetime.now(UTC)


def resolve_zone(name: str | None) -> tzinfo | None:
    """ZoneInfo for an IANA name; None (host zone) for blank names."""
    if name and name.strip():
        return ZoneInfo(name.strip())
    return None


def to_local(dt: datetime, zone: tzinfo | None = None) -> datetime:
    """
    Convert an instant to local time.

    Naive input is taken as UTC. With zone=None the host's local zone is used.
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(zone)
