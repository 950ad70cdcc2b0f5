"""
Attribute value coercion.

Every value that enters an evaluation context is normalized once into the
closed set of attribute value types:

    str | Decimal | bool | datetime | UUID | None

Numbers are always Decimal. Parsing is culture-invariant and total: a
parser returns None instead of raising, and coercion of a stored raw
string degrades to the raw string when the declared type does not parse.
"""

from datetime import date, datetime, time, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Union
from uuid import UUID

from abac.models.attribute import AttributeType

AttributeValue = Union[str, Decimal, bool, datetime, UUID, None]

# Invariant-culture forms not covered by ISO-8601
_INVARIANT_DATETIME_FORMATS = (
    "%m/%d/%Y %H:%M:%S",
    "%m/%d/%Y %H:%M",
    "%m/%d/%Y",
)


# ============================================================
# BOUNDARY NORMALIZATION
# ============================================================

def normalize_value(value: Any) -> AttributeValue:
    """
    Convert an arbitrary Python value into an AttributeValue.

    int/float -> Decimal, date -> midnight datetime, unknown types -> str.
    bool is kept as bool (checked before int).
    """
    if value is None or isinstance(value, (str, bool, Decimal, datetime, UUID)):
        return value
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, float):
        return Decimal(repr(value))
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    return str(value)


# ============================================================
# TEXT PARSERS
# ============================================================

def parse_decimal(text: str) -> Decimal | None:
    """Parse an invariant-culture number ("1,250.50", "1e3"); NaN/Infinity rejected."""
    cleaned = text.strip().replace(",", "")
    # Decimal also takes "1_000" and non-ASCII digits
    if not cleaned or not cleaned.isascii() or "_" in cleaned:
        return None
    try:
        number = Decimal(cleaned)
    except InvalidOperation:
        return None
    return number if number.is_finite() else None


def parse_bool(text: str) -> bool | None:
    """Parse "true"/"false" (any case)."""
    lowered = text.strip().lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    return None


def parse_datetime(text: str) -> datetime | None:
    """Parse ISO-8601 (including a trailing Z) or invariant MM/DD/YYYY forms."""
    cleaned = text.strip()
    if not cleaned:
        return None
    try:
        return datetime.fromisoformat(cleaned)
    except ValueError:
        pass
    for fmt in _INVARIANT_DATETIME_FORMATS:
        try:
            return datetime.strptime(cleaned, fmt)
        except ValueError:
            continue
    return None


# ============================================================
# TYPED VIEWS OF A VALUE
# ============================================================

def as_decimal(value: AttributeValue) -> Decimal | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        return value if value.is_finite() else None
    if isinstance(value, str):
        return parse_decimal(value)
    return None


def as_bool(value: AttributeValue) -> bool | None:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return parse_bool(value)
    return None


def as_datetime(value: AttributeValue) -> datetime | None:
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        return parse_datetime(value)
    return None


def to_utc(value: datetime) -> datetime | None:
    """Aware UTC datetime; naive values are taken as local time. None when out of range."""
    try:
        return value.astimezone(timezone.utc)
    except (OverflowError, ValueError):
        return None


def align_datetimes(left: datetime, right: datetime) -> tuple[datetime, datetime] | None:
    """
    Make two datetimes comparable.

    A naive side takes the zone of the aware side, so "2024-06-02" is read
    in the zone of the clock attribute it is compared with. Two aware values
    are compared in UTC, two naive values as wall time. None when an instant
    falls outside the datetime range.
    """
    if left.tzinfo is None and right.tzinfo is None:
        return left, right
    if left.tzinfo is None:
        left = left.replace(tzinfo=right.tzinfo)
    elif right.tzinfo is None:
        right = right.replace(tzinfo=left.tzinfo)
    left_utc, right_utc = to_utc(left), to_utc(right)
    if left_utc is None or right_utc is None:
        return None
    return left_utc, right_utc


def to_text(value: AttributeValue) -> str:
    """Invariant string form used for string comparisons."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "True" if value else "False"
    if isinstance(value, Decimal):
        return format(value, "f")
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


# ============================================================
# STORED VALUE COERCION
# ============================================================

_PARSERS: dict[AttributeType, Callable[[str], AttributeValue]] = {
    AttributeType.NUMBER: parse_decimal,
    AttributeType.BOOLEAN: parse_bool,
    AttributeType.DATETIME: parse_datetime,
}


def coerce_raw_value(raw: str | None, attribute_type: AttributeType) -> AttributeValue:
    """
    Coerce a stored raw string by its declared attribute type.

    Blank input and values that fail to parse are returned unchanged.
    """
    if raw is None or not raw.strip():
        return raw
    parser = _PARSERS.get(attribute_type)
    if parser is None:
        return raw
    parsed = parser(raw)
    return raw if parsed is None else parsed
