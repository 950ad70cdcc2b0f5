"""
Evaluation context.

Four independent, immutable attribute maps (subject, resource, action,
environment) built once per request. Keys are case-insensitive, and an
absent key is distinct from a key mapped to None.
"""

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .coercion import AttributeValue, normalize_value


class AttributeSource(str, Enum):
    """Which attribute map a condition reads from."""

    SUBJECT = "Subject"
    RESOURCE = "Resource"
    ENVIRONMENT = "Environment"
    ACTION = "Action"

    @classmethod
    def parse(cls, value: "str | AttributeSource | None") -> "AttributeSource | None":
        """Case-insensitive lookup; None for unknown sources."""
        if isinstance(value, cls):
            return value
        if not value:
            return None
        lowered = value.lower()
        for member in cls:
            if member.value.lower() == lowered:
                return member
        return None


class AttributeMap(Mapping[str, AttributeValue]):
    """
    Immutable case-insensitive mapping of attribute key -> value.

    Later entries win over earlier ones with the same key (ignoring case),
    and the spelling of the winning key is preserved for iteration.

    Usage:
        attrs = AttributeMap({"Department": "Finance"})
        attrs["department"]            # "Finance"
        attrs.merged({"level": 5})     # new map, level normalized to Decimal
    """

    __slots__ = ("_items",)

    def __init__(self, items: Mapping[str, Any] | Iterable[tuple[str, Any]] = ()):
        pairs = items.items() if isinstance(items, Mapping) else items
        data: dict[str, tuple[str, AttributeValue]] = {}
        for key, value in pairs:
            data[key.casefold()] = (key, normalize_value(value))
        self._items = data

    def __getitem__(self, key: str) -> AttributeValue:
        if not isinstance(key, str):
            raise KeyError(key)
        return self._items[key.casefold()][1]

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and key.casefold() in self._items

    def __iter__(self) -> Iterator[str]:
        return (key for key, _ in self._items.values())

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return f"AttributeMap({dict(self)!r})"

    def merged(self, other: Mapping[str, Any]) -> "AttributeMap":
        """Return a new map with other's entries layered on top."""
        return AttributeMap([*self.items(), *other.items()])


def _as_map(values: Mapping[str, Any] | None) -> AttributeMap:
    if isinstance(values, AttributeMap):
        return values
    return AttributeMap(values or {})


@dataclass(frozen=True)
class EvaluationContext:
    """Attributes of one access request, grouped by source."""

    subject: AttributeMap = field(default_factory=AttributeMap)
    resource: AttributeMap = field(default_factory=AttributeMap)
    action: AttributeMap = field(default_factory=AttributeMap)
    environment: AttributeMap = field(default_factory=AttributeMap)

    def __post_init__(self) -> None:
        for name in ("subject", "resource", "action", "environment"):
            object.__setattr__(self, name, _as_map(getattr(self, name)))

    def source(self, source: AttributeSource) -> AttributeMap:
        """Attribute map for a parsed source."""
        return getattr(self, source.name.lower())
