"""
Attribute collector.

Turns identifiers into flat attribute maps for an EvaluationContext:

- Subject: active assignments of a user, coerced by declared type, plus ``userId``
- Resource: assignments of a resource, coerced by declared type, plus ``resourceId``
- Environment: derived clock attributes merged with the caller's context

Missing or soft-deleted subjects/resources raise NotFoundError before any
policy is consulted.
"""

from collections.abc import Callable, Iterable, Mapping
from datetime import datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

import structlog

from abac.core.cancellation import CancellationToken, checkpoint
from abac.core.config import EvaluationSettings
from abac.core.exceptions import NotFoundError
from abac.models import ResourceAttribute, UserAttribute
from abac.utils.timezone import UTC, resolve_zone, to_local, utc_now

from .coercion import AttributeValue, coerce_raw_value
from .context import AttributeMap
from .interfaces import IdentitySource

# Indexed by datetime.weekday() (Monday == 0)
DAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")

# Caller keys mirrored into canonical environment keys
ENVIRONMENT_ALIASES = {
    "ip": "ipAddress",
    "geoLocation": "location",
}


def _coerce_assignments(
    assignments: Iterable[UserAttribute | ResourceAttribute],
) -> dict[str, AttributeValue]:
    values: dict[str, AttributeValue] = {}
    for assignment in assignments:
        definition = assignment.attribute
        if definition is None:
            continue
        values[definition.key] = coerce_raw_value(assignment.value, definition.type)
    return values


class AttributeCollector:
    """
    Builds subject, resource and environment attribute maps.

    Usage:
        collector = AttributeCollector(SqlIdentitySource(db))
        subject = await collector.collect_subject(user_id)
        environment = await collector.collect_environment({"ip": "10.0.0.1"})
    """

    def __init__(
        self,
        identities: IdentitySource,
        settings: EvaluationSettings | None = None,
        clock: Callable[[], datetime] = utc_now,
        logger: Any | None = None,
    ):
        self.identities = identities
        self.settings = settings or EvaluationSettings()
        self.clock = clock
        self.logger = logger or structlog.get_logger(__name__)

    async def collect_subject(
        self,
        user_id: UUID,
        cancellation: CancellationToken | None = None,
    ) -> AttributeMap:
        """
        Attributes of a user, with a synthetic ``userId`` entry.

        Raises:
            NotFoundError: if the user is missing or soft-deleted
        """
        checkpoint(cancellation)

        user = await self.identities.get_user_by_id(user_id)
        if user is None or user.is_deleted:
            raise NotFoundError("User", user_id)

        checkpoint(cancellation)
        assignments = await self.identities.get_active_user_attributes(user_id, self.clock())

        values = _coerce_assignments(assignments)
        values["userId"] = user_id

        self.logger.info("Subject attributes collected", count=len(values))
        return AttributeMap(values)

    async def collect_resource(
        self,
        resource_id: UUID,
        cancellation: CancellationToken | None = None,
    ) -> AttributeMap:
        """
        Attributes of a resource, with a synthetic ``resourceId`` entry.

        Raises:
            NotFoundError: if the resource is missing or soft-deleted
        """
        checkpoint(cancellation)

        resource = await self.identities.get_resource_with_attributes(resource_id)
        if resource is None or resource.is_deleted:
            raise NotFoundError("Resource", resource_id)

        values = _coerce_assignments(resource.attributes)
        values["resourceId"] = resource_id

        self.logger.info("Resource attributes collected", count=len(values))
        return AttributeMap(values)

    async def collect_environment(
        self,
        context: Mapping[str, Any] | None = None,
        cancellation: CancellationToken | None = None,
    ) -> AttributeMap:
        """
        Clock-derived baseline merged with the caller's context.

        Caller values win over the baseline. ``ip`` and ``geoLocation`` are
        additionally copied to ``ipAddress`` and ``location`` when not None.
        """
        checkpoint(cancellation)

        now = self.clock()
        local = to_local(now, resolve_zone(self.settings.local_timezone))

        baseline: dict[str, Any] = {
            "currentUtcDateTime": to_local(now, UTC),
            "currentLocalDateTime": local,
            "currentDate": local.replace(hour=0, minute=0, second=0, microsecond=0),
            "currentHour": Decimal(local.hour),
            "dayOfWeek": DAY_NAMES[local.weekday()],
            "dayOfWeekNumber": Decimal((local.weekday() + 1) % 7),
            "ipAddress": None,
            "location": None,
        }

        environment = AttributeMap(baseline)
        if context:
            supplied = AttributeMap(context)
            environment = environment.merged(supplied)
            mirrored = {
                target: supplied[source]
                for source, target in ENVIRONMENT_ALIASES.items()
                if supplied.get(source) is not None
            }
            if mirrored:
                environment = environment.merged(mirrored)

        self.logger.info("Environment attributes collected", count=len(environment))
        return environment
