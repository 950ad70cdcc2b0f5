"""
Tests for attribute collection.
"""

from datetime import datetime, timezone
from decimal import Decimal
from uuid import uuid4

import pytest

from abac.core.access.collector import AttributeCollector
from abac.core.access.conditions import ConditionEvaluator
from abac.core.access.context import EvaluationContext
from abac.core.cancellation import CancellationToken
from abac.core.config import EvaluationSettings
from abac.core.exceptions import EvaluationCancelledError, NotFoundError
from abac.models import Attribute, AttributeType, Resource, ResourceAttribute, User, UserAttribute

from conftest import make_condition

# Wednesday
FIXED_NOW = datetime(2024, 1, 17, 22, 30, tzinfo=timezone.utc)


def fixed_clock() -> datetime:
    return FIXED_NOW


def make_attribute(key: str, type: AttributeType = AttributeType.STRING) -> Attribute:
    return Attribute(id=uuid4(), name=key, key=key, type=type)


@pytest.fixture
def collector(identities) -> AttributeCollector:
    settings = EvaluationSettings(local_timezone="Asia/Tokyo")
    return AttributeCollector(identities, settings=settings, clock=fixed_clock)


@pytest.fixture
def user(identities) -> User:
    user = User(id=uuid4(), email="ana@example.com", name="Ana", is_active=True)
    identities.users[user.id] = user
    identities.user_attributes[user.id] = [
        UserAttribute(id=uuid4(), attribute=make_attribute("department"), value="Finance"),
        UserAttribute(id=uuid4(), attribute=make_attribute("level", AttributeType.NUMBER), value="5"),
        UserAttribute(id=uuid4(), attribute=make_attribute("mfa", AttributeType.BOOLEAN), value="true"),
        UserAttribute(id=uuid4(), attribute=make_attribute("hired", AttributeType.DATETIME), value="someday"),
    ]
    return user


@pytest.mark.asyncio
class TestCollectSubject:
    async def test_coerces_by_declared_type(self, collector, user):
        subject = await collector.collect_subject(user.id)

        assert subject["department"] == "Finance"
        assert subject["level"] == Decimal(5)
        assert subject["mfa"] is True
        assert subject["hired"] == "someday"

    async def test_injects_user_id(self, collector, user):
        subject = await collector.collect_subject(user.id)

        assert subject["userId"] == user.id

    async def test_uses_clock_for_validity(self, collector, identities, user):
        await collector.collect_subject(user.id)

        assert identities.as_of == [FIXED_NOW]

    async def test_missing_user(self, collector):
        missing = uuid4()

        with pytest.raises(NotFoundError) as exc_info:
            await collector.collect_subject(missing)

        assert exc_info.value.entity == "User"
        assert exc_info.value.key == missing

    async def test_soft_deleted_user(self, collector, user):
        user.deleted_at = FIXED_NOW

        with pytest.raises(NotFoundError):
            await collector.collect_subject(user.id)

    async def test_cancelled(self, collector, user):
        token = CancellationToken()
        token.cancel()

        with pytest.raises(EvaluationCancelledError):
            await collector.collect_subject(user.id, token)


@pytest.mark.asyncio
class TestCollectResource:
    async def test_attributes_and_resource_id(self, collector, identities):
        resource = Resource(
            id=uuid4(),
            name="Q1 report",
            type="document",
            attributes=[
                ResourceAttribute(id=uuid4(), attribute=make_attribute("classification"), value="internal"),
                ResourceAttribute(id=uuid4(), attribute=make_attribute("pages", AttributeType.NUMBER), value=""),
            ],
        )
        identities.resources[resource.id] = resource

        attributes = await collector.collect_resource(resource.id)

        assert attributes["classification"] == "internal"
        assert attributes["pages"] == ""
        assert attributes["resourceId"] == resource.id

    async def test_missing_resource(self, collector):
        with pytest.raises(NotFoundError) as exc_info:
            await collector.collect_resource(uuid4())

        assert exc_info.value.entity == "Resource"


@pytest.mark.asyncio
class TestCollectEnvironment:
    async def test_baseline(self, collector):
        environment = await collector.collect_environment()

        # 22:30 UTC is 07:30 next day in Tokyo
        assert environment["currentUtcDateTime"] == FIXED_NOW
        assert environment["currentLocalDateTime"] == FIXED_NOW
        assert environment["currentLocalDateTime"].utcoffset().total_seconds() == 9 * 3600
        assert environment["currentDate"].day == 18
        assert environment["currentDate"].hour == 0
        assert environment["currentHour"] == Decimal(7)
        assert environment["dayOfWeek"] == "Thursday"
        assert environment["dayOfWeekNumber"] == Decimal(4)
        assert "ipAddress" in environment and environment["ipAddress"] is None
        assert "location" in environment and environment["location"] is None

    async def test_sunday_is_zero(self, identities):
        collector = AttributeCollector(
            identities,
            settings=EvaluationSettings(local_timezone="UTC"),
            clock=lambda: datetime(2024, 1, 21, 9, 0, tzinfo=timezone.utc),
        )

        environment = await collector.collect_environment()

        assert environment["dayOfWeek"] == "Sunday"
        assert environment["dayOfWeekNumber"] == Decimal(0)

    async def test_caller_values_win(self, collector):
        environment = await collector.collect_environment({"currentHour": 3, "channel": "mobile"})

        assert environment["currentHour"] == Decimal(3)
        assert environment["channel"] == "mobile"

    async def test_ip_and_geolocation_are_mirrored(self, collector):
        environment = await collector.collect_environment({"ip": "10.0.0.7", "geoLocation": "Tokyo"})

        assert environment["ipAddress"] == "10.0.0.7"
        assert environment["location"] == "Tokyo"
        assert environment["ip"] == "10.0.0.7"

    async def test_null_ip_is_not_mirrored(self, collector):
        environment = await collector.collect_environment({"ip": None, "ipAddress": "192.168.1.1"})

        assert environment["ipAddress"] == "192.168.1.1"

    async def test_local_dates_match_operands_in_configured_zone(self, identities):
        collector = AttributeCollector(
            identities,
            settings=EvaluationSettings(local_timezone="Asia/Tokyo"),
            clock=lambda: datetime(2024, 6, 1, 20, 0, tzinfo=timezone.utc),
        )
        conditions = ConditionEvaluator()

        context = EvaluationContext(environment=await collector.collect_environment())

        def holds(key, operator, expected):
            return conditions.evaluate(make_condition("Environment", key, operator, expected), context)

        # 20:00 UTC on June 1st is 05:00 on June 2nd in Tokyo
        assert holds("currentDate", "Equals", "2024-06-02")
        assert not holds("currentDate", "Equals", "2024-06-01")
        assert holds("currentLocalDateTime", "GreaterThan", "2024-06-02T04:00")
        assert holds("currentLocalDateTime", "LessThan", "2024-06-02T06:00")
        assert holds("currentUtcDateTime", "Equals", "2024-06-01T20:00")
