"""
Pytest fixtures for testing.

Provides:
- Async database session on an in-memory SQLite database
- Factory for users, attributes, resources, actions and policies
- In-memory implementations of the engine's collaborator interfaces
- Builders for transient (unsaved) policies used by pure unit tests
"""

from collections.abc import Sequence
from datetime import datetime
from typing import AsyncGenerator
from uuid import UUID, uuid4

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool

from abac.core.access.interfaces import AuditSink, IdentitySource, PolicySource
from abac.models import (
    Action,
    Attribute,
    AttributeType,
    Policy,
    PolicyAction,
    PolicyCondition,
    PolicyEffect,
    Resource,
    ResourceAttribute,
    User,
    UserAttribute,
)
from abac.models.database import create_session_factory, drop_db, init_db

# Test database URL (SQLite in-memory for speed)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture(scope="function")
async def db_engine():
    """Create test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    await init_db(engine)

    yield engine

    await drop_db(engine)

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db(db_engine) -> AsyncGenerator[AsyncSession, None]:
    """Database session; each test gets a fresh in-memory database."""
    session_factory = create_session_factory(db_engine)

    async with session_factory() as session:
        yield session
        await session.rollback()


# ============ Factory Fixtures ============


ConditionTuple = tuple[str, str, str, str]


class AbacFactory:
    """Factory for creating persisted test data."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _save(self, entity):
        self.db.add(entity)
        await self.db.commit()
        await self.db.refresh(entity)
        return entity

    async def attribute(self, key: str, type: AttributeType = AttributeType.STRING) -> Attribute:
        return await self._save(Attribute(name=key, key=key, type=type))

    async def user(
        self,
        email: str | None = None,
        name: str = "Test User",
        attributes: dict[Attribute, str] | None = None,
    ) -> User:
        user = await self._save(User(
            email=email or f"test-{uuid4().hex[:8]}@example.com",
            name=name,
        ))
        for attribute, value in (attributes or {}).items():
            await self.assign(user, attribute, value)
        return user

    async def assign(
        self,
        user: User,
        attribute: Attribute,
        value: str,
        valid_from: datetime | None = None,
        valid_to: datetime | None = None,
    ) -> UserAttribute:
        return await self._save(UserAttribute(
            user_id=user.id,
            attribute_id=attribute.id,
            value=value,
            valid_from=valid_from,
            valid_to=valid_to,
        ))

    async def resource(
        self,
        name: str = "Report",
        attributes: dict[Attribute, str] | None = None,
    ) -> Resource:
        return await self._save(Resource(
            name=name,
            type="document",
            attributes=[
                ResourceAttribute(attribute=attribute, value=value)
                for attribute, value in (attributes or {}).items()
            ],
        ))

    async def action(self, code: str = "approve", name: str | None = None) -> Action:
        return await self._save(Action(code=code, name=name or code.title()))

    async def policy(
        self,
        name: str,
        effect: PolicyEffect = PolicyEffect.PERMIT,
        priority: int = 0,
        conditions: Sequence[ConditionTuple] = (),
        actions: Sequence[Action] = (),
        is_active: bool = True,
    ) -> Policy:
        return await self._save(Policy(
            name=name,
            effect=effect,
            priority=priority,
            is_active=is_active,
            conditions=[
                PolicyCondition(
                    attribute_source=source,
                    attribute_key=key,
                    operator=operator,
                    expected_value=expected,
                )
                for source, key, operator, expected in conditions
            ],
            action_links=[PolicyAction(action=action) for action in actions],
        ))


@pytest_asyncio.fixture
async def factory(db: AsyncSession) -> AbacFactory:
    """Fixture that provides AbacFactory."""
    return AbacFactory(db)


# ============ Transient Builders ============


def make_condition(source: str, key: str, operator: str, expected: str = "") -> PolicyCondition:
    """Unsaved condition (ids are set explicitly; defaults only apply on flush)."""
    return PolicyCondition(
        id=uuid4(),
        attribute_source=source,
        attribute_key=key,
        operator=operator,
        expected_value=expected,
    )


def make_action(code: str = "approve") -> Action:
    return Action(id=uuid4(), code=code, name=code.title())


def make_policy(
    name: str,
    effect: PolicyEffect = PolicyEffect.PERMIT,
    priority: int = 0,
    conditions: Sequence[PolicyCondition] = (),
    actions: Sequence[Action] = (),
) -> Policy:
    return Policy(
        id=uuid4(),
        name=name,
        effect=effect,
        priority=priority,
        is_active=True,
        conditions=list(conditions),
        action_links=[PolicyAction(id=uuid4(), action=action, action_id=action.id) for action in actions],
    )


# ============ Mock Implementations ============


class InMemoryPolicySource(PolicySource):
    """Policy source over a fixed list, ordered like the SQL repository."""

    def __init__(self, policies: Sequence[Policy] = ()):
        self.policies = list(policies)
        self.calls: list[tuple[str, UUID | None]] = []

    def _active(self) -> list[Policy]:
        active = [policy for policy in self.policies if policy.is_active]
        return sorted(active, key=lambda policy: -policy.priority)

    async def get_active_policies(self) -> Sequence[Policy]:
        self.calls.append(("all", None))
        return self._active()

    async def get_active_policies_for_action(self, action_id: UUID) -> Sequence[Policy]:
        self.calls.append(("action", action_id))
        return [
            policy
            for policy in self._active()
            if any(link.action_id == action_id for link in policy.action_links)
        ]


class InMemoryIdentitySource(IdentitySource):
    """Identity source over dictionaries keyed by id."""

    def __init__(self):
        self.users: dict[UUID, User] = {}
        self.user_attributes: dict[UUID, list[UserAttribute]] = {}
        self.resources: dict[UUID, Resource] = {}
        self.actions: dict[UUID, Action] = {}
        self.as_of: list[datetime] = []

    async def get_user_by_id(self, user_id: UUID) -> User | None:
        return self.users.get(user_id)

    async def get_active_user_attributes(
        self,
        user_id: UUID,
        as_of: datetime,
    ) -> Sequence[UserAttribute]:
        self.as_of.append(as_of)
        return self.user_attributes.get(user_id, [])

    async def get_resource_with_attributes(self, resource_id: UUID) -> Resource | None:
        return self.resources.get(resource_id)

    async def get_action_by_id(self, action_id: UUID) -> Action | None:
        return self.actions.get(action_id)


class RecordingAuditSink(AuditSink):
    """Audit sink that keeps every record in memory."""

    def __init__(self):
        self.records: list[dict] = []

    async def log_access_evaluation(self, **record) -> dict:
        self.records.append(record)
        return record

    def get_last(self) -> dict | None:
        return self.records[-1] if self.records else None


class FailingAuditSink(AuditSink):
    """Audit sink whose storage is down."""

    def __init__(self):
        self.attempts = 0

    async def log_access_evaluation(self, **record) -> None:
        self.attempts += 1
        raise RuntimeError("audit storage unavailable")


@pytest.fixture
def audit_sink() -> RecordingAuditSink:
    return RecordingAuditSink()


@pytest.fixture
def identities() -> InMemoryIdentitySource:
    return InMemoryIdentitySource()
