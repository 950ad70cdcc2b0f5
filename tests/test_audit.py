"""
Tests for the access log service and the SQL repositories.
"""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest

from abac.models import PolicyEffect
from abac.repositories import PolicyRepository, SqlIdentitySource
from abac.services import AccessLogService


@pytest.mark.asyncio
class TestAccessLogService:
    async def test_creates_entry(self, db, factory):
        user = await factory.user()
        service = AccessLogService(db)

        entry = await service.log_access_evaluation(
            user_id=user.id,
            result=" Permit ",
            reason="Decision Permit under DenyOverrides; applicable policies: 1.",
            ip_address="10.0.0.7",
        )

        assert entry.id is not None
        assert entry.result == "Permit"
        assert entry.ip_address == "10.0.0.7"
        assert entry.created_at is not None

    async def test_blank_result_is_error(self, db, factory):
        user = await factory.user()
        service = AccessLogService(db)

        entry = await service.log_access_evaluation(user_id=user.id, result="  ")

        assert entry.result == "Error"

    async def test_list_for_user(self, db, factory):
        user = await factory.user()
        other = await factory.user()
        service = AccessLogService(db)
        await service.log_access_evaluation(user_id=user.id, result="Deny")
        await service.log_access_evaluation(user_id=other.id, result="Permit")

        logs = await service.list_for_user(user.id)

        assert [log.result for log in logs] == ["Deny"]


@pytest.mark.asyncio
class TestPolicyRepository:
    async def test_active_policies_ordered_by_priority(self, db, factory):
        condition = ("Subject", "role", "Equals", "admin")
        await factory.policy("low", priority=1, conditions=[condition])
        await factory.policy("high", priority=90, conditions=[condition])
        await factory.policy("off", priority=50, conditions=[condition], is_active=False)

        policies = await PolicyRepository(db).get_active_policies()

        assert [policy.name for policy in policies] == ["high", "low"]
        assert policies[0].conditions[0].attribute_key == "role"

    async def test_soft_deleted_policies_are_hidden(self, db, factory):
        policy = await factory.policy("gone", conditions=[("Subject", "role", "Equals", "admin")])
        policy.deleted_at = datetime.now(timezone.utc)
        await db.commit()

        assert await PolicyRepository(db).get_active_policies() == []

    async def test_policies_for_action(self, db, factory):
        approve = await factory.action("approve")
        delete = await factory.action("delete")
        await factory.policy("approvers", PolicyEffect.PERMIT, actions=[approve])
        await factory.policy("deleters", PolicyEffect.DENY, actions=[delete, approve])
        await factory.policy("others", actions=[delete])

        policies = await PolicyRepository(db).get_active_policies_for_action(approve.id)

        assert sorted(policy.name for policy in policies) == ["approvers", "deleters"]
        codes = {link.action.code for link in policies[0].action_links}
        assert "approve" in codes


@pytest.mark.asyncio
class TestSqlIdentitySource:
    async def test_validity_window(self, db, factory):
        department = await factory.attribute("department")
        team = await factory.attribute("team")
        badge = await factory.attribute("badge")
        user = await factory.user()
        now = datetime.now(timezone.utc)
        await factory.assign(user, department, "Finance")
        await factory.assign(user, team, "Ops", valid_from=now - timedelta(days=1), valid_to=now + timedelta(days=1))
        await factory.assign(user, badge, "Temp", valid_from=now + timedelta(days=1))

        assignments = await SqlIdentitySource(db).get_active_user_attributes(user.id, now)

        assert sorted(a.attribute.key for a in assignments) == ["department", "team"]

    async def test_lookups(self, db, factory):
        classification = await factory.attribute("classification")
        resource = await factory.resource(attributes={classification: "secret"})
        approve = await factory.action("approve")
        identities = SqlIdentitySource(db)

        loaded = await identities.get_resource_with_attributes(resource.id)

        assert loaded.attributes[0].attribute.key == "classification"
        assert (await identities.get_action_by_id(approve.id)).code == "approve"
        assert await identities.get_user_by_id(uuid4()) is None
