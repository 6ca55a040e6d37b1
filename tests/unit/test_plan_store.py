"""Unit tests for PlanStore."""

import pytest

from mantras.planning.exceptions import PlanNotFoundError
from mantras.planning.models import PlanMetadata, PlanStatus
from mantras.planning.plan_store import PlanStore


@pytest.fixture
def plans() -> PlanStore:
    """Create an empty plan store."""
    return PlanStore()


@pytest.mark.unit
class TestPlanStore:
    """Tests for plan CRUD."""

    def test_create_defaults_to_active(self, plans: PlanStore) -> None:
        """Test new plans are active and keep task order."""
        plan = plans.create("Fix login", "Fix the login bug", ["t2", "t1"])

        assert plan.status == PlanStatus.ACTIVE
        assert plan.tasks == ["t2", "t1"]
        assert plan.created_at == plan.updated_at

    def test_create_with_metadata(self, plans: PlanStore) -> None:
        """Test metadata is stored."""
        plan = plans.create(
            "p", "d", [], metadata=PlanMetadata(template="generic", source_request="d")
        )
        assert plans.get(plan.id).metadata.template == "generic"

    def test_get_and_all(self, plans: PlanStore) -> None:
        """Test lookups."""
        first = plans.create("a", "", [])
        second = plans.create("b", "", [])

        assert plans.get(first.id).title == "a"
        assert plans.get("plan_missing") is None
        assert [p.id for p in plans.all()] == [first.id, second.id]
        assert len(plans) == 2

    def test_require_raises(self, plans: PlanStore) -> None:
        """Test require raises for missing ids."""
        with pytest.raises(PlanNotFoundError) as exc_info:
            plans.require("plan_missing")
        assert exc_info.value.plan_id == "plan_missing"

    def test_returned_plans_are_copies(self, plans: PlanStore) -> None:
        """Test callers cannot edit a plan's task list in place."""
        plan = plans.create("a", "", ["t1"])
        plans.get(plan.id).tasks.append("t2")

        assert plans.get(plan.id).tasks == ["t1"]

    def test_set_status(self, plans: PlanStore) -> None:
        """Test status changes stamp updated_at."""
        plan = plans.create("a", "", [])
        updated = plans.set_status(plan.id, PlanStatus.COMPLETED)

        assert updated.status == PlanStatus.COMPLETED
        assert updated.updated_at >= plan.updated_at
        assert plans.set_status("plan_missing", PlanStatus.CANCELLED) is None

    def test_delete(self, plans: PlanStore) -> None:
        """Test deletion."""
        plan = plans.create("a", "", [])

        assert plans.delete(plan.id) is True
        assert plans.delete(plan.id) is False
        assert plans.get(plan.id) is None
