"""
Tests for the Order lifecycle (stitchman.models.order).

Covers every transition, its preconditions, the status/field invariants,
void finality and the audit trail.
"""

import pytest

from stitchman.exceptions import (
    InactiveWorker,
    InvalidTransition,
    StitchError,
    WorkerNotFound,
)
from stitchman.models import Order, OrderStatus, Sewer


# ═══════════════════════════════════════════════════════════════════
# Fixtures
# ═══════════════════════════════════════════════════════════════════


@pytest.fixture
def maria(db):
    return Sewer.objects.create(name="Maria Garcia")


@pytest.fixture
def john(db):
    return Sewer.objects.create(name="John Smith")


@pytest.fixture
def order(db):
    return Order.objects.create(
        order_number="#1001",
        wallet_type="Georgetown",
        points=2,
        orderer_name="John Anderson",
    )


def assert_invariants(order):
    """Status and ownership fields must agree on a non-void order."""
    assert (order.status == OrderStatus.COMPLETED) == (order.completed_at is not None)
    assert (order.status in (OrderStatus.IN_PROGRESS, OrderStatus.COMPLETED)) == (
        order.claimed_by_id is not None
    )
    assert (order.status == OrderStatus.VOID) == (order.voided_at is not None)


# ═══════════════════════════════════════════════════════════════════
# Claim
# ═══════════════════════════════════════════════════════════════════


class TestClaim:
    def test_claim_pending(self, order, maria):
        order.claim(maria)

        assert order.status == OrderStatus.IN_PROGRESS
        assert order.claimed_by == maria
        assert order.claimed_at is not None
        assert order.completed_at is None
        assert_invariants(order)

    def test_claim_persists(self, order, maria):
        order.claim(maria)

        stored = Order.objects.get(pk=order.pk)
        assert stored.status == OrderStatus.IN_PROGRESS
        assert stored.claimed_by_id == maria.pk

    def test_claim_in_progress_rejected(self, order, maria, john):
        order.claim(maria)

        with pytest.raises(InvalidTransition) as exc:
            order.claim(john)

        assert exc.value.code == "INVALID_TRANSITION"
        assert exc.value.details["current"] == OrderStatus.IN_PROGRESS
        order.refresh_from_db()
        assert order.claimed_by == maria

    def test_claim_completed_rejected(self, order, maria):
        order.complete(maria)

        with pytest.raises(InvalidTransition):
            order.claim(maria)

    def test_claim_increments_version(self, order, maria):
        assert order.version == 0
        order.claim(maria)
        assert order.version == 1


# ═══════════════════════════════════════════════════════════════════
# Complete / Uncomplete
# ═══════════════════════════════════════════════════════════════════


class TestComplete:
    def test_complete_unclaimed_assigns_sewer(self, order, maria):
        order.complete(maria)

        assert order.status == OrderStatus.COMPLETED
        assert order.claimed_by == maria
        assert order.completed_at is not None
        # self-assign by completing: claimed and completed together
        assert order.claimed_at == order.completed_at
        assert_invariants(order)

    def test_complete_in_progress_keeps_claimed_at(self, order, maria):
        order.claim(maria)
        claimed_at = order.claimed_at

        order.complete(maria)

        assert order.claimed_at == claimed_at
        assert order.completed_at >= claimed_at

    def test_complete_by_other_sewer_takes_credit(self, order, maria, john):
        order.claim(maria)
        order.complete(john)

        assert order.claimed_by == john

    def test_complete_twice_rejected(self, order, maria):
        order.complete(maria)

        with pytest.raises(InvalidTransition):
            order.complete(maria)


class TestUncomplete:
    def test_round_trip_to_pending(self, order, maria):
        order.complete(maria)
        order.uncomplete()

        assert order.status == OrderStatus.PENDING
        assert order.claimed_by is None
        assert order.claimed_at is None
        assert order.completed_at is None
        assert order.order_number == "#1001"
        assert order.points == 2
        assert_invariants(order)

    def test_claim_then_uncomplete_rejected(self, order, maria):
        order.claim(maria)

        with pytest.raises(InvalidTransition):
            order.uncomplete()

        order.refresh_from_db()
        assert order.status == OrderStatus.IN_PROGRESS

    def test_uncomplete_pending_rejected(self, order):
        with pytest.raises(InvalidTransition):
            order.uncomplete()

    def test_uncompleted_order_can_be_claimed_again(self, order, maria, john):
        order.complete(maria)
        order.uncomplete()
        order.claim(john)

        assert order.claimed_by == john


# ═══════════════════════════════════════════════════════════════════
# Reassign
# ═══════════════════════════════════════════════════════════════════


class TestReassign:
    def test_reassign_pending_finalizes(self, order, john):
        order.reassign(john)

        assert order.status == OrderStatus.COMPLETED
        assert order.claimed_by == john
        assert order.claimed_at == order.completed_at
        assert_invariants(order)

    def test_reassign_in_progress_finalizes(self, order, maria, john):
        order.claim(maria)
        order.reassign(john)

        assert order.status == OrderStatus.COMPLETED
        assert order.claimed_by == john

    def test_reassign_completed_corrects_attribution(self, order, maria, john):
        order.complete(maria)
        previous = order.completed_at

        order.reassign(john)

        assert order.claimed_by == john
        assert order.completed_at >= previous
        assert order.claimed_at == order.completed_at
        assert order.points == 2
        assert order.order_number == "#1001"

    def test_reassign_void_rejected(self, order, john):
        order.void()

        with pytest.raises(InvalidTransition):
            order.reassign(john)


# ═══════════════════════════════════════════════════════════════════
# Void
# ═══════════════════════════════════════════════════════════════════


class TestVoid:
    @pytest.mark.parametrize("setup", ["pending", "claim", "complete"])
    def test_void_from_any_open_or_completed(self, order, maria, setup):
        if setup != "pending":
            getattr(order, setup)(maria)

        order.void()

        assert order.status == OrderStatus.VOID
        assert order.voided_at is not None
        assert order.is_terminal

    def test_void_twice_rejected(self, order):
        order.void()

        with pytest.raises(InvalidTransition):
            order.void()

    def test_void_keeps_other_fields(self, order, maria):
        order.complete(maria)
        completed_at = order.completed_at

        order.void()

        assert order.claimed_by == maria
        assert order.completed_at == completed_at

    @pytest.mark.parametrize("operation", ["claim", "complete", "reassign"])
    def test_void_is_final_for_assignments(self, order, maria, operation):
        order.void()

        with pytest.raises(InvalidTransition):
            getattr(order, operation)(maria)

    def test_void_is_final_for_uncomplete(self, order):
        order.void()

        with pytest.raises(InvalidTransition):
            order.uncomplete()

    def test_save_on_void_order_rejected(self, order):
        order.void()
        order.orderer_name = "Someone Else"

        with pytest.raises(InvalidTransition):
            order.save()

        order.refresh_from_db()
        assert order.orderer_name == "John Anderson"


# ═══════════════════════════════════════════════════════════════════
# Assignee checks
# ═══════════════════════════════════════════════════════════════════


def snapshot(order):
    order.refresh_from_db()
    return (order.status, order.claimed_by_id, order.version, order.history.count())


class TestAssignee:
    @pytest.mark.parametrize("operation", ["claim", "complete", "reassign"])
    def test_missing_sewer_rejected(self, order, operation):
        before = snapshot(order)

        with pytest.raises(WorkerNotFound):
            getattr(order, operation)(None)

        assert snapshot(order) == before
        assert_invariants(order)

    @pytest.mark.parametrize("operation", ["claim", "complete", "reassign"])
    def test_inactive_sewer_rejected(self, order, operation):
        retired = Sewer.objects.create(name="Sarah Johnson", is_active=False)
        before = snapshot(order)

        with pytest.raises(InactiveWorker):
            getattr(order, operation)(retired)

        assert snapshot(order) == before
        assert_invariants(order)

    def test_unsaved_inactive_sewer_rejected(self, order):
        with pytest.raises(InactiveWorker):
            order.claim(Sewer(name="Sarah Johnson", is_active=False))

        order.refresh_from_db()
        assert order.status == OrderStatus.PENDING

    def test_deactivated_elsewhere_is_seen(self, order, maria):
        Sewer.objects.filter(pk=maria.pk).update(is_active=False)

        with pytest.raises(InactiveWorker):
            order.complete(maria)

        order.refresh_from_db()
        assert order.status == OrderStatus.PENDING

    def test_reassign_to_inactive_keeps_claim(self, order, maria):
        order.claim(maria)
        retired = Sewer.objects.create(name="Sarah Johnson", is_active=False)

        with pytest.raises(InactiveWorker):
            order.reassign(retired)

        order.refresh_from_db()
        assert order.status == OrderStatus.IN_PROGRESS
        assert order.claimed_by == maria

    def test_sewer_by_id(self, order, maria):
        order.claim(maria.pk)

        assert order.claimed_by == maria


# ═══════════════════════════════════════════════════════════════════
# Immutability and audit
# ═══════════════════════════════════════════════════════════════════


class TestImmutableFields:
    def test_points_cannot_change(self, order):
        order.points = 10

        with pytest.raises(InvalidTransition) as exc:
            order.save()

        assert exc.value.details["field"] == "points"

    def test_order_number_cannot_change(self, order):
        order.order_number = "#9999"

        with pytest.raises(StitchError):
            order.save()

    def test_other_fields_can_change(self, order):
        order.orderer_name = "Jane Anderson"
        order.save()

        order.refresh_from_db()
        assert order.orderer_name == "Jane Anderson"


class TestHistory:
    def test_transition_writes_history(self, order, maria, django_user_model):
        manager = django_user_model.objects.create_user(username="manager")

        order.claim(maria, user=manager)

        latest = order.history.first()
        assert latest.history_type == "~"
        assert latest.history_change_reason == "claim"
        assert latest.history_user == manager
        assert latest.status == OrderStatus.IN_PROGRESS

    def test_every_transition_is_recorded(self, order, maria):
        order.complete(maria)
        order.uncomplete()
        order.void()

        reasons = list(
            order.history.order_by("history_id").values_list(
                "history_change_reason", flat=True
            )
        )
        assert reasons[1:] == ["complete", "uncomplete", "void"]

    def test_rejected_transition_writes_nothing(self, order):
        before = order.history.count()

        with pytest.raises(InvalidTransition):
            order.uncomplete()

        assert order.history.count() == before
