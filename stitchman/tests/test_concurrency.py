"""
Tests for optimistic concurrency on order transitions.

Each test loads two copies of the same row and writes through them one
after the other, in a single thread. The second write still carries the
status and version it read before the first write landed, so it loses
the compare-and-swap and gets StaleState rather than overwriting the
first write.
"""

import pytest

from stitchman.exceptions import InvalidTransition, StaleState
from stitchman.models import Order, OrderStatus, Sewer


@pytest.fixture
def maria(db):
    return Sewer.objects.create(name="Maria Garcia")


@pytest.fixture
def john(db):
    return Sewer.objects.create(name="John Smith")


@pytest.fixture
def order(db):
    return Order.objects.create(order_number="#1002", wallet_type="Rio Grande", points=5)


def two_copies(order):
    return Order.objects.get(pk=order.pk), Order.objects.get(pk=order.pk)


class TestConcurrentClaims:
    def test_exactly_one_claim_wins(self, order, maria, john):
        """Both copies read the order as pending; the later claim is rejected."""
        first, second = two_copies(order)

        first.claim(maria)
        with pytest.raises(StaleState) as exc:
            second.claim(john)

        assert exc.value.code == "STALE_STATE"
        assert exc.value.retryable is True

        order.refresh_from_db()
        assert order.status == OrderStatus.IN_PROGRESS
        assert order.claimed_by == maria

    def test_loser_sees_invalid_transition_after_refetch(self, order, maria, john):
        first, second = two_copies(order)
        first.claim(maria)

        with pytest.raises(StaleState):
            second.claim(john)

        second.refresh_from_db()
        with pytest.raises(InvalidTransition):
            second.claim(john)

    def test_stale_write_leaves_no_history(self, order, maria, john):
        first, second = two_copies(order)
        first.claim(maria)
        rows = order.history.count()

        with pytest.raises(StaleState):
            second.claim(john)

        assert order.history.count() == rows


class TestConcurrentMixedOperations:
    def test_complete_after_concurrent_void(self, order, maria):
        first, second = two_copies(order)

        first.void()
        with pytest.raises(StaleState):
            second.complete(maria)

        order.refresh_from_db()
        assert order.status == OrderStatus.VOID
        assert order.completed_at is None

    def test_reassign_races_uncomplete(self, order, maria, john):
        order.complete(maria)
        first, second = two_copies(order)

        first.uncomplete()
        with pytest.raises(StaleState):
            second.reassign(john)

        order.refresh_from_db()
        assert order.status == OrderStatus.PENDING
        assert order.claimed_by is None

    def test_same_status_different_version_is_stale(self, order, maria, john):
        """A row back in its old status after other writes is still stale."""
        outdated = Order.objects.get(pk=order.pk)

        order.complete(maria)
        order.uncomplete()
        assert order.status == OrderStatus.PENDING

        with pytest.raises(StaleState):
            outdated.claim(john)


class TestConditionalUpdate:
    def test_matching_status_updates(self, order):
        assert Order.objects.conditional_update(
            order.pk, OrderStatus.PENDING, orderer_name="Emily Chen"
        )

        order.refresh_from_db()
        assert order.orderer_name == "Emily Chen"
        assert order.version == 1

    def test_mismatched_status_does_nothing(self, order):
        assert not Order.objects.conditional_update(
            order.pk, OrderStatus.COMPLETED, orderer_name="Emily Chen"
        )

        order.refresh_from_db()
        assert order.orderer_name == ""
        assert order.version == 0

    def test_mismatched_version_does_nothing(self, order):
        assert not Order.objects.conditional_update(
            order.pk, OrderStatus.PENDING, expected_version=7, orderer_name="X"
        )

    def test_same_expectation_applies_once(self, order):
        assert Order.objects.conditional_update(
            order.pk, OrderStatus.PENDING, expected_version=0, orderer_name="Emily Chen"
        )
        assert not Order.objects.conditional_update(
            order.pk, OrderStatus.PENDING, expected_version=0, orderer_name="John Anderson"
        )

        order.refresh_from_db()
        assert order.orderer_name == "Emily Chen"
        assert order.version == 1
