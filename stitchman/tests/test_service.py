"""
Tests for the Stitch service (stitchman.service).
"""

from datetime import date, datetime

import pytest
from django.utils import timezone

from stitchman import StitchError, stitch
from stitchman.exceptions import (
    DuplicateSewer,
    InactiveWorker,
    InvalidTransition,
    OrderNotFound,
    WorkerNotFound,
)
from stitchman.models import Order, OrderStatus


# ═══════════════════════════════════════════════════════════════════
# Fixtures
# ═══════════════════════════════════════════════════════════════════


@pytest.fixture
def maria(db):
    return stitch.enlist_sewer("Maria Garcia")


@pytest.fixture
def john(db):
    return stitch.enlist_sewer("John Smith")


@pytest.fixture
def order(db):
    return stitch.create_order(
        order_number="#1001",
        points=2,
        wallet_type="Georgetown",
        orderer_name="John Anderson",
        total_wallets=1,
        external_ref="shop-4471",
        metadata={"line_items": [{"title": "Georgetown"}]},
    )


# ═══════════════════════════════════════════════════════════════════
# Ingestion
# ═══════════════════════════════════════════════════════════════════


class TestCreateOrder:
    def test_created_pending(self, order):
        assert order.status == OrderStatus.PENDING
        assert order.points == 2
        assert order.external_ref == "shop-4471"
        assert order.metadata["line_items"][0]["title"] == "Georgetown"
        assert order.claimed_by is None

    @pytest.mark.parametrize("points", [-1, None, "abc", "2.5"])
    def test_invalid_points(self, db, points):
        with pytest.raises(StitchError) as exc:
            stitch.create_order(order_number="#1009", points=points)

        assert exc.value.code == "INVALID_POINTS"
        assert not Order.objects.exists()

    def test_zero_points_allowed(self, db):
        assert stitch.create_order(order_number="#1010", points=0).points == 0

    def test_numeric_string_points(self, db):
        assert stitch.create_order(order_number="#1011", points="3").points == 3

    def test_duplicate_order_number(self, order):
        with pytest.raises(StitchError) as exc:
            stitch.create_order(order_number="#1001", points=5)

        assert exc.value.code == "DUPLICATE_ORDER"
        assert Order.objects.get(order_number="#1001").points == 2


# ═══════════════════════════════════════════════════════════════════
# Lifecycle
# ═══════════════════════════════════════════════════════════════════


class TestLifecycle:
    def test_claim_by_uuid_and_sewer_id(self, order, maria):
        claimed = stitch.claim(order.uuid, maria.pk)

        assert claimed.status == OrderStatus.IN_PROGRESS
        assert claimed.claimed_by == maria

    def test_claim_by_uuid_string(self, order, maria):
        claimed = stitch.claim(str(order.uuid), maria.pk)

        assert claimed.claimed_by == maria

    def test_claim_by_pk(self, order, maria):
        assert stitch.claim(order.pk, maria.pk).status == OrderStatus.IN_PROGRESS

    def test_complete_then_uncomplete(self, order, maria):
        stitch.complete(order.uuid, maria.pk)
        reopened = stitch.uncomplete(order.uuid)

        assert reopened.status == OrderStatus.PENDING
        assert reopened.claimed_by is None

    def test_reassign(self, order, maria, john):
        stitch.complete(order.uuid, maria.pk)

        reassigned = stitch.reassign(order.uuid, john.pk)

        assert reassigned.status == OrderStatus.COMPLETED
        assert reassigned.claimed_by == john

    def test_void_twice(self, order):
        stitch.void_order(order.uuid)

        with pytest.raises(InvalidTransition):
            stitch.void_order(order.uuid)

    def test_records_acting_user(self, order, maria, django_user_model):
        manager = django_user_model.objects.create_user(username="manager")

        stitch.void_order(order.uuid, user=manager)

        assert order.history.first().history_user == manager

    def test_inactive_sewer_rejected(self, order, maria):
        stitch.deactivate_sewer(maria.pk)

        with pytest.raises(InactiveWorker):
            stitch.claim(order.uuid, maria.pk)

        order.refresh_from_db()
        assert order.status == OrderStatus.PENDING

    def test_unknown_sewer(self, order):
        with pytest.raises(WorkerNotFound):
            stitch.complete(order.uuid, 9999)

    def test_unknown_order(self, maria):
        with pytest.raises(OrderNotFound):
            stitch.claim("00000000-0000-0000-0000-000000000000", maria.pk)

    def test_malformed_order_id(self, maria):
        with pytest.raises(OrderNotFound):
            stitch.claim("not-a-uuid", maria.pk)


# ═══════════════════════════════════════════════════════════════════
# Sewers
# ═══════════════════════════════════════════════════════════════════


class TestSewers:
    def test_enlist_duplicate(self, maria):
        with pytest.raises(DuplicateSewer):
            stitch.enlist_sewer("Maria Garcia")

    def test_deactivate_and_restore(self, maria):
        stitch.deactivate_sewer(maria.pk)
        assert stitch.eligible_sewers() == []

        stitch.activate_sewer(maria.pk)
        assert stitch.eligible_sewers() == [maria]

    def test_get_unknown_sewer(self, db):
        with pytest.raises(WorkerNotFound):
            stitch.get_sewer(9999)


# ═══════════════════════════════════════════════════════════════════
# Queries and metrics
# ═══════════════════════════════════════════════════════════════════


class TestQueries:
    def test_get_open_excludes_closed(self, order, maria):
        other = stitch.create_order(order_number="#1002", points=5)
        done = stitch.create_order(order_number="#1003", points=3)
        stitch.complete(done.uuid, maria.pk)

        assert stitch.get_open() == [order, other]

    def test_list_orders_includes_void(self, order):
        stitch.void_order(order.uuid)

        assert stitch.list_orders() == [order]


class TestMetrics:
    def test_summarize_from_snapshot(self, order, maria, john):
        stitch.complete(order.uuid, maria.pk)
        rng = stitch.resolve_preset("today")

        ledger = stitch.snapshot()
        summaries = stitch.summarize(ledger.orders, ledger.sewers, rng)

        assert [(s.sewer_name, s.total_points, s.rank) for s in summaries] == [
            ("Maria Garcia", 2, 1),
            ("John Smith", 0, 2),
        ]

    def test_daily_breakdown_from_snapshot(self, order, maria):
        Order.objects.filter(pk=order.pk).update(
            status=OrderStatus.COMPLETED,
            claimed_by=maria,
            claimed_at=timezone.make_aware(datetime(2024, 3, 11, 9, 0)),
            completed_at=timezone.make_aware(datetime(2024, 3, 11, 10, 0)),
        )
        rng = stitch.resolve_preset("custom", start=date(2024, 3, 10), end=date(2024, 3, 12))

        ledger = stitch.snapshot()
        buckets = stitch.daily_breakdown(ledger.orders, ledger.sewers, rng)

        assert [b.total_points for b in buckets] == [0, 2, 0]

    def test_dashboard(self, order, maria):
        stitch.create_order(order_number="#1002", points=5)

        ledger = stitch.snapshot()
        stats = stitch.dashboard(ledger.orders, ledger.sewers)

        assert stats.active_orders == 2
        assert stats.open_points == 7
        assert stats.estimated_hours == 2
        assert stats.active_sewers == 1

    def test_sewer_overview(self, order, maria):
        stitch.claim(order.uuid, maria.pk)

        ledger = stitch.snapshot()
        overview = stitch.sewer_overview(
            ledger.orders, ledger.sewers[0], stitch.resolve_preset("today")
        )

        assert overview.in_progress_count == 1
        assert overview.summary.completed_count == 0
