"""
Stitchman Service - Thin wrapper over models.

✅ LIFECYCLE LOGIC LIVES IN THE ORDER MODEL
This class resolves ids, validates the target sewer, and delegates.
Every call takes the acting user explicitly; nothing is read from
ambient session state.

Usage:
    from stitchman import stitch, StitchError

    # Lifecycle
    order = stitch.claim(order_id, sewer_id, user=request.user)
    order = stitch.complete(order_id, sewer_id)
    order = stitch.reassign(order_id, other_sewer_id, user=manager)

    # Metrics
    view = stitch.snapshot()
    rng = stitch.resolve_preset("this-week")
    ranking = stitch.summarize(view.orders, view.sewers, rng)
    calendar = stitch.daily_breakdown(view.orders, view.sewers, rng)

StaleState means another actor changed the order first: re-fetch and
retry, or report the conflict. The service never retries on its own.
"""

import logging

from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction

from stitchman.analytics import PerformanceAnalytics
from stitchman.assignment import eligible_sewers, resolve_sewer
from stitchman.dates import DateRange, resolve_preset
from stitchman.exceptions import OrderNotFound, StitchError, WorkerNotFound
from stitchman.ledger import take_snapshot
from stitchman.models import Order, OrderStatus, Sewer

logger = logging.getLogger(__name__)


class Stitch:
    """
    Main API for Stitchman (thin wrapper).

    ✅ Transitions are on the Order model!
    """

    # ══════════════════════════════════════════════════════════════
    # LIFECYCLE
    # ══════════════════════════════════════════════════════════════

    @classmethod
    def claim(cls, order_id, sewer_id, user=None) -> Order:
        """
        Sewer takes a pending order.

        Raises:
            InvalidTransition, InactiveWorker, WorkerNotFound, StaleState,
            OrderNotFound
        """
        sewer = resolve_sewer(sewer_id)
        return cls.get_order(order_id).claim(sewer, user=user)

    @classmethod
    def complete(cls, order_id, sewer_id, user=None) -> Order:
        """Claim-and-finish in one step."""
        sewer = resolve_sewer(sewer_id)
        return cls.get_order(order_id).complete(sewer, user=user)

    @classmethod
    def uncomplete(cls, order_id, user=None) -> Order:
        """Back to pending, unclaimed."""
        return cls.get_order(order_id).uncomplete(user=user)

    @classmethod
    def reassign(cls, order_id, sewer_id, user=None) -> Order:
        """
        Hand the order to another sewer. Always finalizes it as completed
        under the new sewer's credit.
        """
        sewer = resolve_sewer(sewer_id)
        return cls.get_order(order_id).reassign(sewer, user=user)

    @classmethod
    def void_order(cls, order_id, user=None) -> Order:
        """Void the order (terminal)."""
        return cls.get_order(order_id).void(user=user)

    # ══════════════════════════════════════════════════════════════
    # INGESTION
    # ══════════════════════════════════════════════════════════════

    @classmethod
    def create_order(
        cls,
        order_number: str,
        points: int,
        wallet_type: str = "",
        orderer_name: str = "",
        total_wallets: int = 0,
        total_accessories: int = 0,
        external_ref: str = "",
        metadata: dict | None = None,
    ) -> Order:
        """
        Register an incoming order as pending.

        Points come from the catalog upstream and are fixed from here on.

        Raises:
            StitchError: INVALID_POINTS or DUPLICATE_ORDER
        """
        try:
            value = int(points)
        except (TypeError, ValueError):
            raise StitchError("INVALID_POINTS", points=points) from None
        if value < 0:
            raise StitchError("INVALID_POINTS", points=points)

        try:
            with transaction.atomic():
                order = Order.objects.create(
                    order_number=order_number,
                    points=value,
                    wallet_type=wallet_type,
                    orderer_name=orderer_name,
                    total_wallets=total_wallets,
                    total_accessories=total_accessories,
                    external_ref=external_ref,
                    metadata=metadata or {},
                    status=OrderStatus.PENDING,
                )
        except IntegrityError:
            logger.warning(
                f"Order {order_number} already exists",
                extra={"order_number": order_number},
            )
            raise StitchError("DUPLICATE_ORDER", order_number=order_number)

        logger.info(
            f"Created order {order.order_number}",
            extra={
                "order": order.pk,
                "order_number": order.order_number,
                "points": order.points,
            },
        )
        return order

    # ══════════════════════════════════════════════════════════════
    # SEWERS
    # ══════════════════════════════════════════════════════════════

    @classmethod
    def enlist_sewer(cls, name: str) -> Sewer:
        """Add a sewer, or restore a deactivated one with the same name."""
        return Sewer.enlist(name)

    @classmethod
    def deactivate_sewer(cls, sewer_id) -> Sewer:
        sewer = cls.get_sewer(sewer_id)
        sewer.deactivate()
        return sewer

    @classmethod
    def activate_sewer(cls, sewer_id) -> Sewer:
        sewer = cls.get_sewer(sewer_id)
        sewer.activate()
        return sewer

    # ══════════════════════════════════════════════════════════════
    # METRICS
    # ══════════════════════════════════════════════════════════════

    @classmethod
    def summarize(cls, orders, sewers, date_range: DateRange):
        return PerformanceAnalytics.summarize(orders, sewers, date_range)

    @classmethod
    def daily_breakdown(cls, orders, sewers, date_range: DateRange):
        return PerformanceAnalytics.daily_breakdown(orders, sewers, date_range)

    @classmethod
    def dashboard(cls, orders, sewers):
        return PerformanceAnalytics.dashboard(orders, sewers)

    @classmethod
    def sewer_overview(cls, orders, sewer, date_range: DateRange):
        return PerformanceAnalytics.sewer_overview(orders, sewer, date_range)

    @classmethod
    def resolve_preset(cls, name: str, now=None, start=None, end=None) -> DateRange:
        return resolve_preset(name, now=now, start=start, end=end)

    # ══════════════════════════════════════════════════════════════
    # QUERIES
    # ══════════════════════════════════════════════════════════════

    @classmethod
    def get_order(cls, order_id) -> Order:
        """Fresh read of one order by pk or UUID."""
        lookup = {"uuid": order_id} if not isinstance(order_id, int) else {"pk": order_id}
        try:
            return Order.objects.select_related("claimed_by").get(**lookup)
        except (Order.DoesNotExist, ValidationError, ValueError, TypeError):
            # malformed UUID strings surface as ValidationError
            raise OrderNotFound(order=str(order_id))

    @classmethod
    def get_sewer(cls, sewer_id) -> Sewer:
        try:
            return Sewer.objects.get(pk=int(sewer_id))
        except (Sewer.DoesNotExist, TypeError, ValueError):
            raise WorkerNotFound(sewer=sewer_id)

    @classmethod
    def list_orders(cls) -> list[Order]:
        return list(Order.objects.select_related("claimed_by").order_by("-created_at", "-pk"))

    @classmethod
    def get_open(cls) -> list[Order]:
        """Pending and in-progress orders, oldest first."""
        return list(Order.objects.open().order_by("created_at", "pk"))

    @classmethod
    def eligible_sewers(cls) -> list[Sewer]:
        return list(eligible_sewers())

    @classmethod
    def snapshot(cls):
        return take_snapshot()
