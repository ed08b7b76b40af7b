"""
Stitchman Ledger.

Read side of the order ledger: point-in-time snapshots for the analytics,
and a LedgerView that re-fetches a whole snapshot after any change
notification. The view never patches its copy incrementally.

Usage:
    view = LedgerView()
    summaries = stitch.summarize(view.orders, view.sewers, rng)
    # ... someone claims an order → order_changed fires → next read reloads
"""

import logging
import threading

from django.db import transaction
from django.utils import timezone

from stitchman.models import Order, Sewer
from stitchman.results import LedgerSnapshot, OrderSnapshot, SewerSnapshot
from stitchman.signals import order_changed, sewer_changed

logger = logging.getLogger(__name__)


def take_snapshot() -> LedgerSnapshot:
    """
    Copy every order and sewer into frozen dataclasses.

    Each order is copied from a single row read, so a snapshot never holds
    a mix of pre- and post-transition fields for one order.
    """
    with transaction.atomic():
        orders = tuple(
            OrderSnapshot.from_order(order)
            for order in Order.objects.order_by("-created_at", "-pk")
        )
        sewers = tuple(
            SewerSnapshot.from_sewer(sewer) for sewer in Sewer.objects.order_by("name")
        )

    return LedgerSnapshot(orders=orders, sewers=sewers, taken_at=timezone.now())


class LedgerView:
    """
    Lazily refreshed snapshot holder.

    Subscribes to ``order_changed`` and ``sewer_changed``; any notification
    marks the view stale and the next read loads a fresh snapshot.
    """

    def __init__(self, loader=take_snapshot):
        self._loader = loader
        self._snapshot: LedgerSnapshot | None = None
        self._stale = True
        self._lock = threading.Lock()
        self.reloads = 0

        order_changed.connect(self._mark_stale)
        sewer_changed.connect(self._mark_stale)

    def _mark_stale(self, sender, **kwargs):
        self._stale = True

    @property
    def is_stale(self) -> bool:
        return self._stale

    @property
    def snapshot(self) -> LedgerSnapshot:
        with self._lock:
            if self._stale or self._snapshot is None:
                # Cleared before loading: a change during the load re-marks it
                self._stale = False
                self._snapshot = self._loader()
                self.reloads += 1
                logger.debug(
                    "Ledger snapshot reloaded",
                    extra={
                        "orders": len(self._snapshot.orders),
                        "sewers": len(self._snapshot.sewers),
                    },
                )
            return self._snapshot

    @property
    def orders(self) -> tuple[OrderSnapshot, ...]:
        return self.snapshot.orders

    @property
    def sewers(self) -> tuple[SewerSnapshot, ...]:
        return self.snapshot.sewers

    def close(self):
        """Stop listening for change notifications."""
        order_changed.disconnect(self._mark_stale)
        sewer_changed.disconnect(self._mark_stale)
