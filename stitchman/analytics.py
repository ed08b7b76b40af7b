"""
Stitchman Analytics.

Performance metrics derived from a ledger snapshot: per-sewer totals and
rankings, per-day buckets, and the manager dashboard counters.

Everything here is a pure function of its inputs. Orders may be
OrderSnapshot instances or Order models, sewers SewerSnapshot or Sewer
models; only plain attributes are read.
"""

import math
from collections import defaultdict
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

from stitchman.conf import get_minutes_per_point
from stitchman.dates import DateRange, local_day
from stitchman.models.order import OPEN_STATUSES, OrderStatus
from stitchman.results import (
    DashboardStats,
    DayBucket,
    SewerDayStat,
    SewerOverview,
    SewerSummary,
)


def average_points(total_points: int, count: int) -> float:
    """Mean points per order, one decimal, half up; 0 when there are no orders."""
    if count == 0:
        return 0
    mean = Decimal(total_points) / Decimal(count)
    return float(mean.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def estimate_hours(points: int, minutes_per_point: int | None = None) -> int:
    """Whole hours needed for ``points`` at a fixed pace, rounded up."""
    if minutes_per_point is None:
        minutes_per_point = get_minutes_per_point()
    return math.ceil(points * minutes_per_point / 60)


class PerformanceAnalytics:
    """Analytics over order snapshots."""

    @classmethod
    def completed_in_range(cls, orders: Iterable, date_range: DateRange) -> list:
        """Completed orders whose completion day falls inside the range."""
        return [
            order
            for order in orders
            if order.status == OrderStatus.COMPLETED
            and order.claimed_by_id is not None
            and date_range.contains(order.completed_at)
        ]

    @classmethod
    def summarize(
        cls, orders: Iterable, sewers: Iterable, date_range: DateRange
    ) -> list[SewerSummary]:
        """
        Per-sewer totals for active sewers, ranked by total points.

        Ties keep the order of ``sewers`` (stable sort, no secondary key);
        pass sewers pre-sorted (e.g. by name) for a deterministic tie-break.

        Returns:
            [SewerSummary(sewer_id=3, sewer_name='Maria', completed_count=4,
                          total_points=14, average_points=3.5, rank=1), ...]
        """
        by_sewer: dict[int, list] = defaultdict(list)
        for order in cls.completed_in_range(orders, date_range):
            by_sewer[order.claimed_by_id].append(order)

        summaries = []
        for sewer in sewers:
            if not sewer.is_active:
                continue
            done = by_sewer.get(sewer.id, [])
            total = sum(order.points for order in done)
            summaries.append(
                SewerSummary(
                    sewer_id=sewer.id,
                    sewer_name=sewer.name,
                    completed_count=len(done),
                    total_points=total,
                    average_points=average_points(total, len(done)),
                )
            )

        # sorted() is stable with reverse=True too
        ranked = sorted(summaries, key=lambda s: s.total_points, reverse=True)
        for position, summary in enumerate(ranked, start=1):
            summary.rank = position
        return ranked

    @classmethod
    def daily_breakdown(
        cls, orders: Iterable, sewers: Iterable, date_range: DateRange
    ) -> list[DayBucket]:
        """
        One bucket per calendar day in the range, endpoints included.

        A day without completions is still present, with empty stats.
        """
        active = [sewer for sewer in sewers if sewer.is_active]

        grouped: dict[tuple, list] = defaultdict(list)
        for order in cls.completed_in_range(orders, date_range):
            grouped[(local_day(order.completed_at), order.claimed_by_id)].append(order)

        buckets = []
        for day in date_range.days():
            bucket = DayBucket(date=day)
            for sewer in active:
                done = grouped.get((day, sewer.id))
                if not done:
                    continue
                bucket.stats.append(
                    SewerDayStat(
                        sewer_id=sewer.id,
                        sewer_name=sewer.name,
                        date=day,
                        total_points=sum(order.points for order in done),
                        orders_completed=len(done),
                    )
                )
            buckets.append(bucket)
        return buckets

    @classmethod
    def dashboard(cls, orders: Iterable, sewers: Iterable) -> DashboardStats:
        """
        Manager overview over the whole ledger (not range-bound).

        Returns:
            DashboardStats(total_orders=12, completed_orders=5, active_orders=6,
                           open_points=19, estimated_hours=4, active_sewers=3)
        """
        orders = list(orders)
        open_orders = [order for order in orders if order.status in OPEN_STATUSES]
        open_points = sum(order.points for order in open_orders)

        return DashboardStats(
            total_orders=sum(1 for order in orders if order.status != OrderStatus.VOID),
            completed_orders=sum(
                1 for order in orders if order.status == OrderStatus.COMPLETED
            ),
            active_orders=len(open_orders),
            open_points=open_points,
            estimated_hours=estimate_hours(open_points),
            active_sewers=sum(1 for sewer in sewers if sewer.is_active),
        )

    @classmethod
    def estimate_completion_hours(cls, orders: Iterable) -> int:
        """Rough hours to finish every pending and in-progress order."""
        return estimate_hours(
            sum(order.points for order in orders if order.status in OPEN_STATUSES)
        )

    @classmethod
    def sewer_overview(cls, orders: Iterable, sewer, date_range: DateRange) -> SewerOverview:
        """
        One sewer's own numbers, with a point for every day of the range.

        Works for inactive sewers too: it reads history, it does not assign.
        """
        orders = list(orders)
        done = [
            order
            for order in cls.completed_in_range(orders, date_range)
            if order.claimed_by_id == sewer.id
        ]
        total = sum(order.points for order in done)

        per_day: dict = defaultdict(list)
        for order in done:
            per_day[local_day(order.completed_at)].append(order)

        return SewerOverview(
            summary=SewerSummary(
                sewer_id=sewer.id,
                sewer_name=sewer.name,
                completed_count=len(done),
                total_points=total,
                average_points=average_points(total, len(done)),
            ),
            in_progress_count=sum(
                1
                for order in orders
                if order.claimed_by_id == sewer.id
                and order.status == OrderStatus.IN_PROGRESS
            ),
            days=[
                SewerDayStat(
                    sewer_id=sewer.id,
                    sewer_name=sewer.name,
                    date=day,
                    total_points=sum(order.points for order in per_day.get(day, [])),
                    orders_completed=len(per_day.get(day, [])),
                )
                for day in date_range.days()
            ],
        )
