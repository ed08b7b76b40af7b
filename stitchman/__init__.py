"""
Django Stitchman - Production order tracking for a sewing workshop.

Orders move through a small state machine, sewers claim and complete
them, and performance metrics are derived from the order ledger.

Usage:
    from stitchman import stitch, StitchError, StaleState

    # Lifecycle
    order = stitch.claim(order.uuid, maria.pk)
    order = stitch.complete(order.uuid, maria.pk)

    try:
        stitch.void_order(order.uuid, user=manager)
    except StaleState:
        # someone else got there first: re-fetch and decide
        ...

    # Metrics
    ledger = stitch.snapshot()
    rng = stitch.resolve_preset("this-week")
    for summary in stitch.summarize(ledger.orders, ledger.sewers, rng):
        print(f"#{summary.rank} {summary.sewer_name}: {summary.total_points} pts")
"""

from stitchman.exceptions import (
    InactiveWorker,
    InvalidDateRange,
    InvalidTransition,
    StaleState,
    StitchError,
    WorkerNotFound,
)


def __getattr__(name):
    """Lazy import to avoid AppRegistryNotReady errors."""
    if name in ("stitch", "Stitch"):
        from stitchman.service import Stitch

        return Stitch
    if name == "DateRange":
        from stitchman.dates import DateRange

        return DateRange
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "stitch",
    "Stitch",
    "DateRange",
    "StitchError",
    "InvalidTransition",
    "StaleState",
    "InactiveWorker",
    "WorkerNotFound",
    "InvalidDateRange",
]
__version__ = "0.1.0"
