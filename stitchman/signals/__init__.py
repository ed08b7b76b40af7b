"""
Stitchman Signals.

The change-notification channel of the order ledger. Payloads are
informational only: subscribers must treat every signal as a cue to
re-fetch a fresh snapshot, never as a diff to apply.

Signals:
    order_changed: an order was created or went through a transition
    sewer_changed: a sewer was created, activated or deactivated
"""

from django.dispatch import Signal

# Sent after commit of every transition, and on order creation
# Args: order, operation ("create", "claim", "complete", ...)
order_changed = Signal()

# Sent on every Sewer save
# Args: sewer, created
sewer_changed = Signal()

__all__ = ["order_changed", "sewer_changed"]
