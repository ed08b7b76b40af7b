"""
Stitchman Signal Handlers.

Bridges Django model signals to the ledger change channel, so writes
made through ``save()`` (ingestion, admin, sewer management) notify
subscribers the same way lifecycle transitions do.

This module is imported in apps.py to register handlers.
"""

import logging

from django.db import transaction
from django.db.models.signals import post_save
from django.dispatch import receiver

from stitchman.models import Order, Sewer
from stitchman.signals import order_changed, sewer_changed

logger = logging.getLogger(__name__)


@receiver(post_save, sender=Order)
def announce_order_saved(sender, instance, created, **kwargs):
    """Lifecycle transitions bypass save(); this covers everything else."""
    operation = "create" if created else "save"

    def send():
        order_changed.send(sender=Order, order=instance, operation=operation)

    transaction.on_commit(send)
    logger.debug(
        f"Order {instance.order_number} saved ({operation})",
        extra={"order": instance.pk, "operation": operation},
    )


@receiver(post_save, sender=Sewer)
def announce_sewer_saved(sender, instance, created, **kwargs):
    def send():
        sewer_changed.send(sender=Sewer, sewer=instance, created=created)

    transaction.on_commit(send)
