"""
Order model.

Order = Atomic unit of production work (one wallet order) with a point value.

✅ LIFECYCLE LOGIC ENCAPSULATED IN MODEL

Every transition is a single conditional UPDATE keyed by the order's pk,
the status the caller observed and the row version. The database is the
serialization point: a losing concurrent writer gets StaleState, never a
silent merge.
"""

import logging
import uuid

from django.db import models, transaction
from django.db.models import F
from django.utils import timezone
from django.utils.translation import gettext_lazy as _
from simple_history.models import HistoricalRecords

from stitchman.exceptions import InvalidTransition, StaleState

logger = logging.getLogger(__name__)


class OrderStatus(models.TextChoices):
    """Order lifecycle status."""

    PENDING = "pending", _("Pending")
    IN_PROGRESS = "in_progress", _("In Progress")
    COMPLETED = "completed", _("Completed")
    VOID = "void", _("Void")


OPEN_STATUSES = (OrderStatus.PENDING, OrderStatus.IN_PROGRESS)

# operation -> statuses it may start from. VOID appears nowhere: terminal.
TRANSITIONS = {
    "claim": (OrderStatus.PENDING,),
    "complete": (OrderStatus.PENDING, OrderStatus.IN_PROGRESS),
    "uncomplete": (OrderStatus.COMPLETED,),
    "reassign": (
        OrderStatus.PENDING,
        OrderStatus.IN_PROGRESS,
        OrderStatus.COMPLETED,
    ),
    "void": (
        OrderStatus.PENDING,
        OrderStatus.IN_PROGRESS,
        OrderStatus.COMPLETED,
    ),
}

# Operations that hand the order to a sewer.
ASSIGNING = ("claim", "complete", "reassign")

IMMUTABLE_FIELDS = ("order_number", "points")


class OrderQuerySet(models.QuerySet):
    def open(self):
        return self.filter(status__in=OPEN_STATUSES)

    def visible(self):
        """Everything except voided orders."""
        return self.exclude(status=OrderStatus.VOID)

    def conditional_update(self, pk, expected_status, expected_version=None, **patch) -> bool:
        """
        Compare-and-swap write.

        Applies ``patch`` only if the row still has ``expected_status``
        (and ``expected_version``, when given). Bumps the version.

        Returns:
            True if the row was updated, False if the condition did not hold.
        """
        qs = self.filter(pk=pk, status=expected_status)
        if expected_version is not None:
            qs = qs.filter(version=expected_version)

        patch.setdefault("updated_at", timezone.now())
        return qs.update(version=F("version") + 1, **patch) == 1


class Order(models.Model):
    """
    Wallet production order.

    Status: PENDING → IN_PROGRESS → COMPLETED, any non-void → VOID

    Invariants:
        completed_at is set  ⇔  status == COMPLETED
        claimed_by is set    ⇔  status in (IN_PROGRESS, COMPLETED)
        voided_at is set     ⇔  status == VOID, and a void order never changes

    The first two hold for non-void orders: voiding freezes claimed_by and
    completed_at as they were.
    """

    # UUID for external references
    uuid = models.UUIDField(
        default=uuid.uuid4,
        editable=False,
        unique=True,
        verbose_name=_("UUID"),
    )

    # Identification
    order_number = models.CharField(
        max_length=50,
        unique=True,
        verbose_name=_("Order number"),
        help_text=_("Human-readable identifier, e.g. #1001"),
    )
    wallet_type = models.CharField(
        max_length=255,
        blank=True,
        verbose_name=_("Wallet type"),
        help_text=_("Display label; comma-separated when an order has several wallets"),
    )
    points = models.PositiveIntegerField(
        default=0,
        verbose_name=_("Points"),
        help_text=_("Production credit, fixed at ingestion"),
    )

    # Status
    status = models.CharField(
        max_length=20,
        choices=OrderStatus.choices,
        default=OrderStatus.PENDING,
        db_index=True,
        verbose_name=_("Status"),
    )
    version = models.PositiveIntegerField(
        default=0,
        editable=False,
        verbose_name=_("Version"),
        help_text=_("Incremented on every transition"),
    )

    # Ownership
    claimed_by = models.ForeignKey(
        "stitchman.Sewer",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="orders",
        verbose_name=_("Claimed by"),
    )
    claimed_at = models.DateTimeField(
        null=True,
        blank=True,
        verbose_name=_("Claimed at"),
    )
    completed_at = models.DateTimeField(
        null=True,
        blank=True,
        db_index=True,
        verbose_name=_("Completed at"),
    )
    voided_at = models.DateTimeField(
        null=True,
        blank=True,
        verbose_name=_("Voided at"),
    )

    # Upstream order data
    orderer_name = models.CharField(
        max_length=255,
        blank=True,
        verbose_name=_("Orderer"),
    )
    total_wallets = models.PositiveSmallIntegerField(
        default=0,
        verbose_name=_("Wallets"),
    )
    total_accessories = models.PositiveSmallIntegerField(
        default=0,
        verbose_name=_("Accessories"),
    )
    external_ref = models.CharField(
        max_length=255,
        blank=True,
        verbose_name=_("External reference"),
        help_text=_("Order ID in the shop system, when applicable"),
    )
    metadata = models.JSONField(
        default=dict,
        blank=True,
        verbose_name=_("Metadata"),
        help_text=_("Opaque upstream payload (line items, customizations)"),
    )

    # Timestamps
    created_at = models.DateTimeField(
        auto_now_add=True,
        verbose_name=_("Created at"),
    )
    updated_at = models.DateTimeField(
        auto_now=True,
        verbose_name=_("Updated at"),
    )

    # History
    history = HistoricalRecords()

    objects = OrderQuerySet.as_manager()

    class Meta:
        db_table = "stitchman_order"
        verbose_name = _("Order")
        verbose_name_plural = _("Orders")
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status", "completed_at"], name="stitchman_o_status_3c1f0e_idx"),
            models.Index(fields=["claimed_by", "status"], name="stitchman_o_claimed_8a2d4b_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.order_number} - {self.wallet_type}" if self.wallet_type else self.order_number

    def save(self, *args, **kwargs):
        """Refuse writes that would change a void order or an immutable field."""
        if not self._state.adding and self.pk:
            stored = (
                Order.objects.filter(pk=self.pk)
                .values("status", *IMMUTABLE_FIELDS)
                .first()
            )
            if stored:
                if stored["status"] == OrderStatus.VOID:
                    raise InvalidTransition(
                        order=self.order_number, operation="save", current=OrderStatus.VOID
                    )
                for name in IMMUTABLE_FIELDS:
                    if stored[name] != getattr(self, name):
                        raise InvalidTransition(
                            order=stored["order_number"], operation="save", field=name
                        )
        super().save(*args, **kwargs)

    # ══════════════════════════════════════════════════════════════
    # LIFECYCLE (encapsulated in model!)
    # ══════════════════════════════════════════════════════════════

    def claim(self, sewer, user=None):
        """
        Sewer takes ownership of a pending order.

        PENDING → IN_PROGRESS
        """
        now = timezone.now()
        return self._transition(
            "claim",
            {
                "status": OrderStatus.IN_PROGRESS,
                "claimed_by": sewer,
                "claimed_at": now,
            },
            user=user,
            sewer=sewer,
        )

    def complete(self, sewer, user=None):
        """
        Finish the order, claiming it for ``sewer`` in the same step.

        PENDING | IN_PROGRESS → COMPLETED

        A sewer typically self-assigns by completing, so an unclaimed order
        gets claimed_at = completed_at. An order claimed by someone else is
        attributed to ``sewer``.
        """
        now = timezone.now()
        return self._transition(
            "complete",
            {
                "status": OrderStatus.COMPLETED,
                "claimed_by": sewer,
                "claimed_at": self.claimed_at or now,
                "completed_at": now,
            },
            user=user,
            sewer=sewer,
        )

    def uncomplete(self, user=None):
        """
        Undo a completion. The order goes back to the open pool unclaimed.

        COMPLETED → PENDING
        """
        return self._transition(
            "uncomplete",
            {
                "status": OrderStatus.PENDING,
                "claimed_by": None,
                "claimed_at": None,
                "completed_at": None,
            },
            user=user,
        )

    def reassign(self, sewer, user=None):
        """
        Manager hands the order to ``sewer`` and closes it under their credit.

        PENDING | IN_PROGRESS | COMPLETED → COMPLETED

        Also used to correct a misattributed completion.
        """
        now = timezone.now()
        return self._transition(
            "reassign",
            {
                "status": OrderStatus.COMPLETED,
                "claimed_by": sewer,
                "claimed_at": now,
                "completed_at": now,
            },
            user=user,
            sewer=sewer,
        )

    def void(self, user=None):
        """
        Void the order. Terminal: nothing changes afterwards.

        any non-void → VOID
        """
        return self._transition(
            "void",
            {"status": OrderStatus.VOID, "voided_at": timezone.now()},
            user=user,
        )

    def _transition(self, operation: str, patch: dict, user=None, sewer=None):
        """Validate against the observed status and apply ``patch`` atomically."""
        if operation in ASSIGNING:
            from stitchman.assignment import resolve_sewer

            sewer = resolve_sewer(sewer)
            patch["claimed_by"] = sewer

        observed = self.status

        if observed not in TRANSITIONS[operation]:
            logger.warning(
                f"Order {self.order_number}: {operation} rejected from {observed}",
                extra={
                    "order": self.pk,
                    "operation": operation,
                    "status": observed,
                },
            )
            raise InvalidTransition(
                order=self.order_number,
                operation=operation,
                current=observed,
                allowed=[str(s) for s in TRANSITIONS[operation]],
            )

        with transaction.atomic():
            updated = Order.objects.conditional_update(
                self.pk, observed, expected_version=self.version, **patch
            )
            if not updated:
                logger.warning(
                    f"Order {self.order_number}: {operation} lost a concurrent update",
                    extra={
                        "order": self.pk,
                        "operation": operation,
                        "expected_status": observed,
                        "expected_version": self.version,
                    },
                )
                raise StaleState(
                    order=self.order_number,
                    operation=operation,
                    expected=observed,
                )

            self.refresh_from_db()
            Order.history.bulk_history_create(
                [self],
                update=True,
                default_user=user,
                default_change_reason=operation,
            )
            transaction.on_commit(lambda: self._emit_changed(operation))

        logger.info(
            f"Order {self.order_number}: {operation} ({observed} → {self.status})",
            extra={
                "order": self.pk,
                "order_number": self.order_number,
                "operation": operation,
                "from_status": observed,
                "to_status": self.status,
                "sewer": sewer.pk if sewer else None,
                "user": getattr(user, "username", None),
            },
        )
        return self

    def _emit_changed(self, operation: str):
        from stitchman.signals import order_changed

        order_changed.send(sender=self.__class__, order=self, operation=operation)

    # ══════════════════════════════════════════════════════════════
    # PROPERTIES
    # ══════════════════════════════════════════════════════════════

    @property
    def is_open(self) -> bool:
        return self.status in OPEN_STATUSES

    @property
    def is_terminal(self) -> bool:
        return self.status == OrderStatus.VOID

    @property
    def claimed_by_name(self) -> str | None:
        return self.claimed_by.name if self.claimed_by_id else None
