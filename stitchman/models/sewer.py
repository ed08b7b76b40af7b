"""
Sewer model.

Sewer = production actor who claims and completes orders.

Sewers are never deleted: deactivation only removes them from the pool
of eligible assignees, so historical claims keep pointing at them.
"""

import logging

from django.db import models, transaction
from django.utils.translation import gettext_lazy as _

from stitchman.exceptions import DuplicateSewer, InvalidSewerName

logger = logging.getLogger(__name__)


class SewerQuerySet(models.QuerySet):
    def active(self):
        return self.filter(is_active=True)


class Sewer(models.Model):
    """
    Production worker.

    ``name`` is the natural key: enlisting a name that belongs to a
    deactivated sewer restores that same row with all its history.
    """

    name = models.CharField(
        max_length=120,
        unique=True,
        verbose_name=_("Name"),
    )
    is_active = models.BooleanField(
        default=True,
        db_index=True,
        verbose_name=_("Active"),
        help_text=_("Inactive sewers keep their history but cannot be assigned"),
    )

    created_at = models.DateTimeField(
        auto_now_add=True,
        verbose_name=_("Created at"),
    )
    updated_at = models.DateTimeField(
        auto_now=True,
        verbose_name=_("Updated at"),
    )

    objects = SewerQuerySet.as_manager()

    class Meta:
        db_table = "stitchman_sewer"
        verbose_name = _("Sewer")
        verbose_name_plural = _("Sewers")
        ordering = ["name"]

    def __str__(self) -> str:
        return self.name

    @classmethod
    def enlist(cls, name: str) -> "Sewer":
        """
        Add a sewer by name, or restore a deactivated one.

        Raises:
            InvalidSewerName: name is blank
            DuplicateSewer: an active sewer already has this name
        """
        name = (name or "").strip()
        if not name:
            raise InvalidSewerName(name=name)

        with transaction.atomic():
            existing = cls.objects.select_for_update().filter(name=name).first()

            if existing is None:
                sewer = cls.objects.create(name=name)
                logger.info(
                    f"Sewer {sewer.name} enlisted",
                    extra={"sewer": sewer.pk, "name": sewer.name},
                )
                return sewer

            if existing.is_active:
                raise DuplicateSewer(name=name, sewer=existing.pk)

            existing.is_active = True
            existing.save(update_fields=["is_active", "updated_at"])

        logger.info(
            f"Sewer {existing.name} restored with previous history",
            extra={"sewer": existing.pk, "name": existing.name},
        )
        return existing

    def activate(self):
        """Make the sewer eligible for assignment again."""
        if self.is_active:
            return
        self.is_active = True
        self.save(update_fields=["is_active", "updated_at"])
        logger.info(f"Sewer {self.name} activated", extra={"sewer": self.pk})

    def deactivate(self):
        """Remove the sewer from the assignee pool. History is preserved."""
        if not self.is_active:
            return
        self.is_active = False
        self.save(update_fields=["is_active", "updated_at"])
        logger.info(f"Sewer {self.name} deactivated", extra={"sewer": self.pk})
