"""
Stitchman Admin - Django admin for Sewer and Order.

Orders are read-only here except through the lifecycle actions, which go
through the same conditional transitions as the API. Every change lands
in the order history (django-simple-history).
"""

import logging

from django.contrib import admin, messages
from django.utils.translation import gettext_lazy as _
from simple_history.admin import SimpleHistoryAdmin

from stitchman.exceptions import StitchError
from stitchman.models import Order, OrderStatus, Sewer

logger = logging.getLogger(__name__)


# ── Sewer ──


@admin.register(Sewer)
class SewerAdmin(admin.ModelAdmin):
    """Admin for sewers. No delete: sewers are deactivated instead."""

    list_display = ("name", "is_active", "completed_orders", "created_at")
    list_filter = ("is_active",)
    search_fields = ("name",)
    readonly_fields = ("created_at", "updated_at")
    actions = ["activate_sewers", "deactivate_sewers"]

    def has_delete_permission(self, request, obj=None):
        return False

    @admin.display(description=_("Completed orders"))
    def completed_orders(self, obj):
        return obj.orders.filter(status=OrderStatus.COMPLETED).count()

    @admin.action(description=_("Activate selected sewers"))
    def activate_sewers(self, request, queryset):
        for sewer in queryset:
            sewer.activate()
        self.message_user(request, _("Sewers activated."), messages.SUCCESS)

    @admin.action(description=_("Deactivate selected sewers"))
    def deactivate_sewers(self, request, queryset):
        for sewer in queryset:
            sewer.deactivate()
        self.message_user(request, _("Sewers deactivated."), messages.SUCCESS)


# ── Order ──


@admin.register(Order)
class OrderAdmin(SimpleHistoryAdmin):
    """Admin for wallet orders."""

    list_display = (
        "order_number",
        "wallet_type",
        "points",
        "status",
        "claimed_by",
        "completed_at",
    )
    list_filter = ("status", "claimed_by")
    search_fields = ("order_number", "orderer_name", "external_ref")
    date_hierarchy = "created_at"
    readonly_fields = (
        "uuid",
        "status",
        "version",
        "claimed_by",
        "claimed_at",
        "completed_at",
        "voided_at",
        "created_at",
        "updated_at",
    )
    actions = ["uncomplete_orders", "void_orders"]

    def get_readonly_fields(self, request, obj=None):
        """order_number and points are fixed once the order exists."""
        readonly = list(super().get_readonly_fields(request, obj))
        if obj:
            readonly.extend(["order_number", "points"])
        return readonly

    def has_delete_permission(self, request, obj=None):
        return False

    def _apply(self, request, queryset, operation: str):
        done, failed = 0, 0
        for order in queryset:
            try:
                getattr(order, operation)(user=request.user)
                done += 1
            except StitchError as e:
                failed += 1
                self.message_user(
                    request,
                    f"{order.order_number}: {e.code}",
                    messages.WARNING,
                )
                logger.info(
                    f"Admin {operation} skipped {order.order_number}",
                    extra={"order": order.pk, "code": e.code},
                )
        if done:
            self.message_user(
                request, f"{operation}: {done} order(s) updated.", messages.SUCCESS
            )
        return done, failed

    @admin.action(description=_("Send completed orders back to pending"))
    def uncomplete_orders(self, request, queryset):
        self._apply(request, queryset, "uncomplete")

    @admin.action(description=_("Void selected orders"))
    def void_orders(self, request, queryset):
        self._apply(request, queryset, "void")
