"""
Initial Stitchman schema.

- Sewer
- Order (with version column for conditional updates)
- HistoricalOrder (django-simple-history)
"""

import uuid

import django.db.models.deletion
import simple_history.models
from django.conf import settings
from django.db import migrations, models


ORDER_STATUS_CHOICES = [
    ("pending", "Pending"),
    ("in_progress", "In Progress"),
    ("completed", "Completed"),
    ("void", "Void"),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        # ══════════════════════════════════════════════════════════════
        # SEWER MODEL
        # ══════════════════════════════════════════════════════════════
        migrations.CreateModel(
            name="Sewer",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("name", models.CharField(max_length=120, unique=True, verbose_name="Name")),
                (
                    "is_active",
                    models.BooleanField(
                        db_index=True,
                        default=True,
                        help_text="Inactive sewers keep their history but cannot be assigned",
                        verbose_name="Active",
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="Created at")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="Updated at")),
            ],
            options={
                "verbose_name": "Sewer",
                "verbose_name_plural": "Sewers",
                "db_table": "stitchman_sewer",
                "ordering": ["name"],
            },
        ),
        # ══════════════════════════════════════════════════════════════
        # ORDER MODEL
        # ══════════════════════════════════════════════════════════════
        migrations.CreateModel(
            name="Order",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                (
                    "uuid",
                    models.UUIDField(
                        default=uuid.uuid4, editable=False, unique=True, verbose_name="UUID"
                    ),
                ),
                (
                    "order_number",
                    models.CharField(
                        help_text="Human-readable identifier, e.g. #1001",
                        max_length=50,
                        unique=True,
                        verbose_name="Order number",
                    ),
                ),
                (
                    "wallet_type",
                    models.CharField(
                        blank=True,
                        help_text="Display label; comma-separated when an order has several wallets",
                        max_length=255,
                        verbose_name="Wallet type",
                    ),
                ),
                (
                    "points",
                    models.PositiveIntegerField(
                        default=0,
                        help_text="Production credit, fixed at ingestion",
                        verbose_name="Points",
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=ORDER_STATUS_CHOICES,
                        db_index=True,
                        default="pending",
                        max_length=20,
                        verbose_name="Status",
                    ),
                ),
                (
                    "version",
                    models.PositiveIntegerField(
                        default=0,
                        editable=False,
                        help_text="Incremented on every transition",
                        verbose_name="Version",
                    ),
                ),
                ("claimed_at", models.DateTimeField(blank=True, null=True, verbose_name="Claimed at")),
                (
                    "completed_at",
                    models.DateTimeField(
                        blank=True, db_index=True, null=True, verbose_name="Completed at"
                    ),
                ),
                ("voided_at", models.DateTimeField(blank=True, null=True, verbose_name="Voided at")),
                ("orderer_name", models.CharField(blank=True, max_length=255, verbose_name="Orderer")),
                ("total_wallets", models.PositiveSmallIntegerField(default=0, verbose_name="Wallets")),
                (
                    "total_accessories",
                    models.PositiveSmallIntegerField(default=0, verbose_name="Accessories"),
                ),
                (
                    "external_ref",
                    models.CharField(
                        blank=True,
                        help_text="Order ID in the shop system, when applicable",
                        max_length=255,
                        verbose_name="External reference",
                    ),
                ),
                (
                    "metadata",
                    models.JSONField(
                        blank=True,
                        default=dict,
                        help_text="Opaque upstream payload (line items, customizations)",
                        verbose_name="Metadata",
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="Created at")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="Updated at")),
                (
                    "claimed_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="orders",
                        to="stitchman.sewer",
                        verbose_name="Claimed by",
                    ),
                ),
            ],
            options={
                "verbose_name": "Order",
                "verbose_name_plural": "Orders",
                "db_table": "stitchman_order",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(
                        fields=["status", "completed_at"],
                        name="stitchman_o_status_3c1f0e_idx",
                    ),
                    models.Index(
                        fields=["claimed_by", "status"],
                        name="stitchman_o_claimed_8a2d4b_idx",
                    ),
                ],
            },
        ),
        # ══════════════════════════════════════════════════════════════
        # ORDER HISTORY
        # ══════════════════════════════════════════════════════════════
        migrations.CreateModel(
            name="HistoricalOrder",
            fields=[
                (
                    "id",
                    models.BigIntegerField(
                        auto_created=True, blank=True, db_index=True, verbose_name="ID"
                    ),
                ),
                (
                    "uuid",
                    models.UUIDField(
                        db_index=True, default=uuid.uuid4, editable=False, verbose_name="UUID"
                    ),
                ),
                (
                    "order_number",
                    models.CharField(db_index=True, max_length=50, verbose_name="Order number"),
                ),
                ("wallet_type", models.CharField(blank=True, max_length=255, verbose_name="Wallet type")),
                ("points", models.PositiveIntegerField(default=0, verbose_name="Points")),
                (
                    "status",
                    models.CharField(
                        choices=ORDER_STATUS_CHOICES,
                        db_index=True,
                        default="pending",
                        max_length=20,
                        verbose_name="Status",
                    ),
                ),
                (
                    "version",
                    models.PositiveIntegerField(default=0, editable=False, verbose_name="Version"),
                ),
                ("claimed_at", models.DateTimeField(blank=True, null=True, verbose_name="Claimed at")),
                (
                    "completed_at",
                    models.DateTimeField(
                        blank=True, db_index=True, null=True, verbose_name="Completed at"
                    ),
                ),
                ("voided_at", models.DateTimeField(blank=True, null=True, verbose_name="Voided at")),
                ("orderer_name", models.CharField(blank=True, max_length=255, verbose_name="Orderer")),
                ("total_wallets", models.PositiveSmallIntegerField(default=0, verbose_name="Wallets")),
                (
                    "total_accessories",
                    models.PositiveSmallIntegerField(default=0, verbose_name="Accessories"),
                ),
                (
                    "external_ref",
                    models.CharField(blank=True, max_length=255, verbose_name="External reference"),
                ),
                ("metadata", models.JSONField(blank=True, default=dict, verbose_name="Metadata")),
                ("created_at", models.DateTimeField(blank=True, editable=False, verbose_name="Created at")),
                ("updated_at", models.DateTimeField(blank=True, editable=False, verbose_name="Updated at")),
                ("history_id", models.AutoField(primary_key=True, serialize=False)),
                ("history_date", models.DateTimeField(db_index=True)),
                ("history_change_reason", models.CharField(max_length=100, null=True)),
                (
                    "history_type",
                    models.CharField(
                        choices=[("+", "Created"), ("~", "Changed"), ("-", "Deleted")],
                        max_length=1,
                    ),
                ),
                (
                    "claimed_by",
                    models.ForeignKey(
                        blank=True,
                        db_constraint=False,
                        null=True,
                        on_delete=django.db.models.deletion.DO_NOTHING,
                        related_name="+",
                        to="stitchman.sewer",
                        verbose_name="Claimed by",
                    ),
                ),
                (
                    "history_user",
                    models.ForeignKey(
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "historical Order",
                "verbose_name_plural": "historical Orders",
                "ordering": ("-history_date", "-history_id"),
                "get_latest_by": ("history_date", "history_id"),
            },
            bases=(simple_history.models.HistoricalChanges, models.Model),
        ),
    ]
