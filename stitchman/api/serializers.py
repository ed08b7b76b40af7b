"""
Stitchman API Serializers.
"""

from rest_framework import serializers

from stitchman.conf import get_default_preset
from stitchman.dates import CUSTOM
from stitchman.models import Order, Sewer


class SewerSerializer(serializers.ModelSerializer):
    """Serializer for Sewer model."""

    class Meta:
        model = Sewer
        fields = ["id", "name", "is_active", "created_at", "updated_at"]
        read_only_fields = ["id", "is_active", "created_at", "updated_at"]
        # uniqueness is enforced by Sewer.enlist, which also restores inactive names
        extra_kwargs = {"name": {"validators": []}}


class OrderSerializer(serializers.ModelSerializer):
    """
    Serializer for Order model.

    Read-only: orders change only through the lifecycle actions.
    """

    claimed_by_name = serializers.CharField(read_only=True)

    class Meta:
        model = Order
        fields = [
            "uuid",
            "order_number",
            "wallet_type",
            "points",
            "status",
            "version",
            "claimed_by",
            "claimed_by_name",
            "claimed_at",
            "completed_at",
            "voided_at",
            "orderer_name",
            "total_wallets",
            "total_accessories",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class OrderAssignSerializer(serializers.Serializer):
    """Serializer for claim / complete / reassign actions."""

    sewer = serializers.IntegerField(required=True, help_text="Sewer id")


class DateRangeQuerySerializer(serializers.Serializer):
    """
    Query params selecting a metrics window.

    ?preset=this-week
    ?start=2024-03-10&end=2024-03-12   (implies preset=custom)

    Only the shape is checked here. Unknown presets and inverted ranges
    are left to resolve_preset so they report as VALIDATION_ERROR.
    """

    preset = serializers.CharField(required=False)
    start = serializers.DateField(required=False)
    end = serializers.DateField(required=False)

    def validate(self, attrs):
        if "preset" not in attrs:
            has_bounds = "start" in attrs or "end" in attrs
            attrs["preset"] = CUSTOM if has_bounds else get_default_preset()
        return attrs


class SewerSummarySerializer(serializers.Serializer):
    sewer_id = serializers.IntegerField()
    sewer_name = serializers.CharField()
    completed_count = serializers.IntegerField()
    total_points = serializers.IntegerField()
    average_points = serializers.FloatField()
    rank = serializers.IntegerField()


class SewerDayStatSerializer(serializers.Serializer):
    sewer_id = serializers.IntegerField()
    sewer_name = serializers.CharField()
    date = serializers.DateField()
    total_points = serializers.IntegerField()
    orders_completed = serializers.IntegerField()


class DayBucketSerializer(serializers.Serializer):
    date = serializers.DateField()
    total_points = serializers.IntegerField()
    orders_completed = serializers.IntegerField()
    has_activity = serializers.BooleanField()
    stats = SewerDayStatSerializer(many=True)


class DashboardSerializer(serializers.Serializer):
    total_orders = serializers.IntegerField()
    completed_orders = serializers.IntegerField()
    active_orders = serializers.IntegerField()
    open_points = serializers.IntegerField()
    estimated_hours = serializers.IntegerField()
    active_sewers = serializers.IntegerField()


class SewerOverviewSerializer(serializers.Serializer):
    summary = SewerSummarySerializer()
    in_progress_count = serializers.IntegerField()
    days = SewerDayStatSerializer(many=True)
