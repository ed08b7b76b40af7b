"""
Stitchman API ViewSets.
"""

from django.db.models import Q
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.generics import get_object_or_404
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from stitchman.analytics import PerformanceAnalytics
from stitchman.assignment import resolve_sewer
from stitchman.dates import resolve_preset
from stitchman.exceptions import InvalidDateRange, StitchError, WorkerNotFound
from stitchman.ledger import take_snapshot
from stitchman.models import Order, Sewer
from .serializers import (
    DashboardSerializer,
    DateRangeQuerySerializer,
    DayBucketSerializer,
    OrderAssignSerializer,
    OrderSerializer,
    SewerOverviewSerializer,
    SewerSerializer,
    SewerSummarySerializer,
)

ERROR_STATUS = {
    "ORDER_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "WORKER_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "STALE_STATE": status.HTTP_409_CONFLICT,
    "INVALID_TRANSITION": status.HTTP_409_CONFLICT,
    "SEWER_ALREADY_ACTIVE": status.HTTP_409_CONFLICT,
    "DUPLICATE_ORDER": status.HTTP_409_CONFLICT,
}


def error_response(error: StitchError) -> Response:
    """StitchError → {"error": {"code": ..., ...}} with a matching HTTP status."""
    return Response(
        {"error": error.as_dict()},
        status=ERROR_STATUS.get(error.code, status.HTTP_400_BAD_REQUEST),
    )


class OrderViewSet(viewsets.ReadOnlyModelViewSet):
    """
    ViewSet for Order.

    list: List orders (void orders hidden unless ?status=void)
    retrieve: Get a specific order by UUID
    claim: Sewer takes a pending order
    complete: Sewer claims and finishes an order
    uncomplete: Send a completed order back to the pending pool
    reassign: Give the order to another sewer (finalizes it as completed)
    void: Void the order
    """

    permission_classes = [IsAuthenticated]
    queryset = Order.objects.select_related("claimed_by")
    serializer_class = OrderSerializer
    lookup_field = "uuid"

    def get_queryset(self):
        qs = super().get_queryset()

        status_filter = self.request.query_params.get("status")
        if status_filter:
            qs = qs.filter(status=status_filter)
        else:
            qs = qs.visible()

        search = self.request.query_params.get("search")
        if search:
            qs = qs.filter(
                Q(order_number__icontains=search) | Q(orderer_name__icontains=search)
            )

        return qs.order_by("-created_at")

    def _assign(self, request, operation: str):
        # lifecycle actions must see void orders too
        order = self._get_any_order()
        serializer = OrderAssignSerializer(data=request.data)

        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        try:
            sewer = resolve_sewer(serializer.validated_data["sewer"])
            getattr(order, operation)(sewer, user=request.user)
        except StitchError as e:
            return error_response(e)

        return Response(OrderSerializer(order).data)

    def _get_any_order(self):
        obj = get_object_or_404(
            Order.objects.select_related("claimed_by"),
            uuid=self.kwargs[self.lookup_field],
        )
        self.check_object_permissions(self.request, obj)
        return obj

    @action(detail=True, methods=["post"])
    def claim(self, request, uuid=None):
        """
        POST /api/stitchman/orders/{uuid}/claim/
        {"sewer": 3}
        """
        return self._assign(request, "claim")

    @action(detail=True, methods=["post"])
    def complete(self, request, uuid=None):
        """
        POST /api/stitchman/orders/{uuid}/complete/
        {"sewer": 3}
        """
        return self._assign(request, "complete")

    @action(detail=True, methods=["post"])
    def reassign(self, request, uuid=None):
        """
        POST /api/stitchman/orders/{uuid}/reassign/
        {"sewer": 5}
        """
        return self._assign(request, "reassign")

    @action(detail=True, methods=["post"])
    def uncomplete(self, request, uuid=None):
        """
        POST /api/stitchman/orders/{uuid}/uncomplete/
        """
        order = self._get_any_order()
        try:
            order.uncomplete(user=request.user)
        except StitchError as e:
            return error_response(e)
        return Response(OrderSerializer(order).data)

    @action(detail=True, methods=["post"])
    def void(self, request, uuid=None):
        """
        POST /api/stitchman/orders/{uuid}/void/
        """
        order = self._get_any_order()
        try:
            order.void(user=request.user)
        except StitchError as e:
            return error_response(e)
        return Response(OrderSerializer(order).data)


class SewerViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.CreateModelMixin,
    viewsets.GenericViewSet,
):
    """
    ViewSet for Sewer.

    list: List sewers (?active=true for the assignable pool)
    create: Enlist a sewer, restoring a deactivated one with the same name
    activate / deactivate: Toggle eligibility (history is kept)

    There is no delete: sewers are deactivated, never removed.
    """

    permission_classes = [IsAuthenticated]
    queryset = Sewer.objects.all()
    serializer_class = SewerSerializer

    def get_queryset(self):
        qs = super().get_queryset()
        if self.request.query_params.get("active") in ("1", "true", "True"):
            qs = qs.active()
        return qs.order_by("name")

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        try:
            sewer = Sewer.enlist(serializer.validated_data["name"])
        except StitchError as e:
            return error_response(e)

        return Response(SewerSerializer(sewer).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["post"])
    def activate(self, request, pk=None):
        """
        POST /api/stitchman/sewers/{id}/activate/
        """
        sewer = self.get_object()
        sewer.activate()
        return Response(SewerSerializer(sewer).data)

    @action(detail=True, methods=["post"])
    def deactivate(self, request, pk=None):
        """
        POST /api/stitchman/sewers/{id}/deactivate/
        """
        sewer = self.get_object()
        sewer.deactivate()
        return Response(SewerSerializer(sewer).data)


class MetricsViewSet(viewsets.ViewSet):
    """
    Performance metrics, recomputed from a fresh snapshot on every request.

    Window: ?preset=today|this-week|this-month|last-30-days
            or ?start=YYYY-MM-DD&end=YYYY-MM-DD
    """

    permission_classes = [IsAuthenticated]

    def _range(self, request):
        """Resolve the query window. Raises InvalidDateRange."""
        query = DateRangeQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        params = query.validated_data
        return resolve_preset(
            params["preset"], start=params.get("start"), end=params.get("end")
        )

    @action(detail=False, methods=["get"])
    def summary(self, request):
        """
        GET /api/stitchman/metrics/summary/?preset=this-week
        """
        try:
            date_range = self._range(request)
        except InvalidDateRange as e:
            return error_response(e)
        ledger = take_snapshot()
        summaries = PerformanceAnalytics.summarize(ledger.orders, ledger.sewers, date_range)
        return Response(
            {
                "start": date_range.floor,
                "end": date_range.ceiling,
                "sewers": SewerSummarySerializer(summaries, many=True).data,
            }
        )

    @action(detail=False, methods=["get"])
    def daily(self, request):
        """
        GET /api/stitchman/metrics/daily/?start=2024-03-10&end=2024-03-12
        """
        try:
            date_range = self._range(request)
        except InvalidDateRange as e:
            return error_response(e)
        ledger = take_snapshot()
        buckets = PerformanceAnalytics.daily_breakdown(
            ledger.orders, ledger.sewers, date_range
        )
        return Response(
            {
                "start": date_range.floor,
                "end": date_range.ceiling,
                "days": DayBucketSerializer(buckets, many=True).data,
            }
        )

    @action(detail=False, methods=["get"])
    def dashboard(self, request):
        """
        GET /api/stitchman/metrics/dashboard/
        """
        ledger = take_snapshot()
        stats = PerformanceAnalytics.dashboard(ledger.orders, ledger.sewers)
        return Response(DashboardSerializer(stats).data)

    @action(detail=False, methods=["get"], url_path=r"sewer/(?P<sewer_id>\d+)")
    def sewer(self, request, sewer_id=None):
        """
        GET /api/stitchman/metrics/sewer/{id}/?preset=today
        """
        try:
            date_range = self._range(request)
        except InvalidDateRange as e:
            return error_response(e)
        ledger = take_snapshot()

        sewer = next((s for s in ledger.sewers if s.id == int(sewer_id)), None)
        if sewer is None:
            return error_response(WorkerNotFound(sewer=int(sewer_id)))

        overview = PerformanceAnalytics.sewer_overview(ledger.orders, sewer, date_range)
        return Response(SewerOverviewSerializer(overview).data)
