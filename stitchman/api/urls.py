"""
Stitchman API URLs.

Include this in your project's urlpatterns:

    path('api/stitchman/', include('stitchman.api.urls')),
"""

from rest_framework.routers import DefaultRouter

from .views import MetricsViewSet, OrderViewSet, SewerViewSet

router = DefaultRouter()
router.register("orders", OrderViewSet)
router.register("sewers", SewerViewSet)
router.register("metrics", MetricsViewSet, basename="metrics")

urlpatterns = router.urls
