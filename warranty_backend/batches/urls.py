# batches/urls.py

"""
STOCK URLS

Registered under /api/stock/
- batches/                    (warehouse + dealer pools)
- batches/{id}/recertify/
- batches/{id}/history/
- batches/expiring-soon/
- allocations/preview/
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from batches.views import AllocationPreviewView, StockBatchViewSet

router = DefaultRouter()
router.register(r"batches", StockBatchViewSet, basename="stock-batches")

urlpatterns = [
    path("allocations/preview/", AllocationPreviewView.as_view(), name="allocation-preview"),
    path("", include(router.urls)),
]
