# deliveries/urls.py

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from deliveries.views import DealerReceiptViewSet, MaterialDeliveryViewSet

router = DefaultRouter()
router.register(r"deliveries", MaterialDeliveryViewSet, basename="deliveries")
router.register(r"receipts", DealerReceiptViewSet, basename="receipts")

urlpatterns = [
    path("", include(router.urls)),
]
