# warranties/urls.py

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from warranties.views import WarrantyViewSet

router = DefaultRouter()
router.register(r"warranties", WarrantyViewSet, basename="warranties")

urlpatterns = [
    path("", include(router.urls)),
]
