# dealers/urls.py

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from dealers.views import DealerViewSet

router = DefaultRouter()
router.register(r"dealers", DealerViewSet, basename="dealers")

urlpatterns = [
    path("", include(router.urls)),
]
