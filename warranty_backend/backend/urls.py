# backend/urls.py
"""
PROJECT URLS

Every API route is mounted under /api/:
- dealers/     dealer master data
- products/    products, raw materials, recipes
- stock/       warehouse + dealer batches, recertification, allocation preview
- deliveries/  warehouse -> dealer deliveries and dealer receipts
- warranties/  warranties (consume dealer materials)

The root and health endpoints are public; everything else needs a JWT.
"""

from __future__ import annotations

from django.conf import settings
from django.contrib import admin
from django.db import connection
from django.db.utils import OperationalError
from django.urls import include, path
from django.views.generic import RedirectView
from drf_spectacular.utils import extend_schema, inline_serializer
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView
from rest_framework import serializers
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

API_MODULES = {
    "dealers": "dealers.urls",
    "products": "products.urls",
    "stock": "batches.urls",
    "deliveries": "deliveries.urls",
    "warranties": "warranties.urls",
}


@extend_schema(
    responses=inline_serializer(
        name="ApiIndex",
        fields={
            "message": serializers.CharField(),
            "auth": serializers.DictField(child=serializers.CharField()),
            "docs": serializers.DictField(child=serializers.CharField()),
            "modules": serializers.DictField(child=serializers.CharField()),
        },
    ),
)
@api_view(["GET"])
@permission_classes([AllowAny])
def api_root(request):
    return Response(
        {
            "message": "Warranty Backend API is running",
            "auth": {
                "jwt_create": "/api/auth/jwt/create/",
                "jwt_refresh": "/api/auth/jwt/refresh/",
            },
            "docs": {"swagger": "/api/docs/", "schema": "/api/schema/"},
            "modules": {name: f"/api/{name}/" for name in API_MODULES},
        }
    )


@extend_schema(
    responses={
        200: inline_serializer(
            name="HealthStatus",
            fields={
                "status": serializers.CharField(),
                "db": serializers.CharField(),
                "recertification_extension_days": serializers.IntegerField(),
                "expiry_alert_days": serializers.IntegerField(),
            },
        ),
        503: inline_serializer(
            name="HealthDegraded",
            fields={
                "status": serializers.CharField(),
                "db": serializers.CharField(),
                "error": serializers.CharField(),
            },
        ),
    },
)
@api_view(["GET"])
@permission_classes([AllowAny])
def health_check(request):
    """
    Liveness + DB check. Also echoes the stock engine windows in effect.
    """
    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
            cursor.fetchone()
    except OperationalError as exc:
        return Response({"status": "degraded", "db": "down", "error": str(exc)}, status=503)

    return Response(
        {
            "status": "ok",
            "db": "ok",
            "recertification_extension_days": settings.RECERTIFICATION_EXTENSION_DAYS,
            "expiry_alert_days": settings.EXPIRY_ALERT_DAYS,
        }
    )


admin_path = getattr(settings, "ADMIN_PATH", "admin/").strip("/") + "/"

api_urlpatterns = [
    path("", api_root, name="api-root"),
    path("health/", health_check, name="health-check"),
    path("schema/", SpectacularAPIView.as_view(), name="schema"),
    path("docs/", SpectacularSwaggerView.as_view(url_name="schema"), name="swagger-ui"),
    path("auth/jwt/create/", TokenObtainPairView.as_view(), name="jwt-create"),
    path("auth/jwt/refresh/", TokenRefreshView.as_view(), name="jwt-refresh"),
] + [path(f"{name}/", include(module)) for name, module in API_MODULES.items()]

urlpatterns = [
    path(admin_path, admin.site.urls),
    path("", RedirectView.as_view(url="/api/docs/", permanent=False), name="root"),
    path("api/", include(api_urlpatterns)),
]
