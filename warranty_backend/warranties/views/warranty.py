"""
======================================================
PATH: warranties/views/warranty.py
======================================================
WARRANTY VIEWSET

- POST   /api/warranties/warranties/                 issue + consume dealer materials
- POST   /api/warranties/warranties/{id}/reallocate/ installation change
- DELETE /api/warranties/warranties/{id}/            delete + restore materials

Insufficient stock answers 400 with a per-material `shortfalls` list.
"""

from __future__ import annotations

from django.core.exceptions import ValidationError
from django.db.models import Q
from drf_spectacular.utils import extend_schema
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from batches.services.exceptions import StockEngineError
from batches.views.errors import engine_error_response
from warranties.models import Warranty
from warranties.serializers import (
    WarrantyCreateSerializer,
    WarrantyReallocateSerializer,
    WarrantySerializer,
)
from warranties.services import delete_warranty, issue_warranty, reallocate_warranty


class WarrantyViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    serializer_class = WarrantySerializer
    permission_classes = [IsAuthenticated]
    filterset_fields = ["dealer", "product"]

    def get_queryset(self):
        qs = Warranty.objects.select_related("dealer", "product").order_by("-warranty_date", "-created_at")

        q = (self.request.query_params.get("q") or "").strip()
        if q:
            qs = qs.filter(Q(warranty_number__icontains=q) | Q(customer_name__icontains=q))

        return qs

    @extend_schema(request=WarrantyCreateSerializer, responses={201: WarrantySerializer})
    def create(self, request, *args, **kwargs):
        serializer = WarrantyCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        v = serializer.validated_data

        try:
            warranty = issue_warranty(
                dealer=v["dealer_id"],
                product=v["product_id"],
                warranty_number=v["warranty_number"],
                customer_name=v["customer_name"],
                customer_phone=v.get("customer_phone", ""),
                customer_address=v.get("customer_address", ""),
                installation_area=v["installation_area"],
                warranty_date=v.get("warranty_date"),
                warranty_period_months=v.get("warranty_period_months", 12),
                user=request.user,
            )
        except (StockEngineError, ValidationError) as exc:
            return engine_error_response(exc)

        return Response(WarrantySerializer(warranty).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=WarrantyReallocateSerializer, responses={200: WarrantySerializer})
    @action(detail=True, methods=["post"], url_path="reallocate")
    def reallocate(self, request, pk=None):
        warranty = self.get_object()

        serializer = WarrantyReallocateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        v = serializer.validated_data

        try:
            warranty = reallocate_warranty(
                warranty=warranty,
                installation_area=v.get("installation_area"),
                product=v.get("product_id"),
            )
        except (StockEngineError, ValidationError) as exc:
            return engine_error_response(exc)

        return Response(WarrantySerializer(warranty).data, status=status.HTTP_200_OK)

    def destroy(self, request, *args, **kwargs):
        warranty = self.get_object()
        try:
            delete_warranty(warranty=warranty)
        except StockEngineError as exc:
            return engine_error_response(exc)
        return Response(status=status.HTTP_204_NO_CONTENT)
