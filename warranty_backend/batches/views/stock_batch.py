"""
======================================================
PATH: batches/views/stock_batch.py
======================================================
STOCK BATCH VIEWSET

Purpose:
- Read batches of either pool (warehouse / dealer) with lazy expiry refresh.
- Warehouse intake (POST creates a batch through the intake service).
- Intake correction (adjust-intake) and cancellation (DELETE), untouched
  warehouse batches only.
- Recertification + recertification history.
- Expiring-soon alerts.

RULES:
- Quantity, status and expiry are never editable directly.
- PATCH is metadata-only (supplier).
- DELETE cancels a warehouse intake; dealer batches are never deleted here.
"""

from __future__ import annotations

from django.core.exceptions import ValidationError
from django.db import transaction
from drf_spectacular.utils import extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from batches.models import StockBatch
from batches.serializers import (
    IntakeAdjustSerializer,
    RecertificationHistorySerializer,
    RecertifySerializer,
    StockBatchMetadataSerializer,
    StockBatchSerializer,
    WarehouseIntakeSerializer,
)
from batches.services.exceptions import StockEngineError
from batches.services.intake import (
    adjust_warehouse_intake,
    cancel_warehouse_intake,
    receive_warehouse_batch,
)
from batches.services.lifecycle import (
    expiring_batches,
    recertification_history,
    recertify_batch,
    refresh_expired_batches,
)
from batches.views.errors import engine_error_response


def _truthy(value) -> bool:
    return (value or "").strip().lower() in ("1", "true", "yes")


class StockBatchViewSet(viewsets.ModelViewSet):
    serializer_class = StockBatchSerializer
    permission_classes = [IsAuthenticated]
    http_method_names = ["get", "post", "patch", "delete", "head", "options"]

    def get_queryset(self):
        qs = StockBatch.objects.select_related("raw_material", "dealer")

        if self.action in {"list", "retrieve"}:
            refresh_expired_batches(qs)

        params = self.request.query_params

        pool = (params.get("pool") or "").strip().lower()
        if pool == "warehouse":
            qs = qs.filter(dealer__isnull=True)
        elif pool == "dealer":
            qs = qs.filter(dealer__isnull=False)

        dealer_id = (params.get("dealer_id") or "").strip()
        if dealer_id:
            qs = qs.filter(dealer_id=dealer_id)

        raw_material_id = (params.get("raw_material_id") or "").strip()
        if raw_material_id:
            qs = qs.filter(raw_material_id=raw_material_id)

        batch_status = (params.get("status") or "").strip().upper()
        if batch_status:
            qs = qs.filter(status=batch_status)

        if _truthy(params.get("in_stock")):
            qs = qs.filter(current_stock__gt=0)

        return qs.order_by("received_at", "created_at")

    # -------------------------------------------------
    # CREATE (warehouse intake)
    # -------------------------------------------------
    @extend_schema(request=WarehouseIntakeSerializer, responses={201: StockBatchSerializer})
    def create(self, request, *args, **kwargs):
        """
        POST /api/stock/batches/

        Warehouse intake: creates a warehouse batch and increments the
        material's warehouse aggregate atomically.
        """
        serializer = WarehouseIntakeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        v = serializer.validated_data

        try:
            batch = receive_warehouse_batch(
                raw_material=v["raw_material_id"],
                batch_number=v["batch_number"],
                quantity=v["quantity"],
                expiry_date=v.get("expiry_date"),
                received_at=v.get("received_at"),
                supplier=v.get("supplier", ""),
            )
        except (StockEngineError, ValidationError) as exc:
            return engine_error_response(exc)

        return Response(StockBatchSerializer(batch).data, status=status.HTTP_201_CREATED)

    # -------------------------------------------------
    # UPDATE (metadata only)
    # -------------------------------------------------
    @extend_schema(request=StockBatchMetadataSerializer, responses={200: StockBatchSerializer})
    def partial_update(self, request, *args, **kwargs):
        instance = self.get_object()
        serializer = StockBatchMetadataSerializer(instance, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        batch = serializer.save()
        return Response(StockBatchSerializer(batch).data, status=status.HTTP_200_OK)

    def update(self, request, *args, **kwargs):
        return Response(
            {"detail": "PUT is not allowed for StockBatch. Use PATCH for metadata only (supplier)."},
            status=status.HTTP_405_METHOD_NOT_ALLOWED,
        )

    # -------------------------------------------------
    # INTAKE CORRECTION / CANCELLATION
    # -------------------------------------------------
    def destroy(self, request, *args, **kwargs):
        """
        DELETE /api/stock/batches/{id}/

        Cancels a warehouse intake that has not been drawn from yet.
        """
        batch = self.get_object()
        try:
            cancel_warehouse_intake(batch=batch)
        except StockEngineError as exc:
            return engine_error_response(exc)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(request=IntakeAdjustSerializer, responses={200: StockBatchSerializer})
    @action(detail=True, methods=["post"], url_path="adjust-intake")
    def adjust_intake(self, request, pk=None):
        batch = self.get_object()

        serializer = IntakeAdjustSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            batch = adjust_warehouse_intake(batch=batch, quantity=serializer.validated_data["quantity"])
        except (StockEngineError, ValidationError) as exc:
            return engine_error_response(exc)

        return Response(StockBatchSerializer(batch).data, status=status.HTTP_200_OK)

    # -------------------------------------------------
    # ACTIONS
    # -------------------------------------------------
    @extend_schema(request=RecertifySerializer, responses={200: StockBatchSerializer})
    @action(detail=True, methods=["post"], url_path="recertify")
    @transaction.atomic
    def recertify(self, request, pk=None):
        """
        POST /api/stock/batches/{id}/recertify/

        Extends the expiry of an expired batch by the configured window and
        writes one recertification history row.
        """
        batch = self.get_object()

        serializer = RecertifySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            result = recertify_batch(
                batch=batch,
                user=request.user,
                reason=serializer.validated_data.get("reason", ""),
                note=serializer.validated_data.get("note", ""),
            )
        except StockEngineError as exc:
            return engine_error_response(exc)

        return Response(StockBatchSerializer(result.batch).data, status=status.HTTP_200_OK)

    @extend_schema(responses={200: RecertificationHistorySerializer(many=True)})
    @action(detail=True, methods=["get"], url_path="history")
    def history(self, request, pk=None):
        batch = self.get_object()
        rows = recertification_history(batch)
        return Response(RecertificationHistorySerializer(rows, many=True).data)

    @extend_schema(responses={200: StockBatchSerializer(many=True)})
    @action(detail=False, methods=["get"], url_path="expiring-soon")
    def expiring_soon(self, request):
        """
        GET /api/stock/batches/expiring-soon/?days=30&dealer_id=<uuid>&pool=warehouse
        """
        raw_days = (request.query_params.get("days") or "").strip()
        try:
            days = int(raw_days) if raw_days else None
        except ValueError:
            return Response({"detail": "days must be an integer"}, status=status.HTTP_400_BAD_REQUEST)

        if days is not None and days < 0:
            return Response({"detail": "days cannot be negative"}, status=status.HTTP_400_BAD_REQUEST)

        qs = expiring_batches(
            days=days,
            dealer=(request.query_params.get("dealer_id") or "").strip() or None,
            warehouse=(request.query_params.get("pool") or "").strip().lower() == "warehouse",
        )
        return Response(StockBatchSerializer(qs, many=True).data)
