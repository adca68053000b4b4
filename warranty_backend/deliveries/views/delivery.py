"""
======================================================
PATH: deliveries/views/delivery.py
======================================================
DELIVERY + RECEIPT VIEWSETS

Endpoints (under /api/deliveries/):
- deliveries/                    GET list, POST create (deducts warehouse batches)
- deliveries/{id}/               GET, PATCH (replaces items, moves warehouse stock),
                                 DELETE (restores warehouse batches); pending only
- deliveries/{id}/receive/       POST (adds stock to the dealer pool)
- receipts/                      GET list
- receipts/{id}/                 GET, PATCH (corrects received quantities),
                                 DELETE (withdraws dealer stock)
"""

from __future__ import annotations

from django.core.exceptions import ValidationError
from drf_spectacular.utils import extend_schema
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from batches.services.exceptions import StockEngineError
from batches.views.errors import engine_error_response
from deliveries.models import DealerReceipt, MaterialDelivery
from deliveries.serializers import (
    DealerReceiptSerializer,
    DeliveryCreateSerializer,
    DeliveryUpdateSerializer,
    MaterialDeliverySerializer,
    ReceiptUpdateSerializer,
    ReceiveDeliverySerializer,
)
from deliveries.services import (
    create_delivery,
    delete_delivery,
    delete_receipt,
    receive_delivery,
    update_delivery,
    update_receipt,
)


class MaterialDeliveryViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    serializer_class = MaterialDeliverySerializer
    permission_classes = [IsAuthenticated]
    filterset_fields = ["dealer", "status"]

    def get_queryset(self):
        return (
            MaterialDelivery.objects.select_related("dealer")
            .prefetch_related("items__raw_material")
            .order_by("-delivery_date", "-created_at")
        )

    @extend_schema(request=DeliveryCreateSerializer, responses={201: MaterialDeliverySerializer})
    def create(self, request, *args, **kwargs):
        serializer = DeliveryCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        v = serializer.validated_data

        try:
            delivery = create_delivery(
                dealer=v["dealer_id"],
                delivery_date=v.get("delivery_date"),
                notes=v.get("notes", ""),
                items=[{"batch_id": row["batch_id"], "quantity": row["quantity"]} for row in v["items"]],
                user=request.user,
            )
        except (StockEngineError, ValidationError) as exc:
            return engine_error_response(exc)

        return Response(MaterialDeliverySerializer(delivery).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=DeliveryUpdateSerializer, responses={200: MaterialDeliverySerializer})
    def partial_update(self, request, *args, **kwargs):
        delivery = self.get_object()

        serializer = DeliveryUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        v = serializer.validated_data

        items = v.get("items")
        try:
            delivery = update_delivery(
                delivery=delivery,
                delivery_date=v.get("delivery_date"),
                notes=v.get("notes"),
                items=None if items is None else [
                    {"batch_id": row["batch_id"], "quantity": row["quantity"]} for row in items
                ],
            )
        except (StockEngineError, ValidationError) as exc:
            return engine_error_response(exc)

        delivery = self.get_queryset().get(pk=delivery.pk)
        return Response(MaterialDeliverySerializer(delivery).data, status=status.HTTP_200_OK)

    def destroy(self, request, *args, **kwargs):
        delivery = self.get_object()
        try:
            delete_delivery(delivery=delivery)
        except StockEngineError as exc:
            return engine_error_response(exc)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(request=ReceiveDeliverySerializer, responses={201: DealerReceiptSerializer})
    @action(detail=True, methods=["post"], url_path="receive")
    def receive(self, request, pk=None):
        delivery = self.get_object()

        serializer = ReceiveDeliverySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        v = serializer.validated_data

        overrides = {str(row["item_id"]): row["received_quantity"] for row in v.get("items") or []}

        try:
            receipt = receive_delivery(
                delivery=delivery,
                receipt_date=v.get("receipt_date"),
                received_by=v.get("received_by") or request.user.get_username(),
                notes=v.get("notes", ""),
                received_quantities=overrides or None,
            )
        except (StockEngineError, ValidationError) as exc:
            return engine_error_response(exc)

        return Response(DealerReceiptSerializer(receipt).data, status=status.HTTP_201_CREATED)


class DealerReceiptViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.DestroyModelMixin,
    viewsets.GenericViewSet,
):
    serializer_class = DealerReceiptSerializer
    permission_classes = [IsAuthenticated]
    filterset_fields = ["dealer"]

    def get_queryset(self):
        return (
            DealerReceipt.objects.select_related("dealer", "delivery")
            .prefetch_related("items__raw_material")
            .order_by("-receipt_date", "-created_at")
        )

    @extend_schema(request=ReceiptUpdateSerializer, responses={200: DealerReceiptSerializer})
    def partial_update(self, request, *args, **kwargs):
        receipt = self.get_object()

        serializer = ReceiptUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        v = serializer.validated_data

        overrides = {str(row["item_id"]): row["received_quantity"] for row in v.get("items") or []}

        try:
            receipt = update_receipt(
                receipt=receipt,
                received_quantities=overrides or None,
                receipt_date=v.get("receipt_date"),
                received_by=v.get("received_by"),
                notes=v.get("notes"),
            )
        except (StockEngineError, ValidationError) as exc:
            return engine_error_response(exc)

        receipt = self.get_queryset().get(pk=receipt.pk)
        return Response(DealerReceiptSerializer(receipt).data, status=status.HTTP_200_OK)

    def destroy(self, request, *args, **kwargs):
        receipt = self.get_object()
        try:
            delete_receipt(receipt=receipt)
        except StockEngineError as exc:
            return engine_error_response(exc)
        return Response(status=status.HTTP_204_NO_CONTENT)
