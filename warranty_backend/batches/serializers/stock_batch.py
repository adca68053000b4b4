# batches/serializers/stock_batch.py
"""
======================================================
PATH: batches/serializers/stock_batch.py
======================================================
STOCK BATCH SERIALIZERS

Purpose:
- Read shape for batches in either pool.
- Warehouse intake input (creates a batch through the intake service) and
  intake correction input.
- Recertification input + history rows.
- Allocation preview input/output.

IMPORTANT:
- current_stock, status, expiry_date and the recertification counters are
  never writable through the API. Quantities move only through services;
  expiry moves only through recertification.
"""

from __future__ import annotations

from rest_framework import serializers

from batches.models import RecertificationHistory, StockBatch
from dealers.models import Dealer
from products.models import ProductRecipe, RawMaterial


class StockBatchSerializer(serializers.ModelSerializer):
    material_code = serializers.CharField(source="raw_material.material_code", read_only=True)
    material_name = serializers.CharField(source="raw_material.material_name", read_only=True)
    dealer_code = serializers.CharField(source="dealer.dealer_code", read_only=True, default=None)
    pool = serializers.SerializerMethodField(read_only=True)

    class Meta:
        model = StockBatch
        fields = [
            "id",
            "pool",
            "dealer",
            "dealer_code",
            "raw_material",
            "material_code",
            "material_name",
            "batch_number",
            "current_stock",
            "received_quantity",
            "received_at",
            "expiry_date",
            "supplier",
            "status",
            "is_recertified",
            "recertification_count",
            "last_recertified_at",
            "last_recertified_by",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_pool(self, obj) -> str:
        return "warehouse" if obj.dealer_id is None else "dealer"


class WarehouseIntakeSerializer(serializers.Serializer):
    raw_material_id = serializers.PrimaryKeyRelatedField(
        queryset=RawMaterial.objects.filter(is_active=True),
    )
    batch_number = serializers.CharField(max_length=128)
    quantity = serializers.DecimalField(max_digits=14, decimal_places=3)
    expiry_date = serializers.DateField(required=False, allow_null=True)
    received_at = serializers.DateTimeField(required=False, allow_null=True)
    supplier = serializers.CharField(required=False, allow_blank=True, default="")

    def validate_quantity(self, value):
        if value <= 0:
            raise serializers.ValidationError("quantity must be greater than zero")
        return value


class IntakeAdjustSerializer(serializers.Serializer):
    quantity = serializers.DecimalField(max_digits=14, decimal_places=3)

    def validate_quantity(self, value):
        if value <= 0:
            raise serializers.ValidationError("quantity must be greater than zero")
        return value


class StockBatchMetadataSerializer(serializers.ModelSerializer):
    class Meta:
        model = StockBatch
        fields = ["supplier"]


class RecertifySerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default="")
    note = serializers.CharField(required=False, allow_blank=True, default="")


class RecertificationHistorySerializer(serializers.ModelSerializer):
    class Meta:
        model = RecertificationHistory
        fields = [
            "id",
            "batch",
            "batch_number",
            "material_code",
            "dealer",
            "old_expiry_date",
            "new_expiry_date",
            "extended_days",
            "recertified_by",
            "recertified_by_name",
            "reason",
            "note",
            "created_at",
        ]
        read_only_fields = fields


class AllocationPreviewSerializer(serializers.Serializer):
    recipe_id = serializers.PrimaryKeyRelatedField(queryset=ProductRecipe.objects.all())
    area = serializers.DecimalField(max_digits=12, decimal_places=3)
    dealer_id = serializers.PrimaryKeyRelatedField(
        queryset=Dealer.objects.all(),
        required=False,
        allow_null=True,
    )
