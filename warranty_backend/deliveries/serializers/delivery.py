# deliveries/serializers/delivery.py

"""
DELIVERY / RECEIPT SERIALIZERS

- Read serializers expose delivery + receipt documents with their items.
- Command serializers validate input for the create / edit / receive
  endpoints; the services own every stock mutation.
"""

from rest_framework import serializers

from dealers.models import Dealer
from deliveries.models import (
    DealerReceipt,
    DealerReceiptItem,
    MaterialDelivery,
    MaterialDeliveryItem,
)


class MaterialDeliveryItemSerializer(serializers.ModelSerializer):
    material_code = serializers.CharField(source="raw_material.material_code", read_only=True)
    material_name = serializers.CharField(source="raw_material.material_name", read_only=True)

    class Meta:
        model = MaterialDeliveryItem
        fields = [
            "id",
            "raw_material",
            "material_code",
            "material_name",
            "source_batch",
            "batch_number",
            "quantity",
            "unit",
            "expiry_date",
        ]
        read_only_fields = fields


class MaterialDeliverySerializer(serializers.ModelSerializer):
    dealer_code = serializers.CharField(source="dealer.dealer_code", read_only=True)
    dealer_name = serializers.CharField(source="dealer.dealer_name", read_only=True)
    items = MaterialDeliveryItemSerializer(many=True, read_only=True)

    class Meta:
        model = MaterialDelivery
        fields = [
            "id",
            "delivery_number",
            "delivery_date",
            "dealer",
            "dealer_code",
            "dealer_name",
            "status",
            "notes",
            "items",
            "created_by",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class DeliveryItemInputSerializer(serializers.Serializer):
    batch_id = serializers.UUIDField()
    quantity = serializers.DecimalField(max_digits=14, decimal_places=3)

    def validate_quantity(self, value):
        if value <= 0:
            raise serializers.ValidationError("quantity must be greater than zero")
        return value


class DeliveryCreateSerializer(serializers.Serializer):
    dealer_id = serializers.PrimaryKeyRelatedField(queryset=Dealer.objects.filter(is_active=True))
    delivery_date = serializers.DateField(required=False)
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    items = DeliveryItemInputSerializer(many=True)

    def validate_items(self, value):
        if not value:
            raise serializers.ValidationError("At least one item is required")
        return value


class DeliveryUpdateSerializer(serializers.Serializer):
    delivery_date = serializers.DateField(required=False)
    notes = serializers.CharField(required=False, allow_blank=True)
    items = DeliveryItemInputSerializer(many=True, required=False)

    def validate_items(self, value):
        if not value:
            raise serializers.ValidationError("At least one item is required")
        return value


class ReceiveLineSerializer(serializers.Serializer):
    item_id = serializers.UUIDField()
    received_quantity = serializers.DecimalField(max_digits=14, decimal_places=3)


class ReceiveDeliverySerializer(serializers.Serializer):
    receipt_date = serializers.DateField(required=False)
    received_by = serializers.CharField(required=False, allow_blank=True, default="")
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    items = ReceiveLineSerializer(many=True, required=False)


class ReceiptUpdateSerializer(serializers.Serializer):
    receipt_date = serializers.DateField(required=False)
    received_by = serializers.CharField(required=False, allow_blank=True)
    notes = serializers.CharField(required=False, allow_blank=True)
    items = ReceiveLineSerializer(many=True, required=False)


class DealerReceiptItemSerializer(serializers.ModelSerializer):
    material_code = serializers.CharField(source="raw_material.material_code", read_only=True)

    class Meta:
        model = DealerReceiptItem
        fields = [
            "id",
            "raw_material",
            "material_code",
            "dealer_batch",
            "batch_number",
            "quantity",
            "received_quantity",
            "expiry_date",
        ]
        read_only_fields = fields


class DealerReceiptSerializer(serializers.ModelSerializer):
    delivery_number = serializers.CharField(source="delivery.delivery_number", read_only=True)
    dealer_code = serializers.CharField(source="dealer.dealer_code", read_only=True)
    items = DealerReceiptItemSerializer(many=True, read_only=True)

    class Meta:
        model = DealerReceipt
        fields = [
            "id",
            "receipt_number",
            "receipt_date",
            "delivery",
            "delivery_number",
            "dealer",
            "dealer_code",
            "received_by",
            "notes",
            "items",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields
