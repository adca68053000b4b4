# warranties/serializers/warranty.py

from rest_framework import serializers

from dealers.models import Dealer
from products.models import Product
from warranties.models import Warranty


class WarrantySerializer(serializers.ModelSerializer):
    dealer_code = serializers.CharField(source="dealer.dealer_code", read_only=True)
    product_name = serializers.CharField(source="product.product_name", read_only=True)

    class Meta:
        model = Warranty
        fields = [
            "id",
            "warranty_number",
            "dealer",
            "dealer_code",
            "product",
            "product_name",
            "customer_name",
            "customer_phone",
            "customer_address",
            "installation_area",
            "warranty_date",
            "warranty_period_months",
            "expiry_date",
            "material_usage",
            "created_by",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class WarrantyCreateSerializer(serializers.Serializer):
    warranty_number = serializers.CharField(max_length=64)
    dealer_id = serializers.PrimaryKeyRelatedField(queryset=Dealer.objects.filter(is_active=True))
    product_id = serializers.PrimaryKeyRelatedField(queryset=Product.objects.filter(is_active=True))
    customer_name = serializers.CharField(max_length=255)
    customer_phone = serializers.CharField(required=False, allow_blank=True, default="")
    customer_address = serializers.CharField(required=False, allow_blank=True, default="")
    installation_area = serializers.DecimalField(max_digits=12, decimal_places=3, min_value=0)
    warranty_date = serializers.DateField(required=False)
    warranty_period_months = serializers.IntegerField(required=False, min_value=1, default=12)


class WarrantyReallocateSerializer(serializers.Serializer):
    installation_area = serializers.DecimalField(max_digits=12, decimal_places=3, min_value=0, required=False)
    product_id = serializers.PrimaryKeyRelatedField(
        queryset=Product.objects.filter(is_active=True),
        required=False,
    )

    def validate(self, attrs):
        if "installation_area" not in attrs and "product_id" not in attrs:
            raise serializers.ValidationError("Provide installation_area and/or product_id")
        return attrs
