from rest_framework import serializers

from dealers.models import Dealer


class DealerSerializer(serializers.ModelSerializer):
    """
    Serializer for dealer master data.
    """

    class Meta:
        model = Dealer
        fields = [
            "id",
            "dealer_code",
            "dealer_name",
            "region",
            "address",
            "phone",
            "is_active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = [
            "id",
            "created_at",
            "updated_at",
        ]
