# dealers/views/dealer.py

from django.db.models import Q
from rest_framework import viewsets
from rest_framework.permissions import IsAuthenticated

from dealers.models import Dealer
from dealers.serializers import DealerSerializer


class DealerViewSet(viewsets.ModelViewSet):
    serializer_class = DealerSerializer
    permission_classes = [IsAuthenticated]
    filterset_fields = ["region", "is_active"]

    def get_queryset(self):
        qs = Dealer.objects.all().order_by("dealer_name")

        search = (self.request.query_params.get("search") or "").strip()
        if search:
            qs = qs.filter(Q(dealer_name__icontains=search) | Q(dealer_code__icontains=search))

        return qs
