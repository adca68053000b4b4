# batches/views/allocation.py

"""
ALLOCATION PREVIEW

POST /api/stock/allocations/preview/
{
  "recipe_id": "<uuid>",
  "area": "12.5",
  "dealer_id": "<uuid>"      # omit for the warehouse pool
}

Read-only: expands the recipe, plans FIFO draws and reports per-material
sufficiency. Nothing is deducted.
"""

from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from batches.serializers import AllocationPreviewSerializer
from batches.services.allocation import expand_and_allocate
from batches.services.allocation_record import build_allocation_record


class AllocationPreviewView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(request=AllocationPreviewSerializer)
    def post(self, request):
        serializer = AllocationPreviewSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        v = serializer.validated_data

        plan = expand_and_allocate(
            recipe=v["recipe_id"],
            area=v["area"],
            dealer=v.get("dealer_id"),
        )

        return Response(
            {
                "pool": "warehouse" if plan.is_warehouse else "dealer",
                "dealer_id": str(plan.dealer_id) if plan.dealer_id else None,
                "is_sufficient": plan.is_sufficient,
                "materials": build_allocation_record(plan),
                "shortfalls": [s.as_dict() for s in plan.shortfalls],
            },
            status=status.HTTP_200_OK,
        )
