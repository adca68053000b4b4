# batches/views/errors.py

"""
Stock engine error -> HTTP response mapping shared by every app that drives
the engine (batches, deliveries, warranties).
"""

from django.core.exceptions import ValidationError
from rest_framework import status
from rest_framework.response import Response

from batches.services.exceptions import (
    ConcurrencyAbortError,
    LifecycleViolation,
    MissingBatchError,
    ShortfallError,
    StockEngineError,
)


def _validation_detail(exc: ValidationError):
    if hasattr(exc, "message_dict"):
        return exc.message_dict
    return " ".join(exc.messages)


def engine_error_response(exc: Exception) -> Response:
    if isinstance(exc, ShortfallError):
        return Response(exc.as_dict(), status=status.HTTP_400_BAD_REQUEST)

    if isinstance(exc, (ConcurrencyAbortError, MissingBatchError)):
        return Response(exc.as_dict(), status=status.HTTP_409_CONFLICT)

    if isinstance(exc, LifecycleViolation):
        return Response(exc.as_dict(), status=status.HTTP_400_BAD_REQUEST)

    if isinstance(exc, StockEngineError):
        return Response(exc.as_dict(), status=status.HTTP_400_BAD_REQUEST)

    if isinstance(exc, ValidationError):
        return Response({"detail": _validation_detail(exc)}, status=status.HTTP_400_BAD_REQUEST)

    return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)
