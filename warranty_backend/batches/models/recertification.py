# batches/models/recertification.py

import uuid

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models


class RecertificationHistory(models.Model):
    """
    Immutable audit row written once per recertification.

    The batch link is nullable: dealer batches can be deleted once emptied,
    so the row keeps its own snapshot of batch_number / material_code / dealer.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    batch = models.ForeignKey(
        "batches.StockBatch",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="recertifications",
    )

    batch_number = models.CharField(max_length=128)
    material_code = models.CharField(max_length=64)
    dealer = models.ForeignKey(
        "dealers.Dealer",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="recertifications",
    )

    old_expiry_date = models.DateField()
    new_expiry_date = models.DateField()
    extended_days = models.PositiveIntegerField()

    recertified_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="recertifications",
    )
    recertified_by_name = models.CharField(max_length=255, blank=True)

    reason = models.TextField(blank=True)
    note = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["batch", "created_at"], name="batches_rec_batch_i_7a2c3d_idx"),
        ]

    def clean(self):
        if self.new_expiry_date <= self.old_expiry_date:
            raise ValidationError("new_expiry_date must be after old_expiry_date")

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("RecertificationHistory records are immutable")
        self.clean()
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError(
            "RecertificationHistory records are immutable and cannot be deleted"
        )

    def __str__(self):
        return f"{self.batch_number} | {self.old_expiry_date} -> {self.new_expiry_date}"
