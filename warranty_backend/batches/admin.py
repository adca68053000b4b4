from django.contrib import admin

from batches.models import RecertificationHistory, StockBatch


@admin.register(StockBatch)
class StockBatchAdmin(admin.ModelAdmin):
    list_display = ("raw_material", "dealer", "batch_number", "current_stock", "expiry_date", "status")
    list_filter = ("status", "is_recertified", "expiry_date")
    search_fields = ("batch_number", "raw_material__material_code", "dealer__dealer_code")
    readonly_fields = (
        "current_stock",
        "received_quantity",
        "status",
        "expiry_date",
        "is_recertified",
        "recertification_count",
        "last_recertified_at",
        "last_recertified_by",
    )

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(RecertificationHistory)
class RecertificationHistoryAdmin(admin.ModelAdmin):
    list_display = ("batch_number", "material_code", "old_expiry_date", "new_expiry_date", "recertified_by_name", "created_at")
    search_fields = ("batch_number", "material_code")

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
