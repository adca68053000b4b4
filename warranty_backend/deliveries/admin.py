from django.contrib import admin

from deliveries.models import (
    DealerReceipt,
    DealerReceiptItem,
    MaterialDelivery,
    MaterialDeliveryItem,
)


class MaterialDeliveryItemInline(admin.TabularInline):
    model = MaterialDeliveryItem
    extra = 0
    can_delete = False
    readonly_fields = ("raw_material", "source_batch", "batch_number", "quantity", "unit", "expiry_date")


@admin.register(MaterialDelivery)
class MaterialDeliveryAdmin(admin.ModelAdmin):
    list_display = ("delivery_number", "dealer", "delivery_date", "status")
    list_filter = ("status", "delivery_date")
    search_fields = ("delivery_number", "dealer__dealer_code")
    readonly_fields = ("status",)
    inlines = [MaterialDeliveryItemInline]

    def has_delete_permission(self, request, obj=None):
        return False


class DealerReceiptItemInline(admin.TabularInline):
    model = DealerReceiptItem
    extra = 0
    can_delete = False
    readonly_fields = ("raw_material", "dealer_batch", "batch_number", "quantity", "received_quantity", "expiry_date")


@admin.register(DealerReceipt)
class DealerReceiptAdmin(admin.ModelAdmin):
    list_display = ("receipt_number", "dealer", "receipt_date", "received_by")
    search_fields = ("receipt_number", "dealer__dealer_code")
    inlines = [DealerReceiptItemInline]

    def has_delete_permission(self, request, obj=None):
        return False
