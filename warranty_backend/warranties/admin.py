from django.contrib import admin

from warranties.models import Warranty


@admin.register(Warranty)
class WarrantyAdmin(admin.ModelAdmin):
    list_display = ("warranty_number", "dealer", "product", "customer_name", "installation_area", "warranty_date")
    list_filter = ("warranty_date",)
    search_fields = ("warranty_number", "customer_name")
    readonly_fields = ("material_usage", "installation_area", "expiry_date")

    def has_delete_permission(self, request, obj=None):
        return False
