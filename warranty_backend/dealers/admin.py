from django.contrib import admin

from dealers.models import Dealer


@admin.register(Dealer)
class DealerAdmin(admin.ModelAdmin):
    list_display = ("dealer_code", "dealer_name", "region", "is_active")
    list_filter = ("region", "is_active")
    search_fields = ("dealer_code", "dealer_name")
