from django.contrib import admin

from .models import Voucher


@admin.register(Voucher)
class VoucherAdmin(admin.ModelAdmin):
    list_display = ("code", "type", "value", "usage_count", "usage_limit", "expires_at", "active")
    list_filter = ("type", "active")
    search_fields = ("code",)
    readonly_fields = ("usage_count",)
