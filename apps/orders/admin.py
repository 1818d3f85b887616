from django.contrib import admin

from .models import DenialReason, Order, OrderItem, OrderModification


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    readonly_fields = ("kind", "name", "variant_name", "quantity", "unit_price_cents", "line_total_cents")


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ("public_code", "customer_name", "order_type", "status", "total_cents", "created_at")
    list_filter = ("status", "order_type")
    search_fields = ("public_code", "customer_name", "customer_phone")
    readonly_fields = ("subtotal_cents", "platform_fee_cents", "delivery_fee_cents", "discount_cents", "total_cents")
    inlines = [OrderItemInline]


@admin.register(OrderModification)
class OrderModificationAdmin(admin.ModelAdmin):
    list_display = ("order", "modification_type", "modified_by_name", "created_at")
    list_filter = ("modification_type",)

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(DenialReason)
class DenialReasonAdmin(admin.ModelAdmin):
    list_display = ("reason", "is_preset")
