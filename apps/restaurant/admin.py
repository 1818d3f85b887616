from django.contrib import admin

from .models import PreorderWindow, Restaurant


class PreorderWindowInline(admin.TabularInline):
    model = PreorderWindow
    extra = 0


@admin.register(Restaurant)
class RestaurantAdmin(admin.ModelAdmin):
    list_display = ("name", "opening_time", "closing_time", "allow_new_orders", "allow_delivery")
    inlines = [PreorderWindowInline]
