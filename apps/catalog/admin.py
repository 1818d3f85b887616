from django.contrib import admin

from .models import BundleComponent, Choice, ChoiceGroup, MenuItem, MenuItemVariant


class VariantInline(admin.TabularInline):
    model = MenuItemVariant
    extra = 0


class ChoiceGroupInline(admin.TabularInline):
    model = ChoiceGroup
    extra = 0


class BundleComponentInline(admin.TabularInline):
    model = BundleComponent
    fk_name = "bundle"
    extra = 0


@admin.register(MenuItem)
class MenuItemAdmin(admin.ModelAdmin):
    list_display = ("name", "category", "price_cents", "available", "is_bundle")
    list_filter = ("available", "is_bundle", "category")
    search_fields = ("name",)
    inlines = [VariantInline, ChoiceGroupInline, BundleComponentInline]


class ChoiceInline(admin.TabularInline):
    model = Choice
    extra = 0


@admin.register(ChoiceGroup)
class ChoiceGroupAdmin(admin.ModelAdmin):
    list_display = ("name", "menu_item", "order")
    inlines = [ChoiceInline]
