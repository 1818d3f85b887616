from django.contrib import admin
from django.contrib.auth import get_user_model
from django.contrib.auth.admin import UserAdmin as DjangoUserAdmin
from django.utils.translation import gettext_lazy as _


User = get_user_model()


@admin.register(User)
class UserAdmin(DjangoUserAdmin):
    list_display = (
        "username",
        "display_name",
        "role",
        "phone",
        "is_staff",
    )
    list_filter = DjangoUserAdmin.list_filter + ("role",)
    search_fields = ("username", "email", "display_name", "phone")
    ordering = ("username",)

    fieldsets = DjangoUserAdmin.fieldsets + (
        (
            _("Ordering profile"),
            {"fields": ("role", "display_name", "phone", "gcash_number")},
        ),
    )

    add_fieldsets = DjangoUserAdmin.add_fieldsets + (
        (
            _("Ordering profile"),
            {"classes": ("wide",), "fields": ("role", "display_name", "phone", "gcash_number")},
        ),
    )
