from django.contrib import admin

from .models import ChatMessage, ChatReadCursor


@admin.register(ChatMessage)
class ChatMessageAdmin(admin.ModelAdmin):
    list_display = ("order", "sender_name", "sender_role", "message", "timestamp")
    list_filter = ("sender_role",)
    search_fields = ("message", "sender_name")


@admin.register(ChatReadCursor)
class ChatReadCursorAdmin(admin.ModelAdmin):
    list_display = ("order", "user", "last_read_at")
