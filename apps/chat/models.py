from django.conf import settings
from django.db import models
from django.utils import timezone

from apps.common.models import BaseModel


class ChatMessage(BaseModel):
    ROLE_OWNER = "owner"
    ROLE_CUSTOMER = "customer"
    ROLE_CHOICES = [(ROLE_OWNER, "Owner"), (ROLE_CUSTOMER, "Customer")]

    order = models.ForeignKey("orders.Order", on_delete=models.CASCADE, related_name="chat_messages")
    sender = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, related_name="+")
    sender_name = models.CharField(max_length=160)
    sender_role = models.CharField(max_length=10, choices=ROLE_CHOICES)
    message = models.CharField(max_length=500)
    timestamp = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["timestamp"]
        indexes = [models.Index(fields=["order", "timestamp"], name="chat_msg_order_ts_idx")]


class ChatReadCursor(BaseModel):
    order = models.ForeignKey("orders.Order", on_delete=models.CASCADE, related_name="read_cursors")
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="chat_read_cursors")
    last_read_at = models.DateTimeField()

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["order", "user"], name="chat_cursor_order_user_uniq"),
        ]
