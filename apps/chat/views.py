from django.http import HttpRequest

from apps.common.http import api_view, json_body

from . import services
from .models import ChatMessage


def message_to_dict(msg: ChatMessage | None):
    if msg is None:
        return None
    return {
        "id": str(msg.id),
        "order_id": str(msg.order_id),
        "sender_id": str(msg.sender_id) if msg.sender_id else None,
        "sender_name": msg.sender_name,
        "sender_role": msg.sender_role,
        "message": msg.message,
        "timestamp": msg.timestamp.isoformat(),
    }


@api_view(["GET", "POST"])
def messages(request: HttpRequest, order_id):
    if request.method == "POST":
        msg = services.send_message(request.user, order_id, json_body(request).get("message"))
        return {"message": message_to_dict(msg)}
    return {"messages": [message_to_dict(m) for m in services.list_messages(request.user, order_id)]}


@api_view(["POST"])
def mark_read(request: HttpRequest, order_id):
    cursor = services.mark_as_read(request.user, order_id)
    return {"last_read_at": cursor.last_read_at.isoformat() if cursor else None}


@api_view(["GET"])
def unread(request: HttpRequest):
    ids = [i for i in (request.GET.get("order_ids") or "").split(",") if i.strip()]
    return {
        "orders": [
            {
                "order_id": s.order_id,
                "unread_count": s.unread_count,
                "last_message": message_to_dict(s.last_message),
            }
            for s in services.unread_summary(request.user, ids)
        ]
    }


@api_view(["GET"])
def unread_total(request: HttpRequest):
    return {"unread": services.total_unread(request.user)}
