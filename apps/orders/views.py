from django.http import HttpRequest

from apps.common.errors import InvalidRequest
from apps.common.http import api_view, json_body

from . import serializers, services


@api_view(["GET", "POST"])
def orders_collection(request: HttpRequest):
    if request.method == "POST":
        order = services.create_order(request.user, json_body(request))
        return {"id": str(order.id), "order": serializers.order_to_dict(order)}
    orders = services.list_orders(request.user, status=request.GET.get("status"))
    return {"orders": [serializers.order_to_dict(o) for o in orders]}


@api_view(["GET"])
def order_detail(request: HttpRequest, order_id):
    order = services.get_order(request.user, order_id)
    return {"order": serializers.order_to_dict(order)}


@api_view(["POST"])
def order_status(request: HttpRequest, order_id):
    order = services.update_order_status(request.user, order_id, json_body(request))
    return {"id": str(order.id), "status": order.status}


@api_view(["POST"])
def order_items(request: HttpRequest, order_id):
    data = json_body(request)
    modification_type = data.get("modification_type") or None
    note = data.get("note") or ""
    if modification_type is not None and not isinstance(modification_type, str):
        raise InvalidRequest("'modification_type' must be a string.")
    if not isinstance(note, str):
        raise InvalidRequest("'note' must be a string.")
    order = services.update_order_items(
        request.user, order_id, data.get("items"), modification_type=modification_type, note=note
    )
    return {"order": serializers.order_to_dict(order)}


@api_view(["GET"])
def order_history(request: HttpRequest, order_id):
    mods = services.order_history(request.user, order_id)
    return {"history": [serializers.modification_to_dict(m) for m in mods]}


@api_view(["GET"])
def all_history(request: HttpRequest):
    mods = services.order_history(request.user)
    return {"history": [serializers.modification_to_dict(m) for m in mods]}


@api_view(["GET"])
def denial_reasons(request: HttpRequest):
    reasons = services.denial_reasons(request.user)
    return {"reasons": [serializers.denial_reason_to_dict(r) for r in reasons]}


@api_view(["POST"])
def distance(request: HttpRequest):
    quote = services.distance_quote(request.user, json_body(request))
    return serializers.quote_to_dict(quote)
