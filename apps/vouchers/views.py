from django.http import HttpRequest

from apps.common.errors import InvalidRequest
from apps.common.http import api_view, client_ident
from apps.common.rate_limit import enforce

from . import services


@api_view(["GET"])
def validate_voucher(request: HttpRequest):
    enforce("vouchers.validate", client_ident(request))
    code = request.GET.get("code", "")
    try:
        amount = int(request.GET.get("amount_cents", ""))
    except ValueError:
        raise InvalidRequest("'amount_cents' must be an integer.")
    if amount < 0:
        raise InvalidRequest("'amount_cents' must not be negative.")
    result = services.preview(code, amount)
    return {"valid": True, "code": result.code, "discount_cents": result.discount_cents}
