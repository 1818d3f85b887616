from __future__ import annotations

import json
import logging
from functools import wraps
from typing import Any, Callable, Iterable

from django.http import HttpRequest, JsonResponse

from .errors import AuthenticationRequired, DomainError, InvalidRequest, RateLimitExceeded


log = logging.getLogger(__name__)


def error_response(exc: DomainError) -> JsonResponse:
    resp = JsonResponse({"error": exc.kind, "message": exc.message}, status=exc.status_code)
    if isinstance(exc, RateLimitExceeded):
        resp["Retry-After"] = str(exc.retry_after)
    return resp


def api_view(methods: Iterable[str] = ("GET",), *, login_required: bool = True) -> Callable:
    """JSON endpoint decorator.

    Enforces the HTTP method and authentication, and renders DomainError
    subclasses as ``{"error": kind, "message": ...}``. Views return plain
    dicts/lists or an HttpResponse.
    """
    allowed = {m.upper() for m in methods}

    def decorator(view: Callable) -> Callable:
        @wraps(view)
        def wrapper(request: HttpRequest, *args, **kwargs):
            if request.method not in allowed:
                resp = JsonResponse({"error": "MethodNotAllowed", "message": "Method not allowed."}, status=405)
                resp["Allow"] = ", ".join(sorted(allowed))
                return resp
            try:
                if login_required and not request.user.is_authenticated:
                    raise AuthenticationRequired()
                result = view(request, *args, **kwargs)
            except DomainError as exc:
                log.info("[api] %s %s -> %s", request.method, request.path, exc.kind)
                return error_response(exc)
            if isinstance(result, (dict, list)):
                return JsonResponse(result, safe=False)
            return result

        return wrapper

    return decorator


def json_body(request: HttpRequest) -> dict[str, Any]:
    raw = request.body or b""
    if not raw.strip():
        return {}
    try:
        data = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, ValueError):
        raise InvalidRequest("Request body must be valid JSON.")
    if not isinstance(data, dict):
        raise InvalidRequest("Request body must be a JSON object.")
    return data


def client_ident(request: HttpRequest) -> str:
    """Rate-limit identity: user id when signed in, else client IP."""
    user = getattr(request, "user", None)
    if user is not None and user.is_authenticated:
        return f"user:{user.pk}"
    forwarded = request.META.get("HTTP_X_FORWARDED_FOR")
    if forwarded:
        return "ip:" + forwarded.split(",")[0].strip()
    return "ip:" + request.META.get("REMOTE_ADDR", "anon")


def int_field(data: dict[str, Any], name: str, *, default: int | None = None, required: bool = False) -> int | None:
    value = data.get(name)
    if value is None or value == "":
        if required:
            raise InvalidRequest(f"'{name}' is required.")
        return default
    if isinstance(value, bool):
        raise InvalidRequest(f"'{name}' must be an integer.")
    if isinstance(value, float):
        if not value.is_integer():
            raise InvalidRequest(f"'{name}' must be an integer.")
        return int(value)
    try:
        return int(value)
    except (TypeError, ValueError):
        raise InvalidRequest(f"'{name}' must be an integer.")
