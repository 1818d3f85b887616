from __future__ import annotations

import logging
from urllib.parse import urlparse

from django.core.files.storage import default_storage

from .errors import InvalidPaymentProof


log = logging.getLogger(__name__)


def resolve_to_url(storage_ref: str | None) -> str:
    """Turn an uploaded object reference into a URL.

    Absolute http(s) URLs are accepted as already resolved; anything else must
    name an existing object in ``default_storage``.
    """
    ref = (storage_ref or "").strip()
    if not ref:
        raise InvalidPaymentProof()
    parsed = urlparse(ref)
    if parsed.scheme in {"http", "https"}:
        if not parsed.netloc:
            raise InvalidPaymentProof()
        return ref
    if parsed.scheme or ref.startswith("/") or ".." in ref.split("/"):
        raise InvalidPaymentProof()
    try:
        if not default_storage.exists(ref):
            raise InvalidPaymentProof()
        return default_storage.url(ref)
    except InvalidPaymentProof:
        raise
    except Exception:
        log.exception("[storage] failed to resolve ref=%s", ref)
        raise InvalidPaymentProof()
