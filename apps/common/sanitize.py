import html
import re

import bleach

_JS_SCHEME = re.compile(r"javascript\s*:", re.IGNORECASE)
_INLINE_HANDLER = re.compile(r"\bon\w+\s*=", re.IGNORECASE)
_MAX_PASSES = 5


def sanitize_text(value: str) -> str:
    """Strip every tag and inline script vector from user text.

    Entities are unescaped and the input is re-cleaned until stable, so
    ``&lt;script&gt;`` cannot survive as a tag after a later render.
    """
    text = value or ""
    for _ in range(_MAX_PASSES):
        cleaned = bleach.clean(text, tags=[], attributes={}, strip=True, strip_comments=True)
        cleaned = html.unescape(cleaned)
        cleaned = _JS_SCHEME.sub("", cleaned)
        cleaned = _INLINE_HANDLER.sub("", cleaned)
        if cleaned == text:
            break
        text = cleaned
    return text.strip()
