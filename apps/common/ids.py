import uuid
from typing import Any


def as_uuid(value: Any) -> uuid.UUID | None:
    """Parse a client-supplied id; None for anything that is not a UUID."""
    if value is None or value == "":
        return None
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value).strip())
    except (TypeError, ValueError, AttributeError):
        return None
