import secrets
import string
from typing import Callable

# no 0/O or 1/I, codes are read aloud over chat and phone
ORDER_CODE_ALPHABET = "".join(ch for ch in string.ascii_uppercase + string.digits if ch not in "0O1I")
ORDER_CODE_LENGTH = 6


def generate_unique_code(
    *,
    exists: Callable[[str], bool],
    length: int = ORDER_CODE_LENGTH,
    alphabet: str = ORDER_CODE_ALPHABET,
    max_attempts: int = 12,
) -> str:
    """Short human-facing code (``K3J9QZ``) that ``exists`` reports as free."""
    for _ in range(max_attempts):
        code = "".join(secrets.choice(alphabet) for _ in range(length))
        if not exists(code):
            return code
    raise RuntimeError(f"no free code after {max_attempts} attempts")
