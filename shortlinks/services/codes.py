"""Short code generation."""

import secrets
from typing import Optional

from shortlinks.core.config import settings


def generate_short_code(length: Optional[int] = None) -> str:
    """
    Generate a random short code.

    Characters are drawn uniformly from ``settings.SHORT_CODE_CHARS``
    (letters and digits by default). Uniqueness is not checked here; a
    collision surfaces as a duplicate short code when the link is inserted.

    Args:
        length: Number of characters, ``settings.SHORT_CODE_LENGTH`` when omitted

    Returns:
        str: A random short code
    """
    if length is None:
        length = settings.SHORT_CODE_LENGTH
    chars = settings.SHORT_CODE_CHARS
    return "".join(secrets.choice(chars) for _ in range(length))
