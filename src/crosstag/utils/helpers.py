"""Small shared helpers for ids, timestamps and URL handling."""

from collections.abc import Container, Iterable
import secrets
import string
import time
from urllib.parse import quote

_ID_ALPHABET = string.digits + string.ascii_lowercase
_FAVICON_SERVICE = "https://www.google.com/s2/favicons?sz=128&domain_url="


def now_ms() -> int:
    """Current time as epoch milliseconds."""
    return int(time.time() * 1000)


def generate_id(prefix: str, existing: Container[str] = ()) -> str:
    """
    Generate a short random id such as ``tag_k3j9x0a``.

    Args:
        prefix: Entity prefix (``tag``, ``bm`` or ``ws``)
        existing: Ids already taken; generation retries until unused

    Returns:
        A new id not contained in ``existing``
    """
    while True:
        suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(7))
        candidate = f"{prefix}_{suffix}"
        if candidate not in existing:
            return candidate


def favicon_url(url: str) -> str:
    """Thumbnail URL for a bookmark without an explicit thumbnail."""
    return f"{_FAVICON_SERVICE}{quote(url, safe='')}"


def unique(values: Iterable[str]) -> list[str]:
    """Drop duplicates, keeping the first occurrence order."""
    return list(dict.fromkeys(values))
