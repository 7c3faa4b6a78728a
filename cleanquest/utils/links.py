"""Shareable join links: <app-origin>?join=<CODE>."""

from urllib.parse import parse_qs, urlencode, urlsplit

from cleanquest.config import settings
from cleanquest.utils.security import normalize_code


def build_share_link(code: str, origin: str | None = None) -> str:
    origin = (origin or settings.app_origin).rstrip("/")
    return f"{origin}?{urlencode({'join': code})}"


def parse_join_code(url: str) -> str | None:
    """Extract the uppercased `join` parameter from a launch URL or bare query.

    Returns None when the parameter is absent or empty.
    """
    query = urlsplit(url).query if "?" in url else url.lstrip("?")
    values = parse_qs(query).get("join")
    if not values:
        return None
    code = normalize_code(values[0])
    return code or None
