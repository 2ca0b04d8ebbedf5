"""Security helpers shared by the clients."""

from __future__ import annotations

import datetime as _dt
from email.utils import parsedate_to_datetime
from typing import Iterable, Mapping
from urllib.parse import urlparse


SENSITIVE_HEADERS = {
    "authorization",
    "proxy-authorization",
    "x-api-key",
    "es-secondary-authorization",
}

LOOPBACK_HOSTS = {"localhost", "127.0.0.1", "::1"}


def sanitize_headers(headers: Mapping[str, str] | Iterable[tuple[str, str]]) -> dict[str, str]:
    """Return headers with sensitive values redacted for logging.

    Repeated header names are folded into one comma separated value.
    """
    items = headers.items() if isinstance(headers, Mapping) else headers
    redacted: dict[str, str] = {}
    for key, value in items:
        if key.lower() in SENSITIVE_HEADERS:
            value = "[REDACTED]"
        if key in redacted:
            redacted[key] = f"{redacted[key]}, {value}"
        else:
            redacted[key] = value
    return redacted


def validate_base_url(url: str, *, allow_http: bool = False) -> None:
    """Validate the cluster URL to avoid scheme abuse and cleartext credentials."""
    parsed = urlparse(url)
    if not parsed.scheme or not parsed.netloc:
        raise ValueError("url must include scheme and host")
    if parsed.scheme not in {"http", "https"}:
        raise ValueError(f"Unsupported url scheme: {parsed.scheme}")
    if parsed.scheme == "http" and not allow_http:
        host = (parsed.hostname or "").lower()
        if host not in LOOPBACK_HOSTS:
            raise ValueError("Non-HTTPS url is not allowed without allow_http=True")
    if "\x00" in url:
        raise ValueError("Invalid url")


def parse_retry_after(raw: str | None) -> float | None:
    """Parse Retry-After header values into seconds."""
    if raw is None:
        return None

    raw = raw.strip()
    if not raw:
        return None

    try:
        return max(0.0, float(raw))
    except ValueError:
        pass

    try:
        parsed = parsedate_to_datetime(raw)
    except (ValueError, TypeError, OverflowError):
        return None

    if parsed is None:
        return None

    now = _dt.datetime.now(_dt.timezone.utc)
    if parsed.utcoffset() is None:
        parsed_utc = parsed.replace(tzinfo=_dt.timezone.utc)
    else:
        parsed_utc = parsed.astimezone(_dt.timezone.utc)

    delta = (parsed_utc - now).total_seconds()
    return max(0.0, float(delta))
