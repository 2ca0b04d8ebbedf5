"""Per-request overrides and the request description handed to the clients."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Sequence
from urllib.parse import quote

from .exceptions import ElasticValidationError


@dataclass(frozen=True)
class RequestOptions:
    timeout: float | None = None
    max_retries: int | None = None


@dataclass(frozen=True)
class PerformRequestOptions:
    """Everything a client needs to send one request to the cluster.

    ``body`` is sent verbatim when it is ``str`` or ``bytes`` and serialized
    as JSON otherwise. ``None`` means the request carries no body at all.
    """

    method: str
    path: str
    params: Mapping[str, str] = field(default_factory=dict)
    body: Any = None
    headers: Mapping[str, Sequence[str]] | None = None
    timeout: float | None = None
    max_retries: int | None = None

    @classmethod
    def build(
        cls,
        method: str,
        path: str,
        *,
        params: Mapping[str, str] | None = None,
        body: Any = None,
        headers: Mapping[str, Sequence[str]] | None = None,
        options: RequestOptions | None = None,
    ) -> "PerformRequestOptions":
        options = options or RequestOptions()
        return cls(
            method=method,
            path=path,
            params=dict(params or {}),
            body=body,
            headers=headers,
            timeout=options.timeout,
            max_retries=options.max_retries,
        )


def expand_path(template: str, params: Mapping[str, str] | None = None) -> str:
    """Fill ``{name}`` placeholders of a path template with URL-escaped values."""
    escaped = {key: quote(str(value), safe="") for key, value in (params or {}).items()}
    try:
        return template.format_map(escaped)
    except (KeyError, IndexError, ValueError) as exc:
        raise ElasticValidationError(f"cannot expand path template {template!r}", cause=exc) from exc
