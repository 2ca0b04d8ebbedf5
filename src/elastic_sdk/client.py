"""Synchronous and asynchronous clients for the cluster HTTP API."""

from __future__ import annotations

import asyncio
import base64
import json
import logging
import os
import random
import time
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Sequence

import httpx
from pydantic import BaseModel, ValidationError

from .cluster_settings import AsyncClusterUpdateSettingsService, ClusterUpdateSettingsService
from .decoder import Decoder, DefaultDecoder
from .exceptions import (
    ElasticAuthError,
    ElasticHTTPError,
    ElasticNetworkError,
    ElasticNotFoundError,
    ElasticRateLimitError,
    ElasticTimeoutError,
    ElasticValidationError,
)
from .models import ErrorResponse
from .request_options import PerformRequestOptions
from .security import parse_retry_after, sanitize_headers, validate_base_url


logger = logging.getLogger(__name__)

__version__ = "0.1.0"


@dataclass(frozen=True)
class Response:
    """Raw response returned by ``perform_request``."""

    status_code: int
    headers: Mapping[str, str]
    body: bytes
    deprecation_warnings: list[str] = field(default_factory=list)


def _encode_body(body: Any) -> bytes | None:
    if body is None:
        return None
    if isinstance(body, bytes):
        return body
    if isinstance(body, str):
        return body.encode("utf-8")
    if isinstance(body, BaseModel):
        return body.model_dump_json(exclude_none=True).encode("utf-8")
    try:
        return json.dumps(body, separators=(",", ":")).encode("utf-8")
    except (TypeError, ValueError) as exc:
        raise ElasticValidationError("request body is not JSON serializable", cause=exc) from exc


def _normalize_headers(headers: Mapping[str, str] | None) -> dict[str, str]:
    if not headers:
        return {}
    clean: dict[str, str] = {}
    for key, value in headers.items():
        clean[str(key)] = str(value)
    return clean


def _header_values(values: str | Sequence[str]) -> list[str]:
    if isinstance(values, str):
        return [values]
    return [str(v) for v in values]


class _BaseElasticClient:
    default_url = "http://127.0.0.1:9200"
    default_timeout = 30.0
    default_max_retries = 3
    default_retriable_methods = frozenset({"GET", "HEAD", "PUT", "DELETE"})
    retryable_status_codes = frozenset({408, 429, 502, 503, 504})
    retry_base_delay = 0.4
    retry_max_delay = 10.0
    jitter_range = 0.35

    def __init__(
        self,
        *,
        url: str | None = None,
        api_key: str | None = None,
        username: str | None = None,
        password: str | None = None,
        timeout: float = default_timeout,
        max_retries: int = default_max_retries,
        headers: Mapping[str, str] | None = None,
        follow_redirects: bool = False,
        allow_http: bool = False,
        decoder: Decoder | None = None,
        url_env_var: str = "ELASTIC_URL",
        api_key_env_var: str = "ELASTIC_API_KEY",
        username_env_var: str = "ELASTIC_USERNAME",
        password_env_var: str = "ELASTIC_PASSWORD",
    ) -> None:
        self.url = (url or os.getenv(url_env_var) or self.default_url).rstrip("/")
        validate_base_url(self.url, allow_http=allow_http)
        self.api_key = api_key or os.getenv(api_key_env_var)
        self.username = username or os.getenv(username_env_var)
        password = password or os.getenv(password_env_var)
        self.timeout = timeout
        self.max_retries = max_retries
        self.decoder: Decoder = decoder or DefaultDecoder()
        self._default_headers = {
            "Accept": "application/json",
            "User-Agent": f"elastic-python-sdk/{__version__}",
        }
        if self.api_key:
            self._default_headers["Authorization"] = f"ApiKey {self.api_key}"
        elif self.username and password is not None:
            token = base64.b64encode(f"{self.username}:{password}".encode()).decode("ascii")
            self._default_headers["Authorization"] = f"Basic {token}"
        if headers:
            overrides = _normalize_headers(headers)
            lowered = {name.lower() for name in overrides}
            for name in [k for k in self._default_headers if k.lower() in lowered]:
                del self._default_headers[name]
            self._default_headers.update(overrides)

        self._client_kwargs = {
            "base_url": self.url,
            "timeout": timeout,
            "follow_redirects": follow_redirects,
            "trust_env": False,
        }

    @staticmethod
    def _path(path: str) -> str:
        if "://" in path:
            raise ElasticValidationError("Full URLs are not allowed in request path")
        if not path.startswith("/"):
            raise ElasticValidationError("Path must be absolute and start with '/'")
        if "\x00" in path:
            raise ElasticValidationError("Invalid path characters")
        return path

    def _headers(self, request_headers: Mapping[str, Sequence[str]] | None, has_body: bool) -> list[tuple[str, str]]:
        request_headers = request_headers or {}
        overridden = {str(name).lower() for name in request_headers}
        merged = [(k, v) for k, v in self._default_headers.items() if k.lower() not in overridden]
        for name, values in request_headers.items():
            for value in _header_values(values):
                merged.append((str(name), value))
        if has_body and not any(k.lower() == "content-type" for k, _ in merged):
            merged.append(("Content-Type", "application/json"))
        return merged

    def _build_request_timeout(self, options: PerformRequestOptions) -> float:
        timeout = options.timeout if options.timeout is not None else self.timeout
        if timeout <= 0:
            raise ElasticValidationError("timeout must be greater than 0")
        return float(timeout)

    def _build_max_retries(self, options: PerformRequestOptions) -> int:
        max_retries = options.max_retries if options.max_retries is not None else self.max_retries
        if max_retries < 0:
            raise ElasticValidationError("max_retries must be non-negative")
        return int(max_retries)

    def _prepare(self, options: PerformRequestOptions) -> dict[str, Any]:
        method = options.method.upper()
        path = self._path(options.path)
        content = _encode_body(options.body)
        headers = self._headers(options.headers, has_body=content is not None)
        params = dict(options.params) or None
        logger.debug(
            "%s %s params=%s headers=%s",
            method,
            path,
            params,
            sanitize_headers(headers),
        )
        return {
            "method": method,
            "url": path,
            "params": params,
            "content": content,
            "headers": headers,
        }

    def _should_retry(self, method: str, status_code: int, attempt: int, max_retries: int) -> bool:
        if attempt > max_retries:
            return False
        if method not in self.default_retriable_methods:
            return False
        return status_code in self.retryable_status_codes

    @staticmethod
    def _retry_delay(attempt: int, status_code: int | None = None, retry_after: float | None = None) -> float:
        if status_code == 429 and retry_after is not None:
            return min(max(0.0, retry_after), 60.0)
        base = _BaseElasticClient.retry_base_delay * (2 ** max(0, attempt - 1))
        jitter = random.uniform(0, _BaseElasticClient.jitter_range)
        return min(_BaseElasticClient.retry_max_delay, base + jitter)

    @staticmethod
    def _raise_for_status(response: httpx.Response) -> None:
        if response.is_success:
            return
        raw_body = None
        parsed_body = None
        try:
            raw_body = response.text
            if "application/json" in response.headers.get("content-type", "").lower():
                parsed_body = response.json()
        except (ValueError, UnicodeDecodeError):
            parsed_body = None

        message = str(raw_body or f"HTTP {response.status_code}")
        error_type = None
        if isinstance(parsed_body, Mapping):
            try:
                envelope = ErrorResponse.model_validate(parsed_body)
            except ValidationError:
                envelope = None
            if envelope is not None and isinstance(envelope.error, str):
                message = envelope.error
            elif envelope is not None and envelope.error is not None:
                message = envelope.error.reason or message
                error_type = envelope.error.type

        kwargs = {
            "status_code": response.status_code,
            "error_type": error_type,
            "body": parsed_body if parsed_body is not None else raw_body,
            "headers": MappingProxyType(dict(response.headers)),
            "retry_after": parse_retry_after(response.headers.get("Retry-After")),
        }
        if response.status_code in {401, 403}:
            raise ElasticAuthError(message, **kwargs)
        if response.status_code == 404:
            raise ElasticNotFoundError(message, **kwargs)
        if response.status_code == 429:
            raise ElasticRateLimitError(message, **kwargs)
        raise ElasticHTTPError(message, **kwargs)

    @staticmethod
    def _build_response(method: str, response: httpx.Response) -> Response:
        logger.debug("%s %s -> %s", method, response.request.url.path, response.status_code)
        warnings = response.headers.get_list("warning")
        for warning in warnings:
            logger.warning("Deprecation warning from %s %s: %s", method, response.request.url.path, warning)
        return Response(
            status_code=response.status_code,
            headers=MappingProxyType(dict(response.headers)),
            body=response.content,
            deprecation_warnings=warnings,
        )


class ElasticClient(_BaseElasticClient):
    """Synchronous client."""

    def __init__(
        self,
        *,
        url: str | None = None,
        api_key: str | None = None,
        username: str | None = None,
        password: str | None = None,
        timeout: float = _BaseElasticClient.default_timeout,
        max_retries: int = _BaseElasticClient.default_max_retries,
        headers: Mapping[str, str] | None = None,
        follow_redirects: bool = False,
        allow_http: bool = False,
        decoder: Decoder | None = None,
        httpx_client: httpx.Client | None = None,
    ) -> None:
        super().__init__(
            url=url,
            api_key=api_key,
            username=username,
            password=password,
            timeout=timeout,
            max_retries=max_retries,
            headers=headers,
            follow_redirects=follow_redirects,
            allow_http=allow_http,
            decoder=decoder,
        )
        self._httpx = httpx_client or httpx.Client(**self._client_kwargs)

    def __enter__(self) -> "ElasticClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self._httpx.close()

    def perform_request(self, options: PerformRequestOptions) -> Response:
        request = self._prepare(options)
        method = request["method"]
        retries = self._build_max_retries(options)
        timeout = self._build_request_timeout(options)

        attempt = 0
        while True:
            attempt += 1
            try:
                response = self._httpx.request(timeout=timeout, **request)
            except httpx.TimeoutException as exc:
                if attempt > retries:
                    raise ElasticTimeoutError("Request timed out", cause=exc) from exc
                wait = self._retry_delay(attempt)
                logger.warning("%s %s timed out (attempt %d), retrying in %.2fs", method, request["url"], attempt, wait)
                time.sleep(wait)
                continue
            except httpx.NetworkError as exc:
                if attempt > retries:
                    raise ElasticNetworkError("Network error", cause=exc) from exc
                wait = self._retry_delay(attempt)
                logger.warning("%s %s failed (attempt %d): %s", method, request["url"], attempt, exc)
                time.sleep(wait)
                continue
            except httpx.TransportError as exc:
                if attempt > retries or method not in self.default_retriable_methods:
                    raise ElasticNetworkError("Transport error", cause=exc) from exc
                wait = self._retry_delay(attempt)
                logger.warning("%s %s failed (attempt %d): %s", method, request["url"], attempt, exc)
                time.sleep(wait)
                continue

            if response.is_success:
                break
            if self._should_retry(method, response.status_code, attempt, retries):
                wait = self._retry_delay(
                    attempt,
                    status_code=response.status_code,
                    retry_after=parse_retry_after(response.headers.get("Retry-After")),
                )
                logger.warning(
                    "%s %s returned %d (attempt %d), retrying in %.2fs",
                    method,
                    request["url"],
                    response.status_code,
                    attempt,
                    wait,
                )
                time.sleep(wait)
                continue
            break

        self._raise_for_status(response)
        return self._build_response(method, response)

    def cluster_update_settings(self) -> ClusterUpdateSettingsService:
        return ClusterUpdateSettingsService(self)

    def cluster_get_settings(self) -> ClusterUpdateSettingsService:
        return ClusterUpdateSettingsService(self).read()


class AsyncElasticClient(_BaseElasticClient):
    """Asynchronous client."""

    def __init__(
        self,
        *,
        url: str | None = None,
        api_key: str | None = None,
        username: str | None = None,
        password: str | None = None,
        timeout: float = _BaseElasticClient.default_timeout,
        max_retries: int = _BaseElasticClient.default_max_retries,
        headers: Mapping[str, str] | None = None,
        follow_redirects: bool = False,
        allow_http: bool = False,
        decoder: Decoder | None = None,
        httpx_client: httpx.AsyncClient | None = None,
    ) -> None:
        super().__init__(
            url=url,
            api_key=api_key,
            username=username,
            password=password,
            timeout=timeout,
            max_retries=max_retries,
            headers=headers,
            follow_redirects=follow_redirects,
            allow_http=allow_http,
            decoder=decoder,
        )
        self._httpx = httpx_client or httpx.AsyncClient(**self._client_kwargs)

    async def __aenter__(self) -> "AsyncElasticClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._httpx.aclose()

    async def perform_request(self, options: PerformRequestOptions) -> Response:
        request = self._prepare(options)
        method = request["method"]
        retries = self._build_max_retries(options)
        timeout = self._build_request_timeout(options)

        attempt = 0
        while True:
            attempt += 1
            try:
                response = await self._httpx.request(timeout=timeout, **request)
            except httpx.TimeoutException as exc:
                if attempt > retries:
                    raise ElasticTimeoutError("Request timed out", cause=exc) from exc
                wait = self._retry_delay(attempt)
                logger.warning("%s %s timed out (attempt %d), retrying in %.2fs", method, request["url"], attempt, wait)
                await asyncio.sleep(wait)
                continue
            except httpx.NetworkError as exc:
                if attempt > retries:
                    raise ElasticNetworkError("Network error", cause=exc) from exc
                wait = self._retry_delay(attempt)
                logger.warning("%s %s failed (attempt %d): %s", method, request["url"], attempt, exc)
                await asyncio.sleep(wait)
                continue
            except httpx.TransportError as exc:
                if attempt > retries or method not in self.default_retriable_methods:
                    raise ElasticNetworkError("Transport error", cause=exc) from exc
                wait = self._retry_delay(attempt)
                logger.warning("%s %s failed (attempt %d): %s", method, request["url"], attempt, exc)
                await asyncio.sleep(wait)
                continue

            if response.is_success:
                break
            if self._should_retry(method, response.status_code, attempt, retries):
                wait = self._retry_delay(
                    attempt,
                    status_code=response.status_code,
                    retry_after=parse_retry_after(response.headers.get("Retry-After")),
                )
                logger.warning(
                    "%s %s returned %d (attempt %d), retrying in %.2fs",
                    method,
                    request["url"],
                    response.status_code,
                    attempt,
                    wait,
                )
                await asyncio.sleep(wait)
                continue
            break

        self._raise_for_status(response)
        return self._build_response(method, response)

    def cluster_update_settings(self) -> AsyncClusterUpdateSettingsService:
        return AsyncClusterUpdateSettingsService(self)

    def cluster_get_settings(self) -> AsyncClusterUpdateSettingsService:
        return AsyncClusterUpdateSettingsService(self).read()
