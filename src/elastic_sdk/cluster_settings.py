"""Cluster update settings service: review and change cluster-wide settings.

The same builder reads and writes settings. Without a body it issues
``GET /_cluster/settings``; with one it issues ``PUT /_cluster/settings``.
Callers that prefer to state their intent can use ``read()`` and
``update(body)`` instead of the body setters.

    with ElasticClient() as client:
        current = client.cluster_update_settings().flat_settings(True).do()
        client.cluster_update_settings().update(
            {"persistent": {"cluster.routing.allocation.enable": "primaries"}}
        ).do()
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, ClassVar, Mapping, Sequence, TypeVar, Union

from .models import ClusterUpdateSettingsResponse
from .request_options import PerformRequestOptions, RequestOptions, expand_path

if TYPE_CHECKING:
    from .client import AsyncElasticClient, ElasticClient


CLUSTER_SETTINGS_PATH = "/_cluster/settings"


@dataclass(frozen=True)
class ReadSettings:
    method: ClassVar[str] = "GET"


@dataclass(frozen=True)
class UpdateSettings:
    body: Any
    method: ClassVar[str] = "PUT"


ClusterSettingsOperation = Union[ReadSettings, UpdateSettings]

ServiceT = TypeVar("ServiceT", bound="_BaseClusterUpdateSettingsService")


def _format_bool(value: bool) -> str:
    return "true" if value else "false"


class _BaseClusterUpdateSettingsService:
    def __init__(self) -> None:
        self._pretty: bool | None = None
        self._human: bool | None = None
        self._error_trace: bool | None = None
        self._filter_path: list[str] = []
        self._headers: dict[str, list[str]] | None = None
        self._include_defaults: bool | None = None
        self._flat_settings: bool | None = None
        self._body_json: Any = None
        self._body_string: str | None = None

    def pretty(self: ServiceT, pretty: bool) -> ServiceT:
        """Ask the cluster for a formatted JSON response."""
        self._pretty = pretty
        return self

    def human(self: ServiceT, human: bool) -> ServiceT:
        """Return human readable values for statistics, e.g. ``7.5mb``."""
        self._human = human
        return self

    def error_trace(self: ServiceT, error_trace: bool) -> ServiceT:
        """Include the stack trace of returned errors."""
        self._error_trace = error_trace
        return self

    def filter_path(self: ServiceT, *filter_path: str) -> ServiceT:
        """Restrict the response to the given dotted paths."""
        self._filter_path = list(filter_path)
        return self

    def header(self: ServiceT, name: str, value: str) -> ServiceT:
        """Add a request header. Repeated names keep every value."""
        if self._headers is None:
            self._headers = {}
        for existing in self._headers:
            if existing.lower() == name.lower():
                self._headers[existing].append(value)
                break
        else:
            self._headers[name] = [value]
        return self

    def headers(self: ServiceT, headers: Mapping[str, str | Sequence[str]]) -> ServiceT:
        """Replace all request headers."""
        self._headers = {
            name: [values] if isinstance(values, str) else list(values)
            for name, values in headers.items()
        }
        return self

    def include_defaults(self: ServiceT, include_defaults: bool) -> ServiceT:
        """Also return settings that were not set explicitly."""
        self._include_defaults = include_defaults
        return self

    def flat_settings(self: ServiceT, flat_settings: bool) -> ServiceT:
        """Return settings keys in flat, dotted form."""
        self._flat_settings = flat_settings
        return self

    def body(self: ServiceT, body: str) -> ServiceT:
        """Alias for ``body_string``."""
        return self.body_string(body)

    def body_string(self: ServiceT, body: str) -> ServiceT:
        """Set the settings update as a pre-serialized JSON document."""
        self._body_string = body
        return self

    def body_json(self: ServiceT, body: Any) -> ServiceT:
        """Set the settings update as a value serialized to JSON on send.

        Takes precedence over ``body_string`` when both are set.
        """
        self._body_json = body
        return self

    def read(self: ServiceT) -> ServiceT:
        self._body_json = None
        self._body_string = None
        return self

    def update(self: ServiceT, body: Any) -> ServiceT:
        if isinstance(body, str):
            self._body_json = None
            self._body_string = body
        else:
            self._body_json = body
            self._body_string = None
        return self

    def validate(self) -> None:
        """No parameters are required to read or update cluster settings."""
        return None

    def build_url(self) -> tuple[str, dict[str, str]]:
        path = expand_path(CLUSTER_SETTINGS_PATH)

        params: dict[str, str] = {}
        if self._pretty is not None:
            params["pretty"] = _format_bool(self._pretty)
        if self._human is not None:
            params["human"] = _format_bool(self._human)
        if self._error_trace is not None:
            params["error_trace"] = _format_bool(self._error_trace)
        if self._filter_path:
            params["filter_path"] = ",".join(self._filter_path)
        if self._include_defaults is not None:
            params["include_defaults"] = _format_bool(self._include_defaults)
        if self._flat_settings is not None:
            params["flat_settings"] = _format_bool(self._flat_settings)
        return path, params

    def operation(self) -> ClusterSettingsOperation:
        if self._body_json is not None:
            return UpdateSettings(self._body_json)
        if self._body_string is not None:
            return UpdateSettings(self._body_string)
        return ReadSettings()

    def _perform_options(self, options: RequestOptions | None) -> PerformRequestOptions:
        self.validate()
        path, params = self.build_url()
        operation = self.operation()
        headers = {name: list(values) for name, values in self._headers.items()} if self._headers else None
        return PerformRequestOptions.build(
            operation.method,
            path,
            params=params,
            body=operation.body if isinstance(operation, UpdateSettings) else None,
            headers=headers,
            options=options,
        )


class ClusterUpdateSettingsService(_BaseClusterUpdateSettingsService):
    """Read or update cluster-wide settings through an ``ElasticClient``."""

    def __init__(self, client: ElasticClient) -> None:
        super().__init__()
        self._client = client

    def do(self, *, options: RequestOptions | None = None) -> ClusterUpdateSettingsResponse:
        request = self._perform_options(options)
        response = self._client.perform_request(request)
        return self._client.decoder.decode(response.body, ClusterUpdateSettingsResponse)


class AsyncClusterUpdateSettingsService(_BaseClusterUpdateSettingsService):
    """Read or update cluster-wide settings through an ``AsyncElasticClient``."""

    def __init__(self, client: AsyncElasticClient) -> None:
        super().__init__()
        self._client = client

    async def do(self, *, options: RequestOptions | None = None) -> ClusterUpdateSettingsResponse:
        request = self._perform_options(options)
        response = await self._client.perform_request(request)
        return self._client.decoder.decode(response.body, ClusterUpdateSettingsResponse)
