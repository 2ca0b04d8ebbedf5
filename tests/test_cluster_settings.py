from __future__ import annotations

import json

import httpx
import pytest

from elastic_sdk.client import ElasticClient, Response
from elastic_sdk.cluster_settings import (
    ClusterUpdateSettingsService,
    ReadSettings,
    UpdateSettings,
)
from elastic_sdk.decoder import DefaultDecoder
from elastic_sdk.exceptions import ElasticDecodeError, ElasticHTTPError, ElasticNetworkError
from elastic_sdk.request_options import PerformRequestOptions, RequestOptions


ACK = b'{"acknowledged":true,"shards_acknowledged":true}'


class RecordingClient:
    def __init__(self, body: bytes = ACK, error: Exception | None = None) -> None:
        self.decoder = DefaultDecoder()
        self.body = body
        self.error = error
        self.requests: list[PerformRequestOptions] = []

    def perform_request(self, options: PerformRequestOptions) -> Response:
        self.requests.append(options)
        if self.error is not None:
            raise self.error
        return Response(status_code=200, headers={}, body=self.body)


def _client(handler) -> ElasticClient:
    return ElasticClient(
        url="http://localhost:9200",
        max_retries=0,
        httpx_client=httpx.Client(base_url="http://localhost:9200", transport=httpx.MockTransport(handler)),
    )


def test_build_url_without_options_has_no_params() -> None:
    path, params = ClusterUpdateSettingsService(RecordingClient()).build_url()

    assert path == "/_cluster/settings"
    assert params == {}


def test_build_url_renders_only_set_options() -> None:
    service = (
        ClusterUpdateSettingsService(RecordingClient())
        .pretty(True)
        .human(False)
        .error_trace(True)
        .filter_path("a", "b", "c")
        .include_defaults(False)
        .flat_settings(True)
    )

    _, params = service.build_url()

    assert params == {
        "pretty": "true",
        "human": "false",
        "error_trace": "true",
        "filter_path": "a,b,c",
        "include_defaults": "false",
        "flat_settings": "true",
    }


def test_build_url_skips_empty_filter_path() -> None:
    _, params = ClusterUpdateSettingsService(RecordingClient()).filter_path().flat_settings(False).build_url()

    assert params == {"flat_settings": "false"}


def test_validate_accepts_empty_builder() -> None:
    assert ClusterUpdateSettingsService(RecordingClient()).validate() is None


def test_operation_follows_body_fields() -> None:
    service = ClusterUpdateSettingsService(RecordingClient())
    assert service.operation() == ReadSettings()

    service.body('{"transient":{}}')
    assert service.operation() == UpdateSettings('{"transient":{}}')

    service.body_json({"persistent": {}})
    assert service.operation() == UpdateSettings({"persistent": {}})

    service.read()
    assert service.operation() == ReadSettings()

    service.update('{"persistent":{}}')
    assert service.operation() == UpdateSettings('{"persistent":{}}')


def test_do_without_body_issues_get() -> None:
    captured: dict[str, object] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["method"] = request.method
        captured["path"] = request.url.path
        captured["params"] = dict(request.url.params)
        captured["content"] = request.content
        return httpx.Response(200, json={"persistent": {"cluster.routing.allocation.enable": "all"}, "transient": {}})

    with _client(handler) as client:
        result = client.cluster_update_settings().flat_settings(True).include_defaults(False).do()

    assert captured == {
        "method": "GET",
        "path": "/_cluster/settings",
        "params": {"flat_settings": "true", "include_defaults": "false"},
        "content": b"",
    }
    assert result.persistent == {"cluster.routing.allocation.enable": "all"}


def test_do_prefers_json_body_over_string_body() -> None:
    captured: dict[str, object] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["method"] = request.method
        captured["body"] = json.loads(request.content.decode())
        captured["content_type"] = request.headers.get("content-type")
        return httpx.Response(200, json={"acknowledged": True})

    with _client(handler) as client:
        client.cluster_update_settings().body_string('{"transient":{"a":1}}').body_json({}).do()

    assert captured == {"method": "PUT", "body": {}, "content_type": "application/json"}


def test_do_sends_string_body_verbatim() -> None:
    raw = '{"persistent": {"indices.recovery.max_bytes_per_sec": "50mb"}}'
    captured: dict[str, object] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["method"] = request.method
        captured["content"] = request.content
        return httpx.Response(200, json={"acknowledged": True, "persistent": {}, "transient": {}})

    with _client(handler) as client:
        result = client.cluster_update_settings().body(raw).do()

    assert captured == {"method": "PUT", "content": raw.encode()}
    assert result.acknowledged is True


def test_do_propagates_client_error_unchanged() -> None:
    error = ElasticNetworkError("Network error")
    client = RecordingClient(error=error)

    with pytest.raises(ElasticNetworkError) as excinfo:
        ClusterUpdateSettingsService(client).do()

    assert excinfo.value is error


def test_do_surfaces_cluster_error_envelope() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            400,
            json={
                "error": {
                    "type": "illegal_argument_exception",
                    "reason": "persistent setting [foo], not recognized",
                },
                "status": 400,
            },
        )

    with _client(handler) as client:
        with pytest.raises(ElasticHTTPError) as excinfo:
            client.cluster_update_settings().body_json({"persistent": {"foo": 1}}).do()

    assert excinfo.value.status_code == 400
    assert excinfo.value.error_type == "illegal_argument_exception"
    assert "not recognized" in excinfo.value.args[0]


def test_do_decodes_acknowledgement() -> None:
    result = ClusterUpdateSettingsService(RecordingClient(body=ACK)).do()

    assert result.acknowledged is True
    assert result.shards_acknowledged is True
    assert result.persistent == {}
    assert result.defaults is None
    assert "index" not in result.model_dump()


def test_do_raises_decode_error_for_bad_body() -> None:
    with pytest.raises(ElasticDecodeError):
        ClusterUpdateSettingsService(RecordingClient(body=b"<html>oops</html>")).do()

    with pytest.raises(ElasticDecodeError):
        ClusterUpdateSettingsService(RecordingClient(body=b"")).do()


def test_header_accumulates_and_headers_replaces() -> None:
    client = RecordingClient()
    service = ClusterUpdateSettingsService(client).header("X-Opaque-Id", "a").header("x-opaque-id", "b")
    service.do()

    assert client.requests[-1].headers == {"X-Opaque-Id": ["a", "b"]}

    service.headers({"Accept-Encoding": "gzip"}).do()

    assert client.requests[-1].headers == {"Accept-Encoding": ["gzip"]}


def test_repeated_header_values_reach_the_wire() -> None:
    captured: dict[str, object] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["opaque"] = request.headers.get_list("x-opaque-id")
        return httpx.Response(200, json={"acknowledged": True})

    with _client(handler) as client:
        client.cluster_update_settings().header("X-Opaque-Id", "a").header("X-Opaque-Id", "b").do()

    assert captured["opaque"] == ["a", "b"]


def test_do_forwards_request_options() -> None:
    client = RecordingClient()

    ClusterUpdateSettingsService(client).do(options=RequestOptions(timeout=5.0, max_retries=0))

    request = client.requests[-1]
    assert request.method == "GET"
    assert request.body is None
    assert request.headers is None
    assert request.timeout == 5.0
    assert request.max_retries == 0
