"""Python client for the cluster settings API of Elasticsearch-compatible engines."""

from .client import AsyncElasticClient, ElasticClient, Response, __version__
from .cluster_settings import (
    AsyncClusterUpdateSettingsService,
    ClusterSettingsOperation,
    ClusterUpdateSettingsService,
    ReadSettings,
    UpdateSettings,
)
from .decoder import Decoder, DefaultDecoder
from .exceptions import (
    ElasticAuthError,
    ElasticDecodeError,
    ElasticError,
    ElasticHTTPError,
    ElasticNetworkError,
    ElasticNotFoundError,
    ElasticRateLimitError,
    ElasticTimeoutError,
    ElasticValidationError,
)
from .models import ClusterUpdateSettingsResponse
from .request_options import PerformRequestOptions, RequestOptions

__all__ = [
    "AsyncClusterUpdateSettingsService",
    "AsyncElasticClient",
    "ClusterSettingsOperation",
    "ClusterUpdateSettingsResponse",
    "ClusterUpdateSettingsService",
    "Decoder",
    "DefaultDecoder",
    "ElasticAuthError",
    "ElasticClient",
    "ElasticDecodeError",
    "ElasticError",
    "ElasticHTTPError",
    "ElasticNetworkError",
    "ElasticNotFoundError",
    "ElasticRateLimitError",
    "ElasticTimeoutError",
    "ElasticValidationError",
    "PerformRequestOptions",
    "ReadSettings",
    "RequestOptions",
    "Response",
    "UpdateSettings",
    "__version__",
]
