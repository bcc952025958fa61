"""UniFi Network API modules.

This package provides the request executor, pagination and composite
fetches for the UniFi Network controller API.

Classes:
    UnifiClient: Async executor for Endpoint descriptions (one call, one round trip)
    ClientConfig: Frozen connection settings (base URL, prefix, API key, timeouts)
    PageStream: Lazy offset/limit page stream with fetch_all()
    CompositeFetcher: Parallel device joins and per-device client statistics

Endpoints:
    GetSites, GetDevices, GetDevice, GetDeviceDetails, GetDeviceStatistics,
    RestartDevice, GetClients, GetClient, GetNetworks, CreateNetwork,
    UpdateNetwork, DeleteNetwork

Exceptions:
    UnifiError: Base exception for all client errors
    ConfigurationError: Missing or invalid configuration
    SerializationError: Request body could not be encoded
    RequestError: One HTTP round trip failed
    TransportError / ConnectionError / TimeoutError: No HTTP response
    StatusError: Non-2xx response (raw body kept)
    DecodeError: Unparseable success response (raw body kept)
    NotFoundError: By-id lookup returned nothing
"""
from .client import API_KEY_HEADER, DEFAULT_BASE_PATH, ClientConfig, UnifiClient
from .composite import CompositeFetcher, DeviceWithInfo
from .concurrency import gather_fail_fast, process_concurrent
from .endpoint import Endpoint, HttpMethod, ensure_resolved, pagination_params
from .endpoints import (
    CreateNetwork,
    DeleteNetwork,
    GetClient,
    GetClients,
    GetDevice,
    GetDeviceDetails,
    GetDevices,
    GetDeviceStatistics,
    GetNetworks,
    GetSites,
    RestartDevice,
    UpdateNetwork,
)
from .exceptions import (
    ConfigurationError,
    ConnectionError,
    DecodeError,
    NotFoundError,
    RequestError,
    SerializationError,
    StatusError,
    TimeoutError,
    TransportError,
    UnifiError,
)
from .models import (
    AccessType,
    Client,
    ClientType,
    Device,
    DeviceDetails,
    DeviceState,
    DeviceStatistics,
    Network,
    NetworkRequest,
    Site,
)
from .pagination import (
    DEFAULT_PAGE_SIZE,
    PageCursor,
    PageStream,
    PaginationConfig,
    StreamState,
)
from .response import ActionResponse, DeleteResponse, MutationResponse, PageEnvelope
from .stats import (
    DeviceClientStats,
    aggregate_by,
    aggregate_clients_by_device,
    get_device_client_stats,
)

__all__ = [
    # Client
    "UnifiClient",
    "ClientConfig",
    "DEFAULT_BASE_PATH",
    "API_KEY_HEADER",
    # Endpoint capability
    "Endpoint",
    "HttpMethod",
    "ensure_resolved",
    "pagination_params",
    # Endpoints
    "GetSites",
    "GetDevices",
    "GetDevice",
    "GetDeviceDetails",
    "GetDeviceStatistics",
    "RestartDevice",
    "GetClients",
    "GetClient",
    "GetNetworks",
    "CreateNetwork",
    "UpdateNetwork",
    "DeleteNetwork",
    # Responses
    "PageEnvelope",
    "MutationResponse",
    "DeleteResponse",
    "ActionResponse",
    # Models
    "Site",
    "Device",
    "DeviceState",
    "DeviceDetails",
    "DeviceStatistics",
    "Client",
    "ClientType",
    "AccessType",
    "Network",
    "NetworkRequest",
    # Pagination
    "PageStream",
    "PageCursor",
    "PaginationConfig",
    "StreamState",
    "DEFAULT_PAGE_SIZE",
    # Composite fetches
    "CompositeFetcher",
    "DeviceWithInfo",
    "gather_fail_fast",
    "process_concurrent",
    # Statistics
    "DeviceClientStats",
    "aggregate_by",
    "aggregate_clients_by_device",
    "get_device_client_stats",
    # Exceptions
    "UnifiError",
    "ConfigurationError",
    "SerializationError",
    "RequestError",
    "TransportError",
    "ConnectionError",
    "TimeoutError",
    "StatusError",
    "DecodeError",
    "NotFoundError",
]
