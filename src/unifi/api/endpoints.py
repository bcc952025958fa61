"""Concrete endpoint descriptors for the routes the client uses.

Each class is an independent frozen dataclass satisfying the Endpoint
protocol; nothing here inherits from a shared base. Paths are relative to
the configured API prefix (e.g. "api/v1").

    Sites      GET    sites
    Devices    GET    sites/{siteId}/devices
               GET    sites/{siteId}/devices/{id}
               GET    sites/{siteId}/devices/{id}/statistics/latest
               POST   sites/{siteId}/devices/{id}/actions
    Clients    GET    sites/{siteId}/clients
               GET    sites/{siteId}/clients/{id}
    Networks   GET    sites/{siteId}/networks
               POST   sites/{siteId}/networks
               PUT    sites/{siteId}/networks/{id}
               DELETE sites/{siteId}/networks/{id}
"""
from dataclasses import dataclass
from typing import Any, Optional, Union

from .endpoint import HttpMethod, pagination_params
from .exceptions import SerializationError
from .models import (
    Client,
    Device,
    DeviceDetails,
    DeviceStatistics,
    Network,
    NetworkRequest,
    Site,
)
from .response import ActionResponse, DeleteResponse, MutationResponse, PageEnvelope


# ============================================
# Sites
# ============================================

@dataclass(frozen=True)
class GetSites:
    """List the sites visible to the API key."""

    offset: Optional[int] = None
    limit: Optional[int] = None

    def method(self) -> HttpMethod:
        return HttpMethod.GET

    def path(self) -> str:
        return "sites"

    def query_params(self) -> list[tuple[str, str]]:
        return pagination_params(self.offset, self.limit)

    def body(self) -> Optional[Any]:
        return None

    def parse_response(self, payload: Any) -> PageEnvelope[Site]:
        return PageEnvelope.from_payload(payload, Site.model_validate)


# ============================================
# Devices
# ============================================

@dataclass(frozen=True)
class GetDevices:
    """List the devices of a site, optionally one page of them."""

    site_id: str
    offset: Optional[int] = None
    limit: Optional[int] = None

    @classmethod
    def with_pagination(cls, site_id: str, offset: int, limit: int) -> "GetDevices":
        return cls(site_id=site_id, offset=offset, limit=limit)

    def method(self) -> HttpMethod:
        return HttpMethod.GET

    def path(self) -> str:
        return f"sites/{self.site_id}/devices"

    def query_params(self) -> list[tuple[str, str]]:
        return pagination_params(self.offset, self.limit)

    def body(self) -> Optional[Any]:
        return None

    def parse_response(self, payload: Any) -> PageEnvelope[Device]:
        return PageEnvelope.from_payload(payload, Device.model_validate)


@dataclass(frozen=True)
class GetDevice:
    """Find one device by id through the filtered devices list.

    The result is a (possibly empty) page; an empty page means the device
    does not exist.
    """

    site_id: str
    device_id: str

    def method(self) -> HttpMethod:
        return HttpMethod.GET

    def path(self) -> str:
        return f"sites/{self.site_id}/devices"

    def query_params(self) -> list[tuple[str, str]]:
        return [("filter", f"id.eq({self.device_id})")]

    def body(self) -> Optional[Any]:
        return None

    def parse_response(self, payload: Any) -> PageEnvelope[Device]:
        return PageEnvelope.from_payload(payload, Device.model_validate)


@dataclass(frozen=True)
class GetDeviceDetails:
    """Ports, radios, uplink and firmware of one device."""

    site_id: str
    device_id: str

    def method(self) -> HttpMethod:
        return HttpMethod.GET

    def path(self) -> str:
        return f"sites/{self.site_id}/devices/{self.device_id}"

    def query_params(self) -> list[tuple[str, str]]:
        return []

    def body(self) -> Optional[Any]:
        return None

    def parse_response(self, payload: Any) -> DeviceDetails:
        return DeviceDetails.model_validate(payload)


@dataclass(frozen=True)
class GetDeviceStatistics:
    """Latest CPU, memory, load and uplink figures of one device."""

    site_id: str
    device_id: str

    def method(self) -> HttpMethod:
        return HttpMethod.GET

    def path(self) -> str:
        return f"sites/{self.site_id}/devices/{self.device_id}/statistics/latest"

    def query_params(self) -> list[tuple[str, str]]:
        return []

    def body(self) -> Optional[Any]:
        return None

    def parse_response(self, payload: Any) -> DeviceStatistics:
        return DeviceStatistics.model_validate(payload)


@dataclass(frozen=True)
class RestartDevice:
    site_id: str
    device_id: str

    def method(self) -> HttpMethod:
        return HttpMethod.POST

    def path(self) -> str:
        return f"sites/{self.site_id}/devices/{self.device_id}/actions"

    def query_params(self) -> list[tuple[str, str]]:
        return []

    def body(self) -> Optional[Any]:
        return {"action": "RESTART"}

    def parse_response(self, payload: Any) -> ActionResponse:
        return ActionResponse.from_payload(payload)


# ============================================
# Clients
# ============================================

@dataclass(frozen=True)
class GetClients:
    """List the connected clients of a site, optionally one page of them."""

    site_id: str
    offset: Optional[int] = None
    limit: Optional[int] = None

    @classmethod
    def with_pagination(cls, site_id: str, offset: int, limit: int) -> "GetClients":
        return cls(site_id=site_id, offset=offset, limit=limit)

    def method(self) -> HttpMethod:
        return HttpMethod.GET

    def path(self) -> str:
        return f"sites/{self.site_id}/clients"

    def query_params(self) -> list[tuple[str, str]]:
        return pagination_params(self.offset, self.limit)

    def body(self) -> Optional[Any]:
        return None

    def parse_response(self, payload: Any) -> PageEnvelope[Client]:
        return PageEnvelope.from_payload(payload, Client.model_validate)


@dataclass(frozen=True)
class GetClient:
    site_id: str
    client_id: str

    def method(self) -> HttpMethod:
        return HttpMethod.GET

    def path(self) -> str:
        return f"sites/{self.site_id}/clients/{self.client_id}"

    def query_params(self) -> list[tuple[str, str]]:
        return []

    def body(self) -> Optional[Any]:
        return None

    def parse_response(self, payload: Any) -> Client:
        return Client.model_validate(payload)


# ============================================
# Networks
# ============================================

NetworkBody = Union[NetworkRequest, dict[str, Any]]


def _network_payload(request: NetworkBody, endpoint: str) -> dict[str, Any]:
    if isinstance(request, NetworkRequest):
        return request.to_payload()
    if isinstance(request, dict):
        return request
    raise SerializationError(
        f"Unsupported network request body: {type(request).__name__}",
        endpoint=endpoint,
    )


@dataclass(frozen=True)
class GetNetworks:
    site_id: str
    offset: Optional[int] = None
    limit: Optional[int] = None

    def method(self) -> HttpMethod:
        return HttpMethod.GET

    def path(self) -> str:
        return f"sites/{self.site_id}/networks"

    def query_params(self) -> list[tuple[str, str]]:
        return pagination_params(self.offset, self.limit)

    def body(self) -> Optional[Any]:
        return None

    def parse_response(self, payload: Any) -> PageEnvelope[Network]:
        return PageEnvelope.from_payload(payload, Network.model_validate)


@dataclass(frozen=True)
class CreateNetwork:
    site_id: str
    request: NetworkBody

    def method(self) -> HttpMethod:
        return HttpMethod.POST

    def path(self) -> str:
        return f"sites/{self.site_id}/networks"

    def query_params(self) -> list[tuple[str, str]]:
        return []

    def body(self) -> Optional[Any]:
        return _network_payload(self.request, self.path())

    def parse_response(self, payload: Any) -> MutationResponse[Network]:
        return MutationResponse.from_payload(payload, Network.model_validate)


@dataclass(frozen=True)
class UpdateNetwork:
    site_id: str
    network_id: str
    request: NetworkBody

    def method(self) -> HttpMethod:
        return HttpMethod.PUT

    def path(self) -> str:
        return f"sites/{self.site_id}/networks/{self.network_id}"

    def query_params(self) -> list[tuple[str, str]]:
        return []

    def body(self) -> Optional[Any]:
        return _network_payload(self.request, self.path())

    def parse_response(self, payload: Any) -> MutationResponse[Network]:
        return MutationResponse.from_payload(payload, Network.model_validate)


@dataclass(frozen=True)
class DeleteNetwork:
    site_id: str
    network_id: str

    def method(self) -> HttpMethod:
        return HttpMethod.DELETE

    def path(self) -> str:
        return f"sites/{self.site_id}/networks/{self.network_id}"

    def query_params(self) -> list[tuple[str, str]]:
        return []

    def body(self) -> Optional[Any]:
        return None

    def parse_response(self, payload: Any) -> DeleteResponse:
        return DeleteResponse.from_payload(payload)


__all__ = [
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
]
