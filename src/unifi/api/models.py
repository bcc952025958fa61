"""Pydantic models for the controller resources this client decodes.

Field names are snake_case in Python and camelCase on the wire. Unknown
enum values (new device states, client types, ...) decode to UNKNOWN
instead of failing, so a newer controller firmware does not break parsing;
missing required fields still fail and surface as DecodeError.
"""
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


def _coerce_enum(enum_cls: type[Enum], value: Any) -> Any:
    """Map values the enum does not know to its UNKNOWN member."""
    if isinstance(value, enum_cls):
        return value
    for member in enum_cls:
        if member.value == value:
            return member
    return enum_cls["UNKNOWN"]


class ApiModel(BaseModel):
    """Base for every resource model: camelCase aliases, extra keys ignored."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )


# ============================================
# Sites
# ============================================

class Site(ApiModel):
    """A controller site. Endpoint: GET /v1/sites"""

    id: str
    name: str
    desc: Optional[str] = None
    role: Optional[str] = None

    @property
    def display_name(self) -> str:
        return self.desc or self.name


# ============================================
# Devices
# ============================================

class DeviceState(str, Enum):
    """Device state as reported by the site devices endpoint."""

    ONLINE = "ONLINE"
    OFFLINE = "OFFLINE"
    PENDING_ADOPTION = "PENDING_ADOPTION"
    UPDATING = "UPDATING"
    GETTING_READY = "GETTING_READY"
    ADOPTING = "ADOPTING"
    DELETING = "DELETING"
    CONNECTION_INTERRUPTED = "CONNECTION_INTERRUPTED"
    ISOLATED = "ISOLATED"
    UNKNOWN = "UNKNOWN"


class DeviceFeature(str, Enum):
    SWITCHING = "switching"
    ACCESS_POINT = "accessPoint"
    GATEWAY = "gateway"
    UNKNOWN = "unknown"


class DeviceInterface(str, Enum):
    PORTS = "ports"
    RADIOS = "radios"
    UNKNOWN = "unknown"


class Device(ApiModel):
    """A device adopted by a site. Endpoint: GET /v1/sites/{siteId}/devices"""

    id: str
    mac_address: str
    ip_address: Optional[str] = None
    name: str
    model: str
    state: DeviceState = DeviceState.UNKNOWN
    supported: Optional[bool] = None
    firmware_version: Optional[str] = None
    firmware_updatable: Optional[bool] = None
    features: list[DeviceFeature] = Field(default_factory=list)
    interfaces: list[DeviceInterface] = Field(default_factory=list)

    @field_validator("state", mode="before")
    @classmethod
    def _state(cls, value: Any) -> Any:
        return _coerce_enum(DeviceState, value)

    @field_validator("features", mode="before")
    @classmethod
    def _features(cls, value: Any) -> Any:
        if isinstance(value, list):
            return [_coerce_enum(DeviceFeature, v) for v in value]
        return value

    @field_validator("interfaces", mode="before")
    @classmethod
    def _interfaces(cls, value: Any) -> Any:
        if isinstance(value, list):
            return [_coerce_enum(DeviceInterface, v) for v in value]
        return value

    @property
    def is_online(self) -> bool:
        return self.state == DeviceState.ONLINE

    @property
    def is_transitioning(self) -> bool:
        return self.state in (
            DeviceState.PENDING_ADOPTION,
            DeviceState.UPDATING,
            DeviceState.GETTING_READY,
            DeviceState.ADOPTING,
            DeviceState.DELETING,
        )

    @property
    def has_switching(self) -> bool:
        return DeviceFeature.SWITCHING in self.features

    @property
    def is_access_point(self) -> bool:
        return DeviceFeature.ACCESS_POINT in self.features

    @property
    def is_gateway(self) -> bool:
        return DeviceFeature.GATEWAY in self.features

    @property
    def is_switch(self) -> bool:
        """Switching capability without being a gateway (UDM-Pro also switches)."""
        return self.has_switching and not self.is_gateway


class PoE(ApiModel):
    standard: Optional[str] = None
    enabled: Optional[bool] = None
    state: Optional[str] = None

    @property
    def is_active(self) -> bool:
        return bool(self.enabled) and self.state == "UP"


class Port(ApiModel):
    """Physical port of a device (1-based idx)."""

    idx: int
    state: str = "UNKNOWN"
    connector: Optional[str] = None
    max_speed_mbps: int = 0
    speed_mbps: Optional[int] = None
    poe: Optional[PoE] = None

    @property
    def is_up(self) -> bool:
        return self.state == "UP"


class Radio(ApiModel):
    wlan_standard: Optional[str] = None
    frequency_ghz: float = Field(alias="frequencyGHz")
    channel_width_mhz: int = Field(alias="channelWidthMHz")
    channel: Optional[int] = None


class PhysicalInterfaces(ApiModel):
    ports: list[Port] = Field(default_factory=list)
    radios: list[Radio] = Field(default_factory=list)


class DeviceUplink(ApiModel):
    device_id: str


class DeviceDetails(ApiModel):
    """Full device description. Endpoint: GET /v1/sites/{siteId}/devices/{id}"""

    id: str
    mac_address: str
    ip_address: Optional[str] = None
    name: str
    model: str
    supported: bool = False
    state: str = "UNKNOWN"
    firmware_version: Optional[str] = None
    firmware_updatable: bool = False
    adopted_at: Optional[str] = None
    provisioned_at: Optional[str] = None
    configuration_id: Optional[str] = None
    uplink: Optional[DeviceUplink] = None
    interfaces: PhysicalInterfaces = Field(default_factory=PhysicalInterfaces)

    @property
    def is_online(self) -> bool:
        return self.state == "ONLINE"

    @property
    def port_count(self) -> int:
        return len(self.interfaces.ports)

    @property
    def radio_count(self) -> int:
        return len(self.interfaces.radios)

    def active_ports(self) -> list[Port]:
        return [port for port in self.interfaces.ports if port.is_up]

    def poe_active_ports(self) -> list[Port]:
        return [port for port in self.interfaces.ports if port.poe and port.poe.is_active]


class StatisticsUplink(ApiModel):
    tx_rate_bps: int = 0
    rx_rate_bps: int = 0


class RadioStatistics(ApiModel):
    frequency_ghz: Optional[float] = Field(default=None, alias="frequencyGHz")
    tx_retries_pct: Optional[float] = None


class StatisticsInterfaces(ApiModel):
    radios: list[RadioStatistics] = Field(default_factory=list)


class DeviceStatistics(ApiModel):
    """Latest device statistics.

    Endpoint: GET /v1/sites/{siteId}/devices/{deviceId}/statistics/latest
    """

    uptime_sec: int = 0
    last_heartbeat_at: Optional[str] = None
    next_heartbeat_at: Optional[str] = None
    load_average_1_min: Optional[float] = Field(default=None, alias="loadAverage1Min")
    load_average_5_min: Optional[float] = Field(default=None, alias="loadAverage5Min")
    load_average_15_min: Optional[float] = Field(default=None, alias="loadAverage15Min")
    cpu_utilization_pct: Optional[float] = None
    memory_utilization_pct: Optional[float] = None
    uplink: Optional[StatisticsUplink] = None
    interfaces: Optional[StatisticsInterfaces] = None

    def uptime_formatted(self) -> str:
        """Uptime as "1d 2h 3m 4s", dropping leading zero units."""
        days, rest = divmod(self.uptime_sec, 86400)
        hours, rest = divmod(rest, 3600)
        mins, secs = divmod(rest, 60)

        if days:
            return f"{days}d {hours}h {mins}m {secs}s"
        if hours:
            return f"{hours}h {mins}m {secs}s"
        if mins:
            return f"{mins}m {secs}s"
        return f"{secs}s"

    @property
    def total_uplink_bps(self) -> Optional[int]:
        if self.uplink is None:
            return None
        return self.uplink.tx_rate_bps + self.uplink.rx_rate_bps


# ============================================
# Clients
# ============================================

class ClientType(str, Enum):
    WIRED = "WIRED"
    WIRELESS = "WIRELESS"
    UNKNOWN = "UNKNOWN"


class AccessType(str, Enum):
    DEFAULT = "DEFAULT"
    BLOCKED = "BLOCKED"
    ALLOWED = "ALLOWED"
    GUEST = "GUEST"
    UNKNOWN = "UNKNOWN"


class ClientAccess(ApiModel):
    access_type: AccessType = Field(default=AccessType.DEFAULT, alias="type")

    @field_validator("access_type", mode="before")
    @classmethod
    def _access_type(cls, value: Any) -> Any:
        return _coerce_enum(AccessType, value)


class Client(ApiModel):
    """A connected client. Endpoint: GET /v1/sites/{siteId}/clients

    `uplink_device_id` is the access point for wireless clients and the
    switch or gateway for wired ones.
    """

    id: str
    client_type: ClientType = Field(default=ClientType.UNKNOWN, alias="type")
    name: Optional[str] = None
    connected_at: Optional[str] = None
    ip_address: Optional[str] = None
    access: Optional[ClientAccess] = None
    uplink_device_id: Optional[str] = None

    @field_validator("client_type", mode="before")
    @classmethod
    def _client_type(cls, value: Any) -> Any:
        return _coerce_enum(ClientType, value)

    @property
    def is_wired(self) -> bool:
        return self.client_type == ClientType.WIRED

    @property
    def is_wireless(self) -> bool:
        return self.client_type == ClientType.WIRELESS

    @property
    def is_connected(self) -> bool:
        return self.connected_at is not None

    @property
    def is_guest(self) -> bool:
        return self.access is not None and self.access.access_type == AccessType.GUEST

    @property
    def is_blocked(self) -> bool:
        return self.access is not None and self.access.access_type == AccessType.BLOCKED


# ============================================
# Networks
# ============================================

class NetworkManagement(str, Enum):
    UNMANAGED = "UNMANAGED"
    GATEWAY = "GATEWAY"
    SWITCH = "SWITCH"
    UNKNOWN = "UNKNOWN"


class Network(ApiModel):
    """A site network. Endpoint: GET /v1/sites/{siteId}/networks"""

    id: str
    name: str
    enabled: bool = False
    vlan_id: Optional[int] = None
    management: Optional[NetworkManagement] = None

    @field_validator("management", mode="before")
    @classmethod
    def _management(cls, value: Any) -> Any:
        if value is None:
            return None
        return _coerce_enum(NetworkManagement, value)


class NetworkRequest(ApiModel):
    """Body of network create/update requests."""

    name: str
    management: NetworkManagement = NetworkManagement.GATEWAY
    enabled: Optional[bool] = None
    vlan_id: Optional[int] = None

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


__all__ = [
    "ApiModel",
    "Site",
    "DeviceState",
    "DeviceFeature",
    "DeviceInterface",
    "Device",
    "PoE",
    "Port",
    "Radio",
    "PhysicalInterfaces",
    "DeviceUplink",
    "DeviceDetails",
    "StatisticsUplink",
    "RadioStatistics",
    "StatisticsInterfaces",
    "DeviceStatistics",
    "ClientType",
    "AccessType",
    "ClientAccess",
    "Client",
    "NetworkManagement",
    "Network",
    "NetworkRequest",
]
