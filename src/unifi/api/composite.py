#!/usr/bin/env python3
"""Composite fetches that join several independent requests.

CompositeFetcher composes a UnifiClient the way a syncer composes its HTTP
client: the client knows how to send one request, this module knows which
requests belong together.

Architecture:
    fetch_device_with_info
        GetDevice, GetDeviceDetails and GetDeviceStatistics in parallel,
        joined into one DeviceWithInfo only when all three succeed. The
        three settle together and errors surface in request order, so an
        unknown device is a NotFoundError rather than a 404.
    fetch_all_devices_with_info
        Drain the site's device pages, then join details + statistics for
        every device concurrently (bounded by max_concurrent).
    fetch_client_stats_by_device
        Drain the site's client pages and fold them into per-device counts.

The bulk join is fail-fast: the first failing request cancels its siblings
and its error is raised unchanged. No join ever returns a partial
aggregate; callers that want best-effort behaviour wrap these calls
themselves.

Example:
    async with UnifiClient(config) as client:
        fetcher = CompositeFetcher(client=client)
        info = await fetcher.fetch_device_with_info(site_id, device_id)
        print(f"{info.name}: {info.uptime_formatted()} up, {info.port_count} ports")
"""
import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

from .concurrency import gather_fail_fast, process_concurrent
from .endpoints import GetClients, GetDevice, GetDeviceDetails, GetDeviceStatistics, GetDevices
from .exceptions import NotFoundError
from .models import Client, Device, DeviceDetails, DeviceStatistics
from .pagination import Executor, PageStream, PaginationConfig
from .stats import DeviceClientStats, aggregate_clients_by_device

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeviceWithInfo:
    """A device together with its details and latest statistics.

    Attributes:
        device: Entry from the site devices list
        details: Ports, radios, uplink and firmware
        statistics: CPU, memory, load and uplink rates
    """
    device: Device
    details: DeviceDetails
    statistics: DeviceStatistics

    @property
    def id(self) -> str:
        return self.device.id

    @property
    def name(self) -> str:
        return self.device.name

    @property
    def model(self) -> str:
        return self.device.model

    @property
    def is_online(self) -> bool:
        return self.device.is_online

    @property
    def has_switching(self) -> bool:
        return self.device.has_switching

    @property
    def is_access_point(self) -> bool:
        return self.device.is_access_point

    @property
    def is_gateway(self) -> bool:
        return self.device.is_gateway

    @property
    def port_count(self) -> int:
        return self.details.port_count

    @property
    def radio_count(self) -> int:
        return self.details.radio_count

    @property
    def uptime_sec(self) -> int:
        return self.statistics.uptime_sec

    def uptime_formatted(self) -> str:
        return self.statistics.uptime_formatted()

    @property
    def cpu_utilization(self) -> Optional[float]:
        return self.statistics.cpu_utilization_pct

    @property
    def memory_utilization(self) -> Optional[float]:
        return self.statistics.memory_utilization_pct


class CompositeFetcher:
    """Site-scoped fetches built from several endpoint calls.

    Attributes:
        client: UnifiClient (or anything with an async execute())
        pagination: Page size/delay used when draining device and client lists
        max_concurrent: Cap on per-device joins in flight at once
    """

    def __init__(
        self,
        client: Executor,
        pagination: Optional[PaginationConfig] = None,
        max_concurrent: int = 10,
    ):
        self.client = client
        self.pagination = pagination or PaginationConfig()
        self.max_concurrent = max_concurrent

    # ----------------------------------------
    # Streams
    # ----------------------------------------

    def stream_devices(self, site_id: str) -> PageStream[Device]:
        return PageStream(
            self.client,
            lambda offset, limit: GetDevices.with_pagination(site_id, offset, limit),
            self.pagination,
        )

    def stream_clients(self, site_id: str) -> PageStream[Client]:
        return PageStream(
            self.client,
            lambda offset, limit: GetClients.with_pagination(site_id, offset, limit),
            self.pagination,
        )

    async def fetch_all_devices(self, site_id: str) -> list[Device]:
        return await self.stream_devices(site_id).fetch_all()

    async def fetch_all_clients(self, site_id: str) -> list[Client]:
        return await self.stream_clients(site_id).fetch_all()

    # ----------------------------------------
    # Joins
    # ----------------------------------------

    async def fetch_device_with_info(self, site_id: str, device_id: str) -> DeviceWithInfo:
        """Fetch one device, its details and its statistics in parallel.

        All three requests settle before anything is raised, and failures
        are reported in request order: a missing device is a NotFoundError
        even when the per-id routes answered 404.

        Raises:
            NotFoundError: If the device lookup returned no device
            UnifiError: The first error, in request order, of the three requests
        """
        page, details, statistics = await asyncio.gather(
            self.client.execute(GetDevice(site_id, device_id)),
            self.client.execute(GetDeviceDetails(site_id, device_id)),
            self.client.execute(GetDeviceStatistics(site_id, device_id)),
            return_exceptions=True,
        )

        if isinstance(page, BaseException):
            raise page
        if not page.items:
            raise NotFoundError("Device", device_id, details={"site_id": site_id})
        for result in (details, statistics):
            if isinstance(result, BaseException):
                raise result

        return DeviceWithInfo(device=page.items[0], details=details, statistics=statistics)

    async def _with_info(self, site_id: str, device: Device) -> DeviceWithInfo:
        details, statistics = await gather_fail_fast(
            self.client.execute(GetDeviceDetails(site_id, device.id)),
            self.client.execute(GetDeviceStatistics(site_id, device.id)),
        )
        return DeviceWithInfo(device=device, details=details, statistics=statistics)

    async def fetch_all_devices_with_info(self, site_id: str) -> list[DeviceWithInfo]:
        """Fetch every device of a site with details and statistics.

        One DeviceWithInfo per device; any single failure fails the call.
        """
        devices = await self.fetch_all_devices(site_id)
        logger.info(f"Fetching details and statistics for {len(devices)} devices in site {site_id}")

        return await process_concurrent(
            devices,
            lambda device: self._with_info(site_id, device),
            max_concurrent=self.max_concurrent,
        )

    # ----------------------------------------
    # Reductions
    # ----------------------------------------

    async def fetch_client_stats_by_device(self, site_id: str) -> dict[str, DeviceClientStats]:
        """Fetch all clients of a site and count them per uplink device."""
        clients = await self.fetch_all_clients(site_id)
        stats = aggregate_clients_by_device(clients)
        logger.info(f"Aggregated {len(clients)} clients across {len(stats)} devices in site {site_id}")
        return stats


__all__ = [
    "DeviceWithInfo",
    "CompositeFetcher",
]
