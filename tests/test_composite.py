#!/usr/bin/env python3
"""Unit tests for CompositeFetcher.

Tests cover:
    - Three-way device join (device, details, statistics)
    - NotFoundError for an empty device lookup
    - Fail-fast joins: no partial record on any failure
    - Bulk join over every device of a site
    - Client statistics per device

Note: CompositeFetcher composes any object with an async execute().
      These tests use an in-memory executor instead of aiohttp.
"""
import sys

import pytest

sys.path.insert(0, str(__file__).rsplit("/tests", 1)[0])
from src.unifi.api.composite import CompositeFetcher, DeviceWithInfo
from src.unifi.api.endpoints import (
    GetClients,
    GetDevice,
    GetDeviceDetails,
    GetDevices,
    GetDeviceStatistics,
)
from src.unifi.api.exceptions import NotFoundError, StatusError, TimeoutError
from src.unifi.api.pagination import PaginationConfig

SITE = "site-1"


# ============================================
# Fixtures
# ============================================

def device_json(device_id, features=("accessPoint",)):
    return {
        "id": device_id,
        "macAddress": f"aa:{device_id}",
        "name": f"Device {device_id}",
        "model": "U6-Lite",
        "state": "ONLINE",
        "features": list(features),
    }


def details_json(device_id, ports=2):
    return {
        "id": device_id,
        "macAddress": f"aa:{device_id}",
        "name": f"Device {device_id}",
        "model": "U6-Lite",
        "state": "ONLINE",
        "interfaces": {
            "ports": [{"idx": i + 1, "state": "UP", "maxSpeedMbps": 1000} for i in range(ports)],
            "radios": [{"frequencyGHz": 2.4, "channelWidthMHz": 20}],
        },
    }


def statistics_json(uptime=90061):
    return {"uptimeSec": uptime, "cpuUtilizationPct": 7.5, "memoryUtilizationPct": 40.0}


def page_json(items, offset=0, limit=100, total=None):
    return {
        "data": items,
        "offset": offset,
        "limit": limit,
        "count": len(items),
        "totalCount": len(items) if total is None else total,
    }


class FakeExecutor:
    """Answers endpoints from canned JSON payloads, or raises configured errors."""

    def __init__(self, devices=(), clients=(), failures=None):
        self.devices = list(devices)
        self.clients = list(clients)
        self.failures = failures or {}
        self.executed = []

    async def execute(self, endpoint):
        self.executed.append(endpoint)

        error = self.failures.get(type(endpoint))
        if error is not None:
            raise error

        if isinstance(endpoint, GetDevice):
            matches = [d for d in self.devices if d["id"] == endpoint.device_id]
            return endpoint.parse_response(page_json(matches))
        if isinstance(endpoint, GetDeviceDetails):
            return endpoint.parse_response(details_json(endpoint.device_id))
        if isinstance(endpoint, GetDeviceStatistics):
            return endpoint.parse_response(statistics_json())
        if isinstance(endpoint, GetDevices):
            return endpoint.parse_response(self._page(self.devices, endpoint))
        if isinstance(endpoint, GetClients):
            return endpoint.parse_response(self._page(self.clients, endpoint))
        raise AssertionError(f"Unexpected endpoint {endpoint!r}")

    @staticmethod
    def _page(collection, endpoint):
        offset = endpoint.offset or 0
        limit = endpoint.limit or 100
        return page_json(collection[offset:offset + limit], offset, limit, total=len(collection))


# ============================================
# Single Device Join Tests
# ============================================

class TestFetchDeviceWithInfo:
    """Test the three-way device join."""

    @pytest.mark.asyncio
    async def test_join_success(self):
        executor = FakeExecutor(devices=[device_json("d1")])
        fetcher = CompositeFetcher(client=executor)

        info = await fetcher.fetch_device_with_info(SITE, "d1")

        assert isinstance(info, DeviceWithInfo)
        assert info.id == "d1"
        assert info.is_access_point
        assert not info.has_switching
        assert info.port_count == 2
        assert info.radio_count == 1
        assert info.uptime_formatted() == "1d 1h 1m 1s"
        assert info.cpu_utilization == 7.5
        assert {type(e) for e in executor.executed} == {GetDevice, GetDeviceDetails, GetDeviceStatistics}

    @pytest.mark.asyncio
    async def test_empty_lookup_is_not_found(self):
        fetcher = CompositeFetcher(client=FakeExecutor(devices=[]))

        with pytest.raises(NotFoundError) as exc_info:
            await fetcher.fetch_device_with_info(SITE, "missing")

        assert exc_info.value.resource_id == "missing"
        assert exc_info.value.details["site_id"] == SITE

    @pytest.mark.asyncio
    @pytest.mark.parametrize("failing", [GetDevice, GetDeviceDetails, GetDeviceStatistics])
    async def test_any_failure_fails_join(self, failing):
        error = StatusError("nope", status_code=500)
        executor = FakeExecutor(devices=[device_json("d1")], failures={failing: error})
        fetcher = CompositeFetcher(client=executor)

        with pytest.raises(StatusError) as exc_info:
            await fetcher.fetch_device_with_info(SITE, "d1")

        assert exc_info.value is error

    @pytest.mark.asyncio
    async def test_missing_device_with_404_routes_is_not_found(self):
        """Unknown id: empty filtered list while details and statistics answer 404."""
        executor = FakeExecutor(
            devices=[],
            failures={
                GetDeviceDetails: StatusError("not found", status_code=404),
                GetDeviceStatistics: StatusError("not found", status_code=404),
            },
        )
        fetcher = CompositeFetcher(client=executor)

        with pytest.raises(NotFoundError) as exc_info:
            await fetcher.fetch_device_with_info(SITE, "ghost")

        assert exc_info.value.resource_id == "ghost"

    @pytest.mark.asyncio
    async def test_errors_reported_in_request_order(self):
        details_error = StatusError("details", status_code=500)
        statistics_error = TimeoutError("statistics", timeout_seconds=60)
        executor = FakeExecutor(
            devices=[device_json("d1")],
            failures={GetDeviceDetails: details_error, GetDeviceStatistics: statistics_error},
        )
        fetcher = CompositeFetcher(client=executor)

        with pytest.raises(StatusError) as exc_info:
            await fetcher.fetch_device_with_info(SITE, "d1")

        assert exc_info.value is details_error


# ============================================
# Bulk Join Tests
# ============================================

class TestFetchAllDevicesWithInfo:
    """Test the join over every device of a site."""

    @pytest.mark.asyncio
    async def test_one_record_per_device_in_order(self):
        devices = [device_json(f"d{i}") for i in range(5)]
        fetcher = CompositeFetcher(
            client=FakeExecutor(devices=devices),
            pagination=PaginationConfig(page_size=2),
            max_concurrent=2,
        )

        infos = await fetcher.fetch_all_devices_with_info(SITE)

        assert [info.id for info in infos] == ["d0", "d1", "d2", "d3", "d4"]

    @pytest.mark.asyncio
    async def test_no_devices(self):
        fetcher = CompositeFetcher(client=FakeExecutor(devices=[]))
        assert await fetcher.fetch_all_devices_with_info(SITE) == []

    @pytest.mark.asyncio
    async def test_single_failure_fails_whole_batch(self):
        executor = FakeExecutor(
            devices=[device_json("d1"), device_json("d2")],
            failures={GetDeviceStatistics: TimeoutError("slow", timeout_seconds=60)},
        )
        fetcher = CompositeFetcher(client=executor)

        with pytest.raises(TimeoutError):
            await fetcher.fetch_all_devices_with_info(SITE)

    @pytest.mark.asyncio
    async def test_listing_failure_propagates(self):
        executor = FakeExecutor(failures={GetDevices: StatusError("denied", status_code=401)})
        fetcher = CompositeFetcher(client=executor)

        with pytest.raises(StatusError):
            await fetcher.fetch_all_devices_with_info(SITE)


# ============================================
# Client Statistics Tests
# ============================================

class TestFetchClientStatsByDevice:
    """Test the grouped reduction over all clients."""

    @pytest.mark.asyncio
    async def test_counts_across_pages(self):
        clients = [
            {"id": "c1", "type": "WIRELESS", "uplinkDeviceId": "d1"},
            {"id": "c2", "type": "WIRED", "uplinkDeviceId": "d1"},
            {"id": "c3", "type": "WIRELESS", "uplinkDeviceId": "d2", "access": {"type": "GUEST"}},
            {"id": "c4", "type": "WIRED"},
        ]
        executor = FakeExecutor(clients=clients)
        fetcher = CompositeFetcher(client=executor, pagination=PaginationConfig(page_size=3))

        stats = await fetcher.fetch_client_stats_by_device(SITE)

        assert {k: v.total_clients for k, v in stats.items()} == {"d1": 2, "d2": 1}
        assert stats["d2"].guest_clients == 1
        assert sum(isinstance(e, GetClients) for e in executor.executed) == 2

    @pytest.mark.asyncio
    async def test_fetch_all_clients(self):
        clients = [{"id": f"c{i}", "type": "WIRED"} for i in range(4)]
        fetcher = CompositeFetcher(client=FakeExecutor(clients=clients))

        result = await fetcher.fetch_all_clients(SITE)

        assert [c.id for c in result] == ["c0", "c1", "c2", "c3"]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
