"""Grouped statistics over fully fetched collections.

aggregate_by() is a pure single-pass fold: items without a grouping key are
skipped, the first item seen for a key creates its accumulator, and every
item for that key updates it in place. Folding the same collection twice
gives equal results.

Example:
    clients = await fetcher.fetch_all_clients(site_id)
    stats = aggregate_clients_by_device(clients)

    for device_id, device_stats in stats.items():
        print(f"{device_id}: {device_stats.total_clients} clients "
              f"({device_stats.guest_clients} guests)")
"""
from dataclasses import dataclass
from typing import Callable, Hashable, Iterable, Optional, TypeVar

from .models import Client, ClientType

T = TypeVar("T")
K = TypeVar("K", bound=Hashable)
A = TypeVar("A")


def aggregate_by(
    items: Iterable[T],
    key: Callable[[T], Optional[K]],
    factory: Callable[[K], A],
    update: Callable[[A, T], None],
) -> dict[K, A]:
    """Fold items into one accumulator per grouping key.

    Args:
        items: Collection to fold
        key: Grouping key of an item, or None to skip the item
        factory: Creates the zero accumulator for a newly seen key
        update: Adds one item to its key's accumulator

    Returns:
        Mapping from key to accumulator
    """
    groups: dict[K, A] = {}
    for item in items:
        group_key = key(item)
        if group_key is None:
            continue
        accumulator = groups.get(group_key)
        if accumulator is None:
            accumulator = factory(group_key)
            groups[group_key] = accumulator
        update(accumulator, item)
    return groups


@dataclass
class DeviceClientStats:
    """Client counts for one uplink device.

    Attributes:
        device_id: Device the clients are connected through
        total_clients: All clients on the device
        wired_clients: Clients of type WIRED
        wireless_clients: Clients of type WIRELESS
        guest_clients: Clients with GUEST access
    """
    device_id: str
    total_clients: int = 0
    wired_clients: int = 0
    wireless_clients: int = 0
    guest_clients: int = 0

    def add_client(self, client: Client) -> None:
        """Count one client; UNKNOWN types only count towards the total."""
        self.total_clients += 1

        if client.client_type == ClientType.WIRED:
            self.wired_clients += 1
        elif client.client_type == ClientType.WIRELESS:
            self.wireless_clients += 1

        if client.is_guest:
            self.guest_clients += 1

    @property
    def has_clients(self) -> bool:
        return self.total_clients > 0

    @property
    def non_guest_clients(self) -> int:
        return max(0, self.total_clients - self.guest_clients)


def aggregate_clients_by_device(clients: Iterable[Client]) -> dict[str, DeviceClientStats]:
    """Client statistics keyed by uplink device id.

    Clients without an uplink_device_id are ignored.
    """
    return aggregate_by(
        clients,
        key=lambda client: client.uplink_device_id,
        factory=DeviceClientStats,
        update=DeviceClientStats.add_client,
    )


def get_device_client_stats(clients: Iterable[Client], device_id: str) -> DeviceClientStats:
    """Client statistics for a single device (zero counts if none match)."""
    stats = DeviceClientStats(device_id)
    for client in clients:
        if client.uplink_device_id == device_id:
            stats.add_client(client)
    return stats


__all__ = [
    "aggregate_by",
    "DeviceClientStats",
    "aggregate_clients_by_device",
    "get_device_client_stats",
]
