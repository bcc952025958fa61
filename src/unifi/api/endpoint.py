"""Endpoint capability protocol.

An endpoint is a pure description of one REST request: the HTTP verb, the
already-resolved path, the query parameters, an optional JSON body and a
parser for the response. The executor in client.py is generic over
anything that satisfies this protocol, so new routes are plain classes that
never touch the executor and never inherit from a shared base.

Example:
    @dataclass(frozen=True)
    class GetNetworks:
        site_id: str

        def method(self) -> HttpMethod:
            return HttpMethod.GET

        def path(self) -> str:
            return f"sites/{self.site_id}/networks"

        def query_params(self) -> list[tuple[str, str]]:
            return []

        def body(self) -> Optional[Any]:
            return None

        def parse_response(self, payload: Any) -> PageEnvelope[Network]:
            return PageEnvelope.from_payload(payload, Network.model_validate)
"""
import re
from enum import Enum
from typing import Any, Optional, Protocol, TypeVar, runtime_checkable

T_co = TypeVar("T_co", covariant=True)

_PLACEHOLDER = re.compile(r"\{[^{}]*\}")


class HttpMethod(str, Enum):
    """HTTP verbs supported by the controller API."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"

    @property
    def allows_body(self) -> bool:
        return self in (HttpMethod.POST, HttpMethod.PUT, HttpMethod.PATCH)


@runtime_checkable
class Endpoint(Protocol[T_co]):
    """Capability every request description implements.

    `body()` may raise SerializationError when the payload cannot be
    produced; the executor calls it before opening a connection.
    """

    def method(self) -> HttpMethod:
        ...

    def path(self) -> str:
        ...

    def query_params(self) -> list[tuple[str, str]]:
        ...

    def body(self) -> Optional[Any]:
        ...

    def parse_response(self, payload: Any) -> T_co:
        ...


def ensure_resolved(path: str) -> str:
    """Return `path` unchanged, or fail if a `{placeholder}` survived.

    An unresolved path is a programming error in the endpoint, not a
    request failure, so this raises ValueError rather than a client error.
    """
    match = _PLACEHOLDER.search(path)
    if match:
        raise ValueError(f"Endpoint path has unresolved placeholder {match.group(0)!r}: {path}")
    return path


def pagination_params(offset: Optional[int], limit: Optional[int]) -> list[tuple[str, str]]:
    """Build the optional offset/limit query pairs shared by list endpoints."""
    params = []
    if offset is not None:
        params.append(("offset", str(offset)))
    if limit is not None:
        params.append(("limit", str(limit)))
    return params


__all__ = [
    "HttpMethod",
    "Endpoint",
    "ensure_resolved",
    "pagination_params",
]
