"""Response envelopes returned by the controller API.

List endpoints wrap their items in a pagination envelope:

    {"data": [...], "offset": 0, "limit": 25, "count": 25, "totalCount": 240}

Mutations return {"data": {...}}, deletes may return {"httpStatusCode": 200}
and actions return {"success": true, "message": "..."}.

Parsers here raise KeyError/TypeError/ValueError (or pydantic's
ValidationError from an item parser) on malformed input; the executor turns
any of those into a DecodeError carrying the raw body.
"""
from dataclasses import dataclass, field
from typing import Any, Callable, Generic, Optional, TypeVar

T = TypeVar("T")


def _expect_object(payload: Any) -> dict[str, Any]:
    if not isinstance(payload, dict):
        raise TypeError(f"Expected a JSON object, got {type(payload).__name__}")
    return payload


def _non_negative_int(payload: dict[str, Any], key: str) -> int:
    value = payload.get(key)
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"Field '{key}' must be an integer, got {value!r}")
    if value < 0:
        raise ValueError(f"Field '{key}' must be >= 0, got {value}")
    return value


@dataclass(frozen=True)
class PageEnvelope(Generic[T]):
    """One page of a list endpoint.

    Attributes:
        items: Decoded items of this page
        offset: Offset the server applied
        limit: Limit the server applied (0 when omitted)
        count: Number of items actually returned
        total_count: Matching items across all pages
    """
    items: list[T] = field(default_factory=list)
    offset: int = 0
    limit: int = 0
    count: int = 0
    total_count: int = 0

    @classmethod
    def from_payload(
        cls,
        payload: Any,
        item_parser: Callable[[Any], T],
    ) -> "PageEnvelope[T]":
        payload = _expect_object(payload)
        data = payload["data"]
        if not isinstance(data, list):
            raise TypeError(f"Field 'data' must be a list, got {type(data).__name__}")

        return cls(
            items=[item_parser(item) for item in data],
            offset=_non_negative_int(payload, "offset"),
            limit=_non_negative_int(payload, "limit"),
            count=_non_negative_int(payload, "count"),
            total_count=_non_negative_int(payload, "totalCount"),
        )

    def has_more(self) -> bool:
        """More pages remain iff this page did not reach totalCount."""
        return self.offset + self.count < self.total_count

    def next_offset(self) -> Optional[int]:
        """Offset of the following page, or None when there is none.

        Falls back to `count` when the server omitted `limit`; with neither
        there is no safe way forward.
        """
        if not self.has_more():
            return None
        if self.limit > 0:
            return self.offset + self.limit
        if self.count > 0:
            return self.offset + self.count
        return None


@dataclass(frozen=True)
class MutationResponse(Generic[T]):
    """Created or updated entity returned by POST/PUT/PATCH endpoints."""
    data: T

    @classmethod
    def from_payload(cls, payload: Any, parser: Callable[[Any], T]) -> "MutationResponse[T]":
        return cls(data=parser(_expect_object(payload)["data"]))


@dataclass(frozen=True)
class DeleteResponse:
    """Response of a delete operation."""
    http_status_code: Optional[int] = None

    @classmethod
    def from_payload(cls, payload: Any) -> "DeleteResponse":
        payload = _expect_object(payload)
        status = payload.get("httpStatusCode")
        if status is not None and (isinstance(status, bool) or not isinstance(status, int)):
            raise TypeError(f"Field 'httpStatusCode' must be an integer, got {status!r}")
        return cls(http_status_code=status)


@dataclass(frozen=True)
class ActionResponse:
    """Response of an action endpoint (restart, authorize, ...)."""
    success: bool = False
    message: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Any) -> "ActionResponse":
        payload = _expect_object(payload)
        return cls(
            success=bool(payload.get("success", False)),
            message=payload.get("message"),
        )


__all__ = [
    "PageEnvelope",
    "MutationResponse",
    "DeleteResponse",
    "ActionResponse",
]
