#!/usr/bin/env python3
"""Async HTTP client for the UniFi Network controller API.

This module provides the request executor every other part of the package
builds on:

    - API-key authentication via the X-API-Key header
    - URL construction from base URL, API prefix and endpoint path
    - JSON request bodies, encoded before anything touches the network
    - Connection pooling via a shared aiohttp session
    - Typed errors for transport, status and decode failures

Design Philosophy:
    This client knows HOW to talk to the controller, but not WHAT to fetch.
    Routes are described by Endpoint objects (see endpoints.py); pagination
    and composite fetches (pagination.py, composite.py) compose this client.
    One call is one round trip: no retries, no caching.

Usage:
    config = ClientConfig.from_env()

    async with UnifiClient(config) as client:
        # Single request
        sites = await client.execute(GetSites())

        # Page by page
        stream = client.paginate(lambda offset, limit: GetClients.with_pagination(site_id, offset, limit))
        async for page in stream:
            for item in page:
                process(item)

        # Everything at once
        devices = await client.fetch_all(
            lambda offset, limit: GetDevices.with_pagination(site_id, offset, limit),
            PaginationConfig(page_size=200),
        )
"""
import asyncio
import json
import logging
import os
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, TypeVar

import aiohttp
from dotenv import load_dotenv

from .endpoint import Endpoint, HttpMethod, ensure_resolved
from .exceptions import (
    ConfigurationError,
    ConnectionError,
    DecodeError,
    SerializationError,
    StatusError,
    TimeoutError,
    TransportError,
)
from .pagination import PageStream, PaginationConfig
from .response import PageEnvelope

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_BASE_PATH = "/api/v1"
API_KEY_HEADER = "X-API-Key"

_FALSE_VALUES = {"0", "false", "no", "off"}


# ============================================
# Configuration
# ============================================

@dataclass(frozen=True)
class ClientConfig:
    """Connection settings shared read-only by every request of a client.

    Attributes:
        base_url: Controller URL (e.g., "https://192.168.1.1/proxy/network/integration")
        base_path: API prefix joined between base URL and endpoint path
        api_key: Credential sent as X-API-Key; None means unauthenticated
        connect_timeout: Seconds allowed to establish a connection
        total_timeout: Seconds allowed for a whole request
        verify_ssl: Validate the controller's TLS certificate
        max_connections: Size of the connection pool
        user_agent: User-Agent header value
    """
    base_url: str
    base_path: str = DEFAULT_BASE_PATH
    api_key: Optional[str] = field(default=None, repr=False)
    connect_timeout: float = 10.0
    total_timeout: float = 60.0
    verify_ssl: bool = True
    max_connections: int = 10
    user_agent: str = "unifi-api-client/1.0"

    def __post_init__(self):
        base_url = (self.base_url or "").rstrip("/")
        if not base_url:
            raise ConfigurationError(
                "Base URL is required. Provide base_url or set UNIFI_BASE_URL environment variable.",
                missing_keys=["UNIFI_BASE_URL"],
            )
        # Frozen dataclass: normalise through object.__setattr__
        object.__setattr__(self, "base_url", base_url)
        object.__setattr__(self, "base_path", (self.base_path or "").strip("/"))

    @classmethod
    def from_env(cls, **overrides: Any) -> "ClientConfig":
        """Build a config from UNIFI_* environment variables (and .env).

        Explicit keyword arguments take precedence over the environment.

        Environment Variables:
            UNIFI_BASE_URL: Controller URL (required)
            UNIFI_API_KEY: API key (optional)
            UNIFI_BASE_PATH: API prefix (default: /api/v1)
            UNIFI_VERIFY_SSL: "false" to accept self-signed certificates
            UNIFI_TIMEOUT: Total request timeout in seconds
        """
        load_dotenv()

        values: dict[str, Any] = {
            "base_url": os.getenv("UNIFI_BASE_URL", ""),
            "base_path": os.getenv("UNIFI_BASE_PATH", DEFAULT_BASE_PATH),
            "api_key": os.getenv("UNIFI_API_KEY") or None,
            "verify_ssl": os.getenv("UNIFI_VERIFY_SSL", "true").strip().lower() not in _FALSE_VALUES,
        }

        timeout = os.getenv("UNIFI_TIMEOUT")
        if timeout:
            try:
                values["total_timeout"] = float(timeout)
            except ValueError as e:
                raise ConfigurationError(
                    f"UNIFI_TIMEOUT must be a number of seconds, got {timeout!r}",
                    cause=e,
                ) from e

        values.update(overrides)
        return cls(**values)

    @property
    def has_credentials(self) -> bool:
        return bool(self.api_key)


# ============================================
# The Client
# ============================================

class UnifiClient:
    """Async executor for Endpoint descriptions.

    This client is designed to be used as an async context manager to ensure
    proper session lifecycle management:

        async with UnifiClient(config) as client:
            page = await client.execute(GetDevices("default"))

    `execute` may be awaited concurrently from many tasks; the config is
    frozen and each call keeps its own request state.

    Attributes:
        config: Frozen ClientConfig shared by every request
    """

    def __init__(self, config: ClientConfig):
        self.config = config

        # Session is created in __aenter__, closed in __aexit__
        self._session: Optional[aiohttp.ClientSession] = None

    @classmethod
    def with_api_key(
        cls,
        base_url: str,
        api_key: str,
        base_path: str = DEFAULT_BASE_PATH,
        **kwargs: Any,
    ) -> "UnifiClient":
        """Create a client authenticated with an API key."""
        return cls(ClientConfig(base_url=base_url, base_path=base_path, api_key=api_key, **kwargs))

    @classmethod
    def from_env(cls, **overrides: Any) -> "UnifiClient":
        return cls(ClientConfig.from_env(**overrides))

    # ----------------------------------------
    # Context Manager Protocol
    # ----------------------------------------

    async def __aenter__(self) -> "UnifiClient":
        """Enter async context: create the HTTP session."""
        self._session = aiohttp.ClientSession(
            connector=aiohttp.TCPConnector(
                limit=self.config.max_connections,
                limit_per_host=self.config.max_connections,
                ssl=self.config.verify_ssl,
            ),
            timeout=aiohttp.ClientTimeout(
                total=self.config.total_timeout,
                connect=self.config.connect_timeout,
            ),
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit async context: close the HTTP session."""
        if self._session:
            await self._session.close()
            self._session = None

    # ----------------------------------------
    # Request Building
    # ----------------------------------------

    def build_url(self, path: str) -> str:
        """Join base URL, API prefix and a resolved endpoint path."""
        parts = [self.config.base_url]
        if self.config.base_path:
            parts.append(self.config.base_path)
        parts.append(path.lstrip("/"))
        return "/".join(parts)

    def _headers(self, has_body: bool) -> dict[str, str]:
        headers = {
            "Accept": "application/json",
            "User-Agent": self.config.user_agent,
        }
        if has_body:
            headers["Content-Type"] = "application/json"
        if self.config.api_key:
            headers[API_KEY_HEADER] = self.config.api_key
        return headers

    @staticmethod
    def _encode_body(endpoint: Endpoint[Any], method: HttpMethod, path: str) -> Optional[str]:
        """Serialize the endpoint body, failing before any network I/O."""
        try:
            body = endpoint.body()
            if body is None:
                return None
            payload = json.dumps(body)
        except SerializationError:
            raise
        except (TypeError, ValueError) as e:
            raise SerializationError(
                f"Failed to encode request body for {method.value} {path}: {e}",
                endpoint=path,
                cause=e,
            ) from e

        if not method.allows_body:
            logger.warning(f"Dropping request body for {method.value} {path}")
            return None
        return payload

    # ----------------------------------------
    # Execution
    # ----------------------------------------

    async def execute(self, endpoint: Endpoint[T]) -> T:
        """Perform one HTTP round trip for `endpoint` and decode the result.

        Args:
            endpoint: Fully resolved endpoint description

        Returns:
            Whatever `endpoint.parse_response` builds from the JSON body

        Raises:
            RuntimeError: If called outside of the async context manager
            ValueError: If the endpoint path still holds a {placeholder}
            SerializationError: If the request body cannot be encoded
            ConnectionError: If the controller cannot be reached
            TimeoutError: If the request exceeds the configured timeout
            TransportError: For any other client-side network failure
            StatusError: If the response status is not 2xx
            DecodeError: If the body is not valid JSON of the expected shape
        """
        if not self._session:
            raise RuntimeError(
                "UnifiClient must be used as async context manager: "
                "async with UnifiClient(...) as client:"
            )

        method = HttpMethod(endpoint.method())
        path = ensure_resolved(endpoint.path()).lstrip("/")
        url = self.build_url(path)
        params = list(endpoint.query_params())
        payload = self._encode_body(endpoint, method, path)

        logger.debug(f"{method.value} {url} params={params}")

        try:
            async with self._session.request(
                method=method.value,
                url=url,
                params=params or None,
                data=payload,
                headers=self._headers(payload is not None),
            ) as response:
                status = response.status
                text = await response.text()

        except asyncio.TimeoutError as e:
            raise TimeoutError(
                f"{method.value} {path} timed out",
                timeout_seconds=self.config.total_timeout,
                endpoint=path,
                method=method.value,
                cause=e,
            ) from e

        except aiohttp.ClientConnectionError as e:
            raise ConnectionError(
                f"Failed to connect to {self.config.base_url}: {e}",
                host=self.config.base_url,
                endpoint=path,
                method=method.value,
                cause=e,
            ) from e

        except aiohttp.ClientError as e:
            raise TransportError(
                f"Network error during {method.value} {path}: {e}",
                endpoint=path,
                method=method.value,
                cause=e,
            ) from e

        if not 200 <= status < 300:
            logger.warning(f"{method.value} {path} returned HTTP {status}")
            raise StatusError(
                f"{method.value} {path} failed with HTTP {status}",
                status_code=status,
                response_body=text,
                endpoint=path,
                method=method.value,
            )

        return self._decode(endpoint, text, method, path)

    @staticmethod
    def _decode(endpoint: Endpoint[T], text: str, method: HttpMethod, path: str) -> T:
        """Parse a success body; an empty body decodes as an empty object."""
        try:
            data = json.loads(text) if text.strip() else {}
        except json.JSONDecodeError as e:
            logger.warning(f"{method.value} {path} returned invalid JSON: {e}")
            raise DecodeError(
                f"Invalid JSON in response to {method.value} {path}: {e}",
                raw_body=text,
                endpoint=path,
                method=method.value,
                cause=e,
            ) from e

        try:
            return endpoint.parse_response(data)
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"{method.value} {path} response did not match the expected shape: {e}")
            raise DecodeError(
                f"Unexpected response shape for {method.value} {path}: {e}",
                raw_body=text,
                endpoint=path,
                method=method.value,
                cause=e,
            ) from e

    async def request(self, endpoint_cls: Callable[[], Endpoint[T]]) -> T:
        """Execute an endpoint that needs no parameters (e.g. GetSites)."""
        return await self.execute(endpoint_cls())

    # ----------------------------------------
    # Pagination Methods
    # ----------------------------------------

    def paginate(
        self,
        request_factory: Callable[[int, int], Endpoint[PageEnvelope[T]]],
        config: Optional[PaginationConfig] = None,
    ) -> PageStream[T]:
        """Create a lazy page stream over a list endpoint.

        Args:
            request_factory: Builds the endpoint for a given (offset, limit)
            config: Page size and inter-page delay

        Example:
            stream = client.paginate(lambda o, l: GetClients.with_pagination(site_id, o, l))
            async for page in stream:
                for c in page:
                    print(c.id)
        """
        return PageStream(self, request_factory, config)

    async def fetch_all(
        self,
        request_factory: Callable[[int, int], Endpoint[PageEnvelope[T]]],
        config: Optional[PaginationConfig] = None,
    ) -> list[T]:
        """Fetch every item of a list endpoint into one list.

        For large collections prefer paginate() and process pages as they
        arrive.
        """
        return await self.paginate(request_factory, config).fetch_all()


__all__ = [
    "DEFAULT_BASE_PATH",
    "API_KEY_HEADER",
    "ClientConfig",
    "UnifiClient",
]
