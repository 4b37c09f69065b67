"""
Authenticated OData client for the product API gateway.

Every outbound request passes through a request hook that stamps the
gateway headers (``Authorization``, ``Ocp-Apim-Subscription-Key``,
``Ocp-Apim-Trace``) and writes a trace line. The client is stateless apart
from its connection pool: each operation is a single request/response
exchange against the configured base URL.
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional, Tuple, Type, Union
from urllib.parse import parse_qsl, quote, urlsplit, urlunsplit

import httpx
from pydantic import ValidationError

from product_portal.core.exceptions import (
    ConfigurationError,
    NotFoundError,
    QueryError,
    ValidationException,
)
from product_portal.core.logging import get_logger
from product_portal.domain.models.product import ProductRecord

logger = get_logger(__name__)

AUTHORIZATION_HEADER = "Authorization"
SUBSCRIPTION_KEY_HEADER = "Ocp-Apim-Subscription-Key"
TRACE_HEADER = "Ocp-Apim-Trace"


@dataclass(frozen=True)
class ClientConfiguration:
    """Connection settings for one gateway client."""

    base_url: str
    credential: Optional[str] = None
    subscription_key: Optional[str] = None
    trace: Union[str, bool, None] = None
    timeout: float = 10.0

    def gateway_headers(self) -> Dict[str, str]:
        """Header values stamped on every outbound request."""
        trace = self.trace
        if isinstance(trace, bool):
            trace = "true" if trace else "false"
        return {
            AUTHORIZATION_HEADER: self.credential or "",
            SUBSCRIPTION_KEY_HEADER: self.subscription_key or "",
            TRACE_HEADER: trace or "",
        }


def validate_base_url(url: Optional[str]) -> Tuple[str, Dict[str, str]]:
    """
    Check that the base URL is an absolute http(s) URL.

    A query string on the base URL (e.g. ``?sap-client=100``) is split off
    and returned separately so it can be sent with every request.

    Returns:
        The base URL ending with a slash, and the base query parameters

    Raises:
        ConfigurationError: If the URL is empty or malformed
    """
    if not url or not url.strip():
        raise ConfigurationError("Gateway base URL is not configured", setting="base_url")

    url = url.strip()
    try:
        parsed = urlsplit(url)
        # Reading the port validates it
        parsed.port
        httpx.URL(url)
    except (ValueError, httpx.InvalidURL) as e:
        raise ConfigurationError(f"Invalid gateway base URL: {url}", setting="base_url") from e

    if (
        parsed.scheme not in ("http", "https")
        or not parsed.hostname
        or any(ch.isspace() for ch in parsed.netloc)
        or parsed.fragment
    ):
        raise ConfigurationError(f"Invalid gateway base URL: {url}", setting="base_url")

    # Entity paths are resolved relative to the base, so its path must end with a slash
    base = urlunsplit((parsed.scheme, parsed.netloc, parsed.path.rstrip("/") + "/", "", ""))
    return base, dict(parse_qsl(parsed.query, keep_blank_values=True))


def format_key(key: Union[str, int]) -> str:
    """Render an entity key as an OData key segment, e.g. ``('42')``."""
    if isinstance(key, bool):
        raise ValidationException("Entity key must be a string or integer", field="key")
    if isinstance(key, int):
        return f"({key})"

    key = str(key)
    if not key:
        raise ValidationException("Entity key is required", field="key")
    escaped = key.replace("'", "''")
    return f"('{quote(escaped, safe='')}')"


class AuthenticatedQueryClient:
    """
    Query client bound to one gateway base URL.

    Use :meth:`configure` to build an instance and ``async with`` to make
    sure the connection pool is released:

        async with AuthenticatedQueryClient.configure(config) as client:
            products = await client.list_top("Products", 10)
    """

    def __init__(
        self,
        config: ClientConfiguration,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        record_type: Type[ProductRecord] = ProductRecord
    ):
        self.config = config
        self.base_url, self.base_params = validate_base_url(config.base_url)
        self.record_type = record_type
        self._headers = config.gateway_headers()

        for name, value in self._headers.items():
            if not value:
                logger.warning(f"Gateway header {name} is not configured, sending it empty")

        # No request is sent until an operation is invoked
        self._http = httpx.AsyncClient(
            base_url=self.base_url,
            params=self.base_params,
            timeout=config.timeout,
            transport=transport,
            headers={"Accept": "application/json"},
            event_hooks={
                "request": [self._decorate_request],
                "response": [self._trace_response],
            },
        )

    @classmethod
    def configure(
        cls,
        config: ClientConfiguration,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ) -> "AuthenticatedQueryClient":
        """
        Build a client for the given configuration.

        Args:
            config: Base URL and gateway header values
            transport: Optional httpx transport, used by tests to stub the gateway

        Raises:
            ConfigurationError: If the base URL is malformed
        """
        return cls(config, transport=transport)

    async def __aenter__(self) -> "AuthenticatedQueryClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _decorate_request(self, request: httpx.Request) -> None:
        for name, value in self._headers.items():
            request.headers[name] = value
        logger.debug(f"TRACE----> {request.method} {request.url}")

    async def _trace_response(self, response: httpx.Response) -> None:
        request = response.request
        logger.debug(f"TRACE----> {request.method} {request.url} -> {response.status_code}")

    async def list_top(self, entity_set: str, count: int) -> List[ProductRecord]:
        """
        Fetch at most ``count`` records of an entity set, in server order.

        Raises:
            ValidationException: If count is not a positive integer
            QueryError: On transport failure, error status or malformed payload
        """
        if isinstance(count, bool) or not isinstance(count, int) or count < 1:
            raise ValidationException("count must be a positive integer", field="count")

        payload = await self._send("GET", entity_set, params={"$top": str(count)})

        if isinstance(payload, Mapping):
            items = payload.get("value")
        else:
            items = payload
        if not isinstance(items, list):
            raise QueryError(
                f"Malformed collection response for {entity_set}",
                context={"entity_set": entity_set}
            )

        records = [self._parse_record(item, entity_set) for item in items[:count]]
        logger.info(f"Fetched {len(records)} records from {entity_set}", extra={"top": count})
        return records

    async def get_by_key(self, entity_set: str, key: Union[str, int]) -> ProductRecord:
        """
        Fetch one record by key.

        Raises:
            NotFoundError: If the gateway reports no record for the key
            QueryError: On transport failure, error status or malformed payload
        """
        path = f"{entity_set}{format_key(key)}"
        payload = await self._send("GET", path, entity_set=entity_set, key=key)
        return self._parse_record(payload, entity_set)

    async def update_by_key(
        self,
        entity_set: str,
        key: Union[str, int],
        partial_fields: Mapping[str, Any]
    ) -> ProductRecord:
        """
        Patch the given fields of one record and return the server's copy.

        Only the fields in ``partial_fields`` are sent. When the gateway
        answers ``204 No Content`` the record is read back by key.

        Raises:
            ValidationException: If no fields are given
            NotFoundError: If the gateway reports no record for the key
            QueryError: On transport failure, error status or malformed payload
        """
        if not partial_fields:
            raise ValidationException("At least one field is required for an update", field="partial_fields")

        body = {
            self.record_type.wire_name(name): _to_wire(value)
            for name, value in partial_fields.items()
        }
        path = f"{entity_set}{format_key(key)}"

        logger.info(
            f"Updating {entity_set} record {key}",
            extra={"fields": sorted(partial_fields)}
        )
        payload = await self._send(
            "PATCH",
            path,
            json=body,
            headers={"Prefer": "return=representation"},
            entity_set=entity_set,
            key=key,
        )

        if payload is None:
            return await self.get_by_key(entity_set, key)
        return self._parse_record(payload, entity_set)

    async def _send(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, str]] = None,
        json: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        entity_set: Optional[str] = None,
        key: Optional[Union[str, int]] = None
    ) -> Any:
        """Issue one request and return the decoded JSON body, or None when empty."""
        try:
            response = await self._http.request(method, path, params=params, json=json, headers=headers)
        except httpx.RequestError as e:
            logger.error(f"Gateway request {method} {path} failed: {str(e)}")
            raise QueryError(
                f"Failed to reach gateway: {str(e)}",
                context={"method": method, "path": path},
                original_exception=e
            ) from e

        if response.status_code == 404 and key is not None:
            logger.warning(f"{entity_set} record {key} not found")
            raise NotFoundError(resource_type=entity_set or path, resource_id=key)

        if response.is_error:
            logger.error(
                f"Gateway returned {response.status_code} for {method} {path}",
                extra={"status_code": response.status_code}
            )
            raise QueryError(
                f"Gateway returned {response.status_code} for {method} {path}",
                upstream_status=response.status_code,
                context={"method": method, "path": path, "body": response.text[:500]}
            )

        if response.status_code == 204 or not response.content:
            return None

        try:
            return response.json()
        except ValueError as e:
            raise QueryError(
                f"Malformed JSON response for {method} {path}",
                upstream_status=response.status_code,
                original_exception=e
            ) from e

    def _parse_record(self, data: Any, entity_set: str) -> ProductRecord:
        if not isinstance(data, Mapping):
            raise QueryError(
                f"Malformed record in {entity_set} response",
                context={"entity_set": entity_set}
            )
        try:
            return self.record_type.model_validate(data)
        except ValidationError as e:
            raise QueryError(
                f"Malformed record in {entity_set} response",
                context={"entity_set": entity_set},
                original_exception=e
            ) from e


def _to_wire(value: Any) -> Any:
    # Decimal is not JSON serializable
    if isinstance(value, Decimal):
        return float(value)
    return value
