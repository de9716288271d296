"""Resilient Data Service Client — PostgREST-over-HTTPS access with retry and error mapping.

Invariants:
    - Every request is a single-shot operation wrapped by execute_with_retry
    - Non-2xx responses → DataServiceError(status_code, service_code, message)
    - Transport failures → DataServiceError(None, "connection_error"); not the
      rate-limit signature, so never retried
    - Response bodies are parsed only for rows or for the error code/message;
      a 2xx body that is not JSON → DataServiceError(status, "invalid_response_body")
    - The service key is sent as headers, never logged

Design Decisions:
    - Wrapper over raw httpx.AsyncClient: isolates retry policy from route handlers
    - Filters are raw PostgREST operators ({"id": "eq.42"}); eq() builds the common case
    - transport injectable: tests plug httpx.MockTransport in place of the network
"""

import logging
from collections.abc import Mapping, Sequence
from typing import Any

import httpx

from admin_gateway.core.errors import DataServiceError, ErrorContext
from admin_gateway.infrastructure.retry_executor import RetryPolicy, execute_with_retry

logger = logging.getLogger(__name__)

Row = dict[str, Any]

CONNECTION_ERROR = "connection_error"
INVALID_BODY = "invalid_response_body"


def eq(value: object) -> str:
    """PostgREST equality filter value."""
    return f"eq.{value}"


def in_(values: Sequence[object]) -> str:
    """PostgREST membership filter value."""
    return "in.(" + ",".join(str(v) for v in values) + ")"


class ResilientDataServiceClient:
    """Wraps httpx.AsyncClient with retry on rate limits and error mapping."""

    REST_PREFIX = "/rest/v1"

    def __init__(
        self,
        base_url: str,
        api_key: str,
        *,
        retry_policy: RetryPolicy | None = None,
        timeout_seconds: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.retry_policy = retry_policy or RetryPolicy()
        self.client = httpx.AsyncClient(
            base_url=base_url.rstrip("/") + self.REST_PREFIX,
            headers={
                "apikey": api_key,
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
            },
            timeout=timeout_seconds,
            transport=transport,
        )

    async def select(
        self,
        table: str,
        *,
        columns: str = "*",
        filters: Mapping[str, str] | None = None,
        order: str | None = None,
        limit: int | None = None,
        offset: int | None = None,
    ) -> list[Row]:
        params: dict[str, str] = {"select": columns, **(filters or {})}
        if order:
            params["order"] = order
        if limit is not None:
            params["limit"] = str(limit)
        if offset is not None:
            params["offset"] = str(offset)
        return await self._request("GET", table, params=params)

    async def insert(self, table: str, rows: Row | list[Row]) -> list[Row]:
        return await self._request(
            "POST", table, json=rows,
            headers={"Prefer": "return=representation"},
        )

    async def update(
        self, table: str, values: Row, filters: Mapping[str, str],
    ) -> list[Row]:
        return await self._request(
            "PATCH", table, params=dict(filters), json=values,
            headers={"Prefer": "return=representation"},
        )

    async def delete(self, table: str, filters: Mapping[str, str]) -> list[Row]:
        return await self._request(
            "DELETE", table, params=dict(filters),
            headers={"Prefer": "return=representation"},
        )

    async def aclose(self) -> None:
        await self.client.aclose()

    async def _request(self, method: str, table: str, **kwargs) -> list[Row]:
        async def attempt() -> list[Row]:
            return await self._send_once(method, table, **kwargs)
        return await execute_with_retry(attempt, self.retry_policy)

    async def _send_once(self, method: str, table: str, **kwargs) -> list[Row]:
        """One HTTP round trip, mapped to rows or DataServiceError."""
        try:
            response = await self.client.request(method, f"/{table}", **kwargs)
        except httpx.TransportError as e:
            logger.error(
                f"Data service unreachable: {e}", extra={"table": table},
            )
            raise DataServiceError(
                str(e) or type(e).__name__, None, CONNECTION_ERROR,
                context=ErrorContext(table=table),
            ) from e
        if response.is_success:
            return _rows(response, table)
        raise _map_error(response, table)


def _rows(response: httpx.Response, table: str) -> list[Row]:
    if not response.content:
        return []
    try:
        body = response.json()
    except ValueError as e:
        logger.error(
            "Data service returned a non-JSON success body",
            extra={"table": table, "status_code": response.status_code},
        )
        raise DataServiceError(
            "response body is not JSON", response.status_code, INVALID_BODY,
            context=ErrorContext(table=table),
        ) from e
    if isinstance(body, list):
        return body
    return [body]


def _map_error(response: httpx.Response, table: str) -> DataServiceError:
    service_code = None
    message = response.reason_phrase or "request failed"
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        service_code = body.get("code") or body.get("error_code")
        message = body.get("message") or body.get("msg") or message
        if service_code is not None:
            service_code = str(service_code)
    logger.warning(
        f"Data service returned {response.status_code}",
        extra={
            "table": table,
            "status_code": response.status_code,
            "service_code": service_code,
        },
    )
    return DataServiceError(
        message, response.status_code, service_code,
        context=ErrorContext(table=table),
    )
