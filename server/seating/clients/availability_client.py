"""HTTP client for the availability store service."""

import logging
from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx

from ..core.exceptions import TableNotFoundError, UpstreamUnavailableError
from ..core.middleware import REQUEST_ID_HEADER, get_request_id
from ..models.table import Table
from ..schemas.table import Table as TableSchema

logger = logging.getLogger(__name__)


class AvailabilityClient:
    """
    Reads and updates table availability over HTTP.

    A 404 from the store becomes ``TableNotFoundError``. Any other error status,
    transport failure, timeout or malformed body becomes
    ``UpstreamUnavailableError`` carrying the underlying cause. Calls are never
    retried here.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 5.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(timeout),
            transport=transport,
            headers={"Accept": "application/json"},
        )

    async def get_table(self, table_id: str) -> Table:
        data = await self._request("GET", table_id, operation="get_table")
        return self._to_table(data, operation="get_table")

    async def set_table_availability(self, table_id: str, available: bool) -> Table:
        data = await self._request(
            "PUT", table_id, operation="set_table_availability", json={"available": available}
        )
        return self._to_table(data, operation="set_table_availability")

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "AvailabilityClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def _request(
        self,
        method: str,
        table_id: str,
        operation: str,
        json: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        headers = {}
        request_id = get_request_id()
        if request_id:
            headers[REQUEST_ID_HEADER] = request_id

        path = f"/tables/{quote(table_id, safe='')}"

        try:
            response = await self._client.request(method, path, json=json, headers=headers)
        except httpx.TimeoutException as e:
            logger.error(
                "Availability store call timed out",
                extra={"operation": operation, "table_id": table_id, "error": str(e)}
            )
            raise UpstreamUnavailableError(operation=operation, cause=f"timeout: {e!r}") from e
        except httpx.RequestError as e:
            logger.error(
                "Availability store unreachable",
                extra={"operation": operation, "table_id": table_id, "error": str(e)}
            )
            raise UpstreamUnavailableError(operation=operation, cause=f"request error: {e!r}") from e

        if response.status_code == 404:
            raise TableNotFoundError(table_id)

        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(
                "Availability store returned an error",
                extra={
                    "operation": operation,
                    "table_id": table_id,
                    "status_code": response.status_code,
                }
            )
            raise UpstreamUnavailableError(
                operation=operation,
                cause=f"HTTP {response.status_code}: {response.text[:200]}",
            ) from e

        try:
            return response.json()
        except ValueError as e:
            raise UpstreamUnavailableError(operation=operation, cause="response body is not JSON") from e

    @staticmethod
    def _to_table(data: Dict[str, Any], operation: str) -> Table:
        try:
            schema = TableSchema.model_validate(data)
        except ValueError as e:
            raise UpstreamUnavailableError(
                operation=operation, cause=f"unexpected table payload: {e}"
            ) from e

        return Table(
            table_id=schema.table_id,
            capacity=schema.capacity,
            location=schema.location,
            available=schema.available,
        )
