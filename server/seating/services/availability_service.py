"""Availability store contract and its in-memory implementation."""

import logging
from dataclasses import replace
from typing import Iterable, Optional, Protocol

from ..core.exceptions import TableNotFoundError
from ..models.table import Table

logger = logging.getLogger(__name__)


class AvailabilityStore(Protocol):
    """
    Operations the reservation coordinator needs from the availability store.

    Both are idempotent for the same target value. Neither retries or queues
    work on the caller's behalf.
    """

    async def get_table(self, table_id: str) -> Table:
        """Return the table, or raise TableNotFoundError."""
        ...

    async def set_table_availability(self, table_id: str, available: bool) -> Table:
        """Set the availability flag and return the updated table, or raise TableNotFoundError."""
        ...


class InMemoryAvailabilityStore:
    """Table records held in process memory, one per table ID."""

    def __init__(self, tables: Optional[Iterable[Table]] = None):
        self._tables: dict[str, Table] = {}
        for table in tables or ():
            self._tables[table.table_id] = replace(table)

    async def get_table(self, table_id: str) -> Table:
        return replace(self._get_or_raise(table_id))

    async def set_table_availability(self, table_id: str, available: bool) -> Table:
        table = self._get_or_raise(table_id)
        previous = table.available
        table.available = available

        logger.info(
            "Table availability updated",
            extra={
                "table_id": table_id,
                "previous": previous,
                "available": available,
            }
        )

        return replace(table)

    async def list_tables(self) -> list[Table]:
        return [replace(table) for table in self._tables.values()]

    def _get_or_raise(self, table_id: str) -> Table:
        table = self._tables.get(table_id)
        if table is None:
            logger.debug("Table lookup missed", extra={"table_id": table_id})
            raise TableNotFoundError(table_id)
        return table
