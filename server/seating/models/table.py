"""Table model definition."""

from dataclasses import dataclass


@dataclass
class Table:
    """A seating unit owned by the availability store."""

    table_id: str
    capacity: int
    location: str
    available: bool

    def __post_init__(self) -> None:
        if self.capacity < 1:
            raise ValueError(f"Table {self.table_id} capacity must be positive, got {self.capacity}")

    def __repr__(self) -> str:
        return (
            f"<Table(table_id='{self.table_id}', capacity={self.capacity}, "
            f"location='{self.location}', available={self.available})>"
        )
