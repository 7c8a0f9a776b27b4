"""Demo data loaded at startup when ``SEED_DEMO_DATA`` is enabled."""

from ..models.reservation import WaitlistEntry
from ..models.table import Table


def seed_tables() -> list[Table]:
    """Tables the availability store starts with."""
    return [
        Table(table_id="T001", capacity=4, location="Window", available=True),
        Table(table_id="T002", capacity=2, location="Corner", available=False),
        Table(table_id="T003", capacity=6, location="Center", available=True),
        Table(table_id="T004", capacity=8, location="Balcony", available=False),
    ]


def seed_waitlists() -> dict[str, list[WaitlistEntry]]:
    """Waitlists the reservation coordinator starts with, keyed by table ID."""
    return {
        "T002": [
            WaitlistEntry(customer_id="C101", preferences=["Window", "Quiet"]),
            WaitlistEntry(customer_id="C102", preferences=["Corner", "Loud"]),
            WaitlistEntry(customer_id="C103", preferences=["Center", "Quiet"]),
        ],
    }


def seed_reservations() -> dict[str, str]:
    """Customers holding the tables that start unavailable, keyed by table ID."""
    return {
        "T002": "C001",
        "T004": "C002",
    }
