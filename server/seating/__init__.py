"""Restaurant seating reservations: availability store and reservation coordinator."""

__version__ = "1.0.0"
