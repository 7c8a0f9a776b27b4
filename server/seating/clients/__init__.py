"""Clients for services the coordinator depends on."""

from .availability_client import AvailabilityClient

__all__ = ["AvailabilityClient"]
