"""Pydantic schemas for request/response validation."""

from .common import *  # noqa: F403
from .reservation import *  # noqa: F403
from .table import *  # noqa: F403
