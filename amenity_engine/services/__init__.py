"""
Service layer for the amenity engine.

The pure rules live in their own modules (open_hours, availability,
reservation_state, cost) and AmenityService composes them with the
repository and the transaction boundary.
"""

from .amenity_service import AmenityService
from .base import BaseService

__all__ = [
    "AmenityService",
    "BaseService",
]
