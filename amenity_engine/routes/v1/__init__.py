# amenity_engine/routes/v1/__init__.py
"""
API v1 Routes

Versioned API endpoints under /api/v1.
"""

from . import amenities

__all__ = [
    "amenities",
]
