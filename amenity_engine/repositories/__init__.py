"""
Repository Pattern Implementation for the amenity engine.

Key Components:
- BaseRepository: Foundation for all repositories with generic CRUD operations
- RepositoryFactory: Factory for creating repository instances
- AmenityRepository: Amenities, weekly schedules and reservations

Usage:
    from amenity_engine.repositories import RepositoryFactory

    repository = RepositoryFactory.create_amenity_repository(db)
    reservations = repository.get_reservations_by_amenity(amenity_id, day)
"""

from .amenity_repository import AmenityRepository
from .base_repository import BaseRepository
from .factory import RepositoryFactory

__all__ = [
    "AmenityRepository",
    "BaseRepository",
    "RepositoryFactory",
]
