# amenity_engine/repositories/factory.py
"""
Repository Factory

Provides centralized creation of repository instances,
ensuring consistent initialization and dependency injection.
"""

from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

# Avoid circular imports
if TYPE_CHECKING:
    from .amenity_repository import AmenityRepository


class RepositoryFactory:
    """
    Factory class for creating repository instances.

    Centralizes repository creation to ensure consistent initialization
    and makes it easy to swap implementations if needed.
    """

    @staticmethod
    def create_amenity_repository(db: Session) -> "AmenityRepository":
        """Create repository for amenities, schedules and reservations."""
        from .amenity_repository import AmenityRepository

        return AmenityRepository(db)
