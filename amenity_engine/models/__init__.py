"""SQLAlchemy models. Importing this package registers every table on Base.metadata."""

from .amenity import Amenity, AmenityReservation, AmenitySchedule

__all__ = ["Amenity", "AmenityReservation", "AmenitySchedule"]
