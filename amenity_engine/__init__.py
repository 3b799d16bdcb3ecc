"""Resort amenity reservation and availability engine."""

__version__ = "1.0.0"
