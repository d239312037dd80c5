"""ORM models for blueprint persistence."""

from .base import Base, SessionLocal, configure_database, get_engine, normalize_database_url
from .blueprint import CvBlueprint
from .blueprint_change import BlueprintChange

__all__ = [
    "Base",
    "SessionLocal",
    "configure_database",
    "get_engine",
    "normalize_database_url",
    "CvBlueprint",
    "BlueprintChange",
]
