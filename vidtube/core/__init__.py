"""Core app configuration, database and security."""

from vidtube.core.config import Settings, get_settings
from vidtube.core.database import get_db

__all__ = ["Settings", "get_settings", "get_db"]
