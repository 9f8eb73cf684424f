"""Settings, database session handling and token/password security."""

from app.core.config import Settings, get_settings, settings
from app.core.database import SessionLocal, check_db_connected, get_db

__all__ = ["Settings", "SessionLocal", "check_db_connected", "get_db", "get_settings", "settings"]
