from .settings import Settings, get_settings, settings
from .database import DatabaseManager, db_manager, get_database, get_database_manager, lifespan

__all__ = [
    "Settings",
    "get_settings",
    "settings",
    "DatabaseManager",
    "db_manager",
    "get_database",
    "get_database_manager",
    "lifespan",
]
