from .settings import Settings, get_settings, settings
from .database import async_session_manager, create_engine, create_session_maker
from .table_names import TableNames

__all__ = [
    "settings",
    "Settings",
    "get_settings",
    "create_engine",
    "create_session_maker",
    "async_session_manager",
    "TableNames",
]
