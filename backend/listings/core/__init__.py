from listings.core.config import settings
from listings.core.database import get_db, Base, get_engine, connection_scope

__all__ = ["settings", "get_db", "Base", "get_engine", "connection_scope"]
