from .database import Base, Database, get_async_session

__all__ = ["Base", "Database", "get_async_session"]
