from .database import MonitorDatabase, SQLiteLoggingHandler

__all__ = ["MonitorDatabase", "SQLiteLoggingHandler"]
