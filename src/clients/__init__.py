"""Client modules for storage backends."""

from src.clients.sqlite_client import SqliteClient
from src.clients.mongodb_client import MongoDBClient

__all__ = [
    "SqliteClient",
    "MongoDBClient",
]
