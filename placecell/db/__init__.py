"""
Database module - relational store and MongoDB connections.
"""
from placecell.db.postgres import Base, get_db, get_db_session, test_postgres_connection
from placecell.db.mongodb import get_mongo_db, test_mongo_connection

__all__ = [
    "Base",
    "get_db",
    "get_db_session",
    "test_postgres_connection",
    "get_mongo_db",
    "test_mongo_connection"
]
