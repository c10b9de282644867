"""Database module for the link shortener application."""
from shortlinks.db.base import engine, get_engine, init_models
from shortlinks.db.session import get_db, db_transaction

__all__ = [
    "engine",
    "get_engine",
    "init_models",
    "get_db",
    "db_transaction",
]
