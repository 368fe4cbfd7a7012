"""Database package."""
from convention_voting.db.session import engine, SessionLocal, get_db, get_db_context, transaction
from convention_voting.db.base import Base

__all__ = ["engine", "SessionLocal", "get_db", "get_db_context", "transaction", "Base"]
