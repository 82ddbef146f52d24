"""Database package."""
from inec_poll.db.session import engine, SessionLocal, get_db
from inec_poll.db.base import Base

__all__ = ["engine", "SessionLocal", "get_db", "Base"]
