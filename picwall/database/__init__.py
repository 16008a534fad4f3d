from .dbbase import Base, utcnow
from .db_session import Database

db = Database()


def get_db():
    """FastAPI dependency yielding one session per request."""
    session = db.get_session()
    try:
        yield session
    finally:
        session.close()


__all__ = ["Base", "utcnow", "Database", "db", "get_db"]
