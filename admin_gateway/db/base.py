"""SQLAlchemy Declarative Base — metadata root for the admin_sessions table.

Invariants:
    - Every ORM model (today only AdminSession) inherits from Base
    - Alembic and the test fixtures build the schema from Base.metadata

Design Decisions:
    - Kept apart from models/: alembic env.py imports Base without importing routes
"""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Declarative base for admin gateway tables."""
    pass
