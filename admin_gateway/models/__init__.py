"""ORM Models — SQLAlchemy tables owned by this service."""
