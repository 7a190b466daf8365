"""Database Base — SQLAlchemy declarative base shared by models and migrations."""
