"""Persistence layer: SQLAlchemy models, repositories, session management."""
