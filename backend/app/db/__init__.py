"""
Persistence layer: declarative base, database-handle provider and the
SQLAlchemy implementation of the persistence gateway.
"""
