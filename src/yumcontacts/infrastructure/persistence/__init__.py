"""Persistence adapters: relational (SQLAlchemy) and Neo4j."""
