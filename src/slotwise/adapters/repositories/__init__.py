"""Repository adapters: SQLAlchemy Core and in-memory."""
