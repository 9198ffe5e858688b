"""
burgerhero.db

Persistence package (SQLAlchemy async) backing the local key-value storage.

Responsibilities:
- Provide the ORM model, engine/session setup, and the storage repository.
"""

# Package marker.
