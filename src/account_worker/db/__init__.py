"""
account_worker.db

Persistence package (SQLAlchemy async).

Responsibilities:
- Provide ORM models, engine/session setup, transaction scope and repositories.
"""

# Package marker.
