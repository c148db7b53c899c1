"""
harvest_market.db

Persistence package (SQLAlchemy async).

Responsibilities:
- Provide ORM models, engine/session setup, and repositories.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Services receive an AsyncSession; nothing in this package holds a global connection.
