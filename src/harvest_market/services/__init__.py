"""
harvest_market.services

Service-layer package.

Responsibilities:
- Own transaction boundaries and persistence decisions.
- Apply validation, ownership and state-machine rules before writing.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Services take an AsyncSession in their constructor and never reach for app state,
# so tests can hand them any session bound to a scratch database.
