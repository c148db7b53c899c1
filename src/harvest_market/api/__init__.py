"""
harvest_market.api

HTTP API package (FastAPI).

Responsibilities:
- App factory, dependency wiring, error mapping and routers.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Run locally with `python -m harvest_market.api`.
