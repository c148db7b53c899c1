"""
harvest_market.auth

Authentication/authorization package.

Responsibilities:
- Bearer token issuing and validation.
- Password hashing.
- FastAPI identity dependencies and the ownership guard.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# `auth.deps` reads the storage handle and token service through `api.deps`;
# the token, password and ownership modules have no FastAPI imports.
