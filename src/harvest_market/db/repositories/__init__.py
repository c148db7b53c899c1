"""
harvest_market.db.repositories

Repository classes: thin, session-bound query helpers per collection.
"""

# Package marker.
