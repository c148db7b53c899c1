"""
harvest_market.api.routers

HTTP routers, one module per resource.
"""

# Package marker.
