"""
harvest_market.observability

Observability package: structlog configuration and the request-context
middleware that stamps every log line with the request id.
"""
