"""FastAPI dependency providers for IAM bounded context.

This package is the composition root for IAM: it binds ports to their
PostgreSQL adapters and builds application services per request.
"""
