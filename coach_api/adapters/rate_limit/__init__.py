"""Rate limiting adapters.

The API layer depends on the abstract limiter only, so the in-memory table
can be replaced later by a shared store without touching the routes.
"""
