"""
Shared, cross-cutting code for the API.

`core/` holds the building blocks every resource uses: the asyncpg pool, the
collection-store interface and its two backends, the collection schemas,
error envelope handlers and notification delivery. Resource-specific rules
live in the resource packages (e.g. `bootcamps/`).
"""
