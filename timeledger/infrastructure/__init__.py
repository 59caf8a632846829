"""
Infrastructure layer for the timeledger reporting API.

This layer contains the HTTP surface (FastAPI routers and middleware) over
the application use cases. Persistence is external: callers post the
already-fetched records a report needs.
"""
