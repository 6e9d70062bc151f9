"""
account_worker.api

HTTP package for the account worker.

Responsibilities:
- FastAPI app factory (composition root for broker, store and dispatcher).
- Liveness/readiness routes.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Account operations are not exposed over HTTP; they arrive over the broker.
