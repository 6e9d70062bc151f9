"""
account_worker.messaging

Broker-facing package.

Responsibilities:
- Wire models and codecs for request/response envelopes.
- Broker client boundary (Redis/KeyDB).
- Response publishing.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Handlers never touch the broker; only the dispatcher and publisher do.
