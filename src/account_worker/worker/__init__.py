"""
account_worker.worker

Broker consumption package.

Responsibilities:
- Request type registry and dispatch loop.
- Supervision (restart with backoff) of the loop.
"""

# Package marker.
