"""
account_worker

Top-level package for the account worker: a broker-driven service answering
registration, login, profile and metrics-history requests.

Responsibilities:
- Expose package version metadata.
"""

__all__ = ["__version__"]

__version__ = "0.1.0"


# --- Module Notes -----------------------------------------------------------
# Keep this file minimal to avoid import-time side effects across the codebase.
