"""
account_worker.services

Service-layer package.

Responsibilities:
- Own transaction boundaries for account commands.
- Track metric changes into the history ledger.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Services are pure Python and testable with a throwaway SQLite database.
