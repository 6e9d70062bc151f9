"""
account_worker.errors

Error taxonomy shared by handlers, storage and transport layers.

Responsibilities:
- Give every failure class a stable machine-readable `code`.
- Let the dispatcher decide per class whether to answer, drop or restart.
"""

from __future__ import annotations


class AccountServiceError(Exception):
    code = "internal_error"

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.code)
        self.message = message or self.code


class ValidationError(AccountServiceError):
    """Malformed or incomplete payload."""

    code = "validation_error"


class ConflictError(AccountServiceError):
    """Duplicate email on register."""

    code = "conflict"


class AuthError(AccountServiceError):
    """Bad credentials. Never distinguishes unknown email from wrong password."""

    code = "auth_failed"


class NotFoundError(AccountServiceError):
    code = "not_found"


class TransportError(AccountServiceError):
    """Broker unreachable or broker command failed."""

    code = "transport_error"


class StorageError(AccountServiceError):
    """Transaction failure, deadline expiry, or an unmapped constraint violation."""

    code = "storage_error"


# --- Module Notes -----------------------------------------------------------
# NotFoundError and AuthError are resolved inside handlers (absent value / generic
# credentials message); they are not expected to reach the dispatcher.
