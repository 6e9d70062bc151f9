"""
account_worker.auth

Credential capabilities package.

Responsibilities:
- JWT issuing and validation.
- Password hashing and verification.
"""

# Package marker.
