"""Password hashing (bcrypt via passlib), run off the event loop."""

from __future__ import annotations

import asyncio

from passlib.context import CryptContext


class PasswordHasher:
    def __init__(self, *, rounds: int = 12) -> None:
        self._context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)

    async def hash(self, plain: str) -> str:
        # bcrypt is CPU-bound; a worker thread keeps the dispatcher loop responsive.
        return await asyncio.to_thread(self._context.hash, plain)

    async def verify(self, plain: str, hashed: str) -> bool:
        return await asyncio.to_thread(self._verify, plain, hashed)

    def _verify(self, plain: str, hashed: str) -> bool:
        # Malformed stored digests count as a mismatch, not an error.
        try:
            return self._context.verify(plain, hashed)
        except ValueError:
            return False
