from __future__ import annotations

import uuid

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from account_worker.db.models import Account
from account_worker.errors import ConflictError


class AccountRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, account_id: uuid.UUID, *, for_update: bool = False) -> Account | None:
        return await self._session.get(Account, account_id, with_for_update=for_update)

    async def get_by_email(self, email: str) -> Account | None:
        stmt = select(Account).where(Account.email == email)
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def create(self, *, email: str, password_hash: str, name: str) -> Account:
        account = Account(id=uuid.uuid4(), email=email, password_hash=password_hash, name=name)
        self._session.add(account)
        try:
            # Flush now so a unique-index violation surfaces here, not at commit.
            await self._session.flush()
        except IntegrityError as e:
            raise ConflictError(f"email already registered: {email}") from e
        return account
