"""
account_worker.services.account_service

Account command handlers (transaction owner).

Responsibilities:
- Register and authenticate accounts, issuing signed tokens.
- Read and update profile identity and metrics.
- Query the metrics history ledger.
- Run every command inside exactly one `transaction()` scope.
"""

from __future__ import annotations

import uuid
from collections.abc import Callable
from datetime import datetime, time

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from account_worker.auth.jwt import TokenSigner
from account_worker.auth.passwords import PasswordHasher
from account_worker.db.models import Account, utcnow
from account_worker.db.repositories.accounts import AccountRepo
from account_worker.db.repositories.metrics_history import MetricsHistoryRepo
from account_worker.db.session import transaction
from account_worker.errors import AuthError, ConflictError, NotFoundError
from account_worker.messaging.schemas import (
    AuthResponse,
    LoginRequest,
    MetricsHistoryEntry,
    MetricsHistoryQuery,
    Profile,
    ProfileInfo,
    ProfileMetrics,
    RegisterRequest,
    UpdateProfileInfoRequest,
    UpdateProfileMetricsRequest,
)
from account_worker.observability.logging import get_logger
from account_worker.services.change_tracking import apply_metrics_update

log = get_logger(__name__)

REGISTERED_MESSAGE = "User registered successfully"
DUPLICATE_EMAIL_MESSAGE = "User with this email already exists"
AUTHENTICATED_MESSAGE = "User authenticated successfully"
INVALID_CREDENTIALS_MESSAGE = "Invalid credentials"


class AccountService:
    def __init__(
        self,
        *,
        sessions: async_sessionmaker[AsyncSession],
        hasher: PasswordHasher,
        signer: TokenSigner,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._sessions = sessions
        self._hasher = hasher
        self._signer = signer
        self._clock = clock

    async def register(self, request: RegisterRequest, *, correlation_id: str) -> AuthResponse:
        try:
            async with transaction(self._sessions) as session:
                accounts = AccountRepo(session)
                if await accounts.get_by_email(request.email) is not None:
                    raise ConflictError(f"email already registered: {request.email}")
                account = await accounts.create(
                    email=request.email,
                    password_hash=await self._hasher.hash(request.password),
                    name=request.name,
                )
                token = self._signer.sign(account_id=account.id, email=account.email)
        except ConflictError:
            # Covers both the pre-check and a concurrent insert losing on the unique index.
            log.warning("register_duplicate_email", email=request.email)
            return AuthResponse(
                token="", message=DUPLICATE_EMAIL_MESSAGE, correlation_id=correlation_id
            )

        log.info("register_succeeded", email=request.email, account_id=str(account.id))
        return AuthResponse(token=token, message=REGISTERED_MESSAGE, correlation_id=correlation_id)

    async def login(self, request: LoginRequest, *, correlation_id: str) -> AuthResponse:
        try:
            async with transaction(self._sessions) as session:
                account = await self._authenticate(session, request)
                token = self._signer.sign(account_id=account.id, email=account.email)
        except AuthError:
            log.warning("login_failed", email=request.email)
            return AuthResponse(
                token="", message=INVALID_CREDENTIALS_MESSAGE, correlation_id=correlation_id
            )

        log.info("login_succeeded", email=request.email, account_id=str(account.id))
        return AuthResponse(
            token=token, message=AUTHENTICATED_MESSAGE, correlation_id=correlation_id
        )

    async def get_profile_info(self, account_id: uuid.UUID) -> ProfileInfo | None:
        try:
            async with transaction(self._sessions) as session:
                account = await _require_account(session, account_id)
                return ProfileInfo.from_account(account)
        except NotFoundError:
            return None

    async def get_profile_metrics(self, account_id: uuid.UUID) -> ProfileMetrics | None:
        try:
            async with transaction(self._sessions) as session:
                account = await _require_account(session, account_id)
                return ProfileMetrics.from_account(account)
        except NotFoundError:
            return None

    async def update_profile_info(
        self, account_id: uuid.UUID, request: UpdateProfileInfoRequest
    ) -> Profile | None:
        try:
            async with transaction(self._sessions) as session:
                account = await _require_account(session, account_id, for_update=True)
                account.name = request.name
                await session.flush()
                profile = Profile.from_account(account)
        except NotFoundError:
            return None

        log.info("profile_info_updated", account_id=str(account_id))
        return profile

    async def update_profile_metrics(
        self, account_id: uuid.UUID, request: UpdateProfileMetricsRequest
    ) -> Profile | None:
        try:
            async with transaction(self._sessions) as session:
                account = await _require_account(session, account_id, for_update=True)
                records = await apply_metrics_update(
                    session=session,
                    account=account,
                    update=request,
                    changed_at=self._clock(),
                )
                profile = Profile.from_account(account)
        except NotFoundError:
            return None

        log.info(
            "profile_metrics_updated",
            account_id=str(account_id),
            history_rows=len(records),
            fields=[r.field_name.value for r in records],
        )
        return profile

    async def get_metrics_history(
        self, account_id: uuid.UUID, query: MetricsHistoryQuery
    ) -> list[MetricsHistoryEntry]:
        changed_from = (
            datetime.combine(query.changed_from, time.min) if query.changed_from else None
        )
        changed_to = datetime.combine(query.changed_to, time.max) if query.changed_to else None

        async with transaction(self._sessions) as session:
            records = await MetricsHistoryRepo(session).list_for_account(
                account_id,
                field=query.field,
                changed_from=changed_from,
                changed_to=changed_to,
            )
            return [MetricsHistoryEntry.from_record(r) for r in records]

    async def _authenticate(self, session: AsyncSession, request: LoginRequest) -> Account:
        account = await AccountRepo(session).get_by_email(request.email)
        # Same error for unknown email and wrong password.
        if account is None or not await self._hasher.verify(
            request.password, account.password_hash
        ):
            raise AuthError(INVALID_CREDENTIALS_MESSAGE)
        return account


async def _require_account(
    session: AsyncSession, account_id: uuid.UUID, *, for_update: bool = False
) -> Account:
    account = await AccountRepo(session).get(account_id, for_update=for_update)
    if account is None:
        raise NotFoundError(f"account {account_id} not found")
    return account


# --- Module Notes -----------------------------------------------------------
# Email matching is exact (case-sensitive); the unique index on `accounts.email` is the
# only guard against concurrent duplicate registrations.
