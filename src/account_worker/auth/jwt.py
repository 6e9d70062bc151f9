"""
account_worker.auth.jwt

JWT issuing and validation helpers.

Responsibilities:
- Issue bearer tokens for registered/authenticated accounts
  (claims: iss, userId, email, iat, exp).
- Decode and validate tokens with strict claim requirements (iss/exp/iat).

Note:
- The signing secret always comes from `Settings.jwt_secret`, never from code.
"""

from __future__ import annotations

import uuid
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt
from jwt import InvalidTokenError

from account_worker.settings import Settings


@dataclass(frozen=True, slots=True)
class JwtConfig:
    alg: str
    issuer: str
    secret: str
    ttl: timedelta = timedelta(hours=24)

    @classmethod
    def from_settings(cls, settings: Settings) -> JwtConfig:
        return cls(
            alg=settings.jwt_alg,
            issuer=settings.jwt_issuer,
            secret=settings.jwt_secret,
            ttl=timedelta(hours=settings.token_ttl_hours),
        )


class JwtValidationError(Exception):
    pass


def issue_token(
    *,
    cfg: JwtConfig,
    account_id: uuid.UUID,
    email: str,
    now: datetime | None = None,
) -> str:
    now = now or datetime.now(tz=UTC)
    payload: dict[str, Any] = {
        "iss": cfg.issuer,
        "userId": str(account_id),
        "email": email,
        "iat": int(now.timestamp()),
        "exp": int((now + cfg.ttl).timestamp()),
    }
    return jwt.encode(payload, cfg.secret, algorithm=cfg.alg)


def decode_and_validate(*, cfg: JwtConfig, token: str) -> dict[str, Any]:
    try:
        return jwt.decode(
            token,
            cfg.secret,
            algorithms=[cfg.alg],
            issuer=cfg.issuer,
            options={"require": ["exp", "iat", "iss"]},
        )
    except InvalidTokenError as e:
        raise JwtValidationError(str(e)) from e


class TokenSigner:
    """Signing capability injected into the account service."""

    def __init__(self, cfg: JwtConfig, *, clock: Callable[[], datetime] | None = None) -> None:
        self._cfg = cfg
        self._clock = clock or (lambda: datetime.now(tz=UTC))

    def sign(self, *, account_id: uuid.UUID, email: str) -> str:
        return issue_token(cfg=self._cfg, account_id=account_id, email=email, now=self._clock())


# --- Module Notes -----------------------------------------------------------
# Token issuing is used by `services.account_service` on register and login.
