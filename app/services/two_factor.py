# app/services/two_factor.py
"""
Ciclo de vida del 2FA por TOTP.

Estados: DISABLED -> SETUP_PENDING (secreto guardado sin confirmar)
-> ENABLED (confirm con código válido) -> DISABLED (disable).

Un secreto sin confirmar nunca es confiable: todo lo que verifica códigos
de login mira primero `two_factor_enabled`.
"""

import logging
import secrets
import time
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import AsyncIterator, Callable

from sqlalchemy.ext.asyncio import AsyncSession

from app.core import base32, totp
from app.core.codes import (
    RandomSource,
    generate_backup_codes,
    generate_secret,
    generate_token,
    hash_backup_code,
    normalize_backup_code,
)
from app.core.config import Settings, settings
from app.core.errors import AlreadyEnabled, InvalidCode, InvalidOrExpiredToken, NotEnabled, UserNotFound
from app.models.user import User
from app.models.verification_token import TokenType
from app.repositories import BackupCodeStore, UserStore, VerificationTokenStore

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


@dataclass
class SetupResult:
    secret: str
    otpauth_url: str
    setup_token: str
    backup_codes: list[str]
    expires_at: datetime


@dataclass
class TwoFactorStatus:
    enabled: bool
    enabled_at: datetime | None
    backup_codes_remaining: int


def utc_datetime(ts: float) -> datetime:
    # naive UTC: así se compara igual en MySQL y en SQLite
    return datetime.fromtimestamp(ts, tz=timezone.utc).replace(tzinfo=None)


class TwoFactorService:
    def __init__(
        self,
        session: AsyncSession,
        *,
        clock: Clock = time.time,
        random_bytes: RandomSource = secrets.token_bytes,
        config: Settings = settings,
    ):
        self.session = session
        self.clock = clock
        self.random_bytes = random_bytes
        self.config = config
        self.users = UserStore(session)
        self.tokens = VerificationTokenStore(session)
        self.backup_codes = BackupCodeStore(session)

    @asynccontextmanager
    async def _transaction(self) -> AsyncIterator[None]:
        """Un commit por transición; cualquier error deshace todo lo escrito."""
        try:
            yield
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

    async def _get_user(self, user_id: str) -> User:
        user = await self.users.get(user_id)
        if user is None:
            raise UserNotFound()
        return user

    def _code_matches(self, secret: bytes | None, code: str, now: float) -> bool:
        if not secret:
            return False
        return totp.verify_code(
            secret,
            code,
            now,
            period=self.config.TOTP_PERIOD,
            window=self.config.TOTP_WINDOW,
            digits=self.config.TOTP_DIGITS,
        )

    async def initiate_setup(self, user_id: str) -> SetupResult:
        user = await self._get_user(user_id)
        if user.two_factor_enabled:
            raise AlreadyEnabled()
        account = user.email

        now = utc_datetime(self.clock())
        secret = generate_secret(self.config.TOTP_SECRET_BYTES, self.random_bytes)
        backup_codes = generate_backup_codes(self.config.BACKUP_CODE_COUNT, self.random_bytes)
        setup_token = generate_token(random_bytes=self.random_bytes)
        expires_at = now + timedelta(minutes=self.config.TWO_FACTOR_SETUP_TOKEN_MINUTES)

        async with self._transaction():
            await self.tokens.invalidate_active(user_id, TokenType.two_factor_setup.value, now)
            await self.tokens.create(user_id, setup_token, TokenType.two_factor_setup.value, expires_at)
            await self.users.update(user_id, two_factor_secret=secret)
            await self.backup_codes.replace(user_id, [hash_backup_code(c) for c in backup_codes])

        secret_b32 = base32.encode(secret)
        logger.info("2FA setup initiated for user %s", user_id)
        return SetupResult(
            secret=secret_b32,
            otpauth_url=totp.provisioning_uri(
                secret_b32,
                account,
                self.config.TOTP_ISSUER,
                digits=self.config.TOTP_DIGITS,
                period=self.config.TOTP_PERIOD,
            ),
            setup_token=setup_token,
            backup_codes=backup_codes,
            expires_at=expires_at,
        )

    async def confirm_setup(self, user_id: str, setup_token: str, code: str) -> None:
        user = await self._get_user(user_id)
        ts = self.clock()
        now = utc_datetime(ts)

        token = await self.tokens.find_active(user_id, setup_token, TokenType.two_factor_setup.value, now)
        if token is None:
            logger.warning("2FA confirm rejected for user %s: invalid or expired setup token", user_id)
            raise InvalidOrExpiredToken()

        if not self._code_matches(user.two_factor_secret, code, ts):
            logger.warning("2FA confirm rejected for user %s: invalid code", user_id)
            raise InvalidCode()

        async with self._transaction():
            # condicional: si otro confirm ganó la carrera, no se habilita dos veces
            if not await self.tokens.mark_used(token.id, now):
                raise InvalidOrExpiredToken()
            await self.users.update(user_id, two_factor_enabled=True, two_factor_enabled_at=now)

        logger.info("2FA enabled for user %s", user_id)

    async def disable(self, user_id: str, code: str) -> None:
        user = await self._get_user(user_id)
        if not user.two_factor_enabled:
            raise NotEnabled()

        if not self._code_matches(user.two_factor_secret, code, self.clock()):
            logger.warning("2FA disable rejected for user %s: invalid code", user_id)
            raise InvalidCode()

        async with self._transaction():
            await self.users.update(
                user_id,
                two_factor_enabled=False,
                two_factor_secret=None,
                two_factor_enabled_at=None,
            )
            await self.backup_codes.clear(user_id)

        logger.info("2FA disabled for user %s", user_id)

    async def verify(self, user_id: str, code: str) -> bool:
        user = await self._get_user(user_id)
        if not user.two_factor_enabled or not user.two_factor_secret:
            raise NotEnabled()

        if not self._code_matches(user.two_factor_secret, code, self.clock()):
            logger.warning("2FA verification failed for user %s", user_id)
            raise InvalidCode()
        return True

    async def regenerate_backup_codes(self, user_id: str, code: str) -> list[str]:
        await self.verify(user_id, code)

        backup_codes = generate_backup_codes(self.config.BACKUP_CODE_COUNT, self.random_bytes)
        async with self._transaction():
            await self.backup_codes.replace(user_id, [hash_backup_code(c) for c in backup_codes])

        logger.info("Backup codes regenerated for user %s", user_id)
        return backup_codes

    async def redeem_backup_code(self, user_id: str, code: str) -> int:
        """
        Consume un código de respaldo en lugar de un TOTP.

        Returns:
            int: códigos que le quedan sin usar
        """
        user = await self._get_user(user_id)
        if not user.two_factor_enabled or not user.two_factor_secret:
            raise NotEnabled()

        if len(normalize_backup_code(code)) != 8:
            raise InvalidCode()

        now = utc_datetime(self.clock())
        async with self._transaction():
            consumed = await self.backup_codes.consume(user_id, hash_backup_code(code), now)
            remaining = await self.backup_codes.count_remaining(user_id)
        if not consumed:
            logger.warning("Backup code rejected for user %s", user_id)
            raise InvalidCode()

        logger.info("Backup code redeemed for user %s (%d left)", user_id, remaining)
        return remaining

    async def get_status(self, user_id: str) -> TwoFactorStatus:
        user = await self._get_user(user_id)
        remaining = 0
        if user.two_factor_enabled:
            remaining = await self.backup_codes.count_remaining(user_id)
        return TwoFactorStatus(
            enabled=user.two_factor_enabled,
            enabled_at=user.two_factor_enabled_at,
            backup_codes_remaining=remaining,
        )
