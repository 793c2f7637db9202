from datetime import datetime
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.verification_token import VerificationToken


class VerificationTokenStore:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, user_id: str, token: str, type: str, expires_at: datetime) -> VerificationToken:
        row = VerificationToken(user_id=user_id, token=token, type=type, expires_at=expires_at)
        self.session.add(row)
        await self.session.flush()
        return row

    async def find_active(self, user_id: str, token: str, type: str, now: datetime) -> Optional[VerificationToken]:
        """Token sin usar y no vencido para (user, token, type)."""
        result = await self.session.execute(
            select(VerificationToken).where(
                VerificationToken.user_id == user_id,
                VerificationToken.token == token,
                VerificationToken.type == type,
                VerificationToken.used_at.is_(None),
                VerificationToken.expires_at > now,
            )
        )
        return result.scalars().first()

    async def mark_used(self, token_id: int, now: datetime) -> bool:
        """
        Marca el token como usado sólo si nadie lo usó antes.

        Returns:
            False si otro request lo consumió primero
        """
        result = await self.session.execute(
            update(VerificationToken)
            .where(VerificationToken.id == token_id, VerificationToken.used_at.is_(None))
            .values(used_at=now)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def invalidate_active(self, user_id: str, type: str, now: datetime) -> int:
        # igual que el reset de password: vencer los anteriores en vez de borrarlos
        result = await self.session.execute(
            update(VerificationToken)
            .where(
                VerificationToken.user_id == user_id,
                VerificationToken.type == type,
                VerificationToken.used_at.is_(None),
                VerificationToken.expires_at > now,
            )
            .values(expires_at=now)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount
