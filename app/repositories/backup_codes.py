from datetime import datetime

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.backup_code import BackupCode


class BackupCodeStore:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def replace(self, user_id: str, code_hashes: list[str]) -> None:
        """Borra el lote anterior (usado o no) y guarda el nuevo."""
        await self.clear(user_id)
        self.session.add_all(BackupCode(user_id=user_id, code_hash=h) for h in code_hashes)
        await self.session.flush()

    async def clear(self, user_id: str) -> None:
        await self.session.execute(delete(BackupCode).where(BackupCode.user_id == user_id))

    async def consume(self, user_id: str, code_hash: str, now: datetime) -> bool:
        found = await self.session.execute(
            select(BackupCode.id).where(
                BackupCode.user_id == user_id,
                BackupCode.code_hash == code_hash,
                BackupCode.used_at.is_(None),
            ).limit(1)
        )
        code_id = found.scalar_one_or_none()
        if code_id is None:
            return False
        # el lote puede traer duplicados (no se chequean); se gasta uno por vez
        result = await self.session.execute(
            update(BackupCode)
            .where(BackupCode.id == code_id, BackupCode.used_at.is_(None))
            .values(used_at=now)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def count_remaining(self, user_id: str) -> int:
        result = await self.session.execute(
            select(func.count(BackupCode.id)).where(
                BackupCode.user_id == user_id,
                BackupCode.used_at.is_(None),
            )
        )
        return result.scalar_one()
