from typing import Any, Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user import User


class UserStore:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, user_id: str) -> Optional[User]:
        result = await self.session.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str) -> Optional[User]:
        result = await self.session.execute(select(User).where(User.email == email.lower()))
        return result.scalar_one_or_none()

    async def update(self, user_id: str, **fields: Any) -> None:
        """Update parcial en un solo UPDATE (sincroniza el User cargado en la sesión)."""
        await self.session.execute(
            update(User)
            .where(User.id == user_id)
            .values(**fields)
            .execution_options(synchronize_session="evaluate")
        )
