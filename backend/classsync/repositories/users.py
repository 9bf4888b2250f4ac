from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..db.models import UserORM
from .records import RecordRepository


class UserRepository(RecordRepository):
    def __init__(self, db: AsyncSession):
        super().__init__(db, UserORM)

    async def verify_password(self, username: str, password: str) -> UserORM | None:
        """Compare against the stored hash inside the database (pgcrypto crypt)."""
        if not username:
            return None
        stmt = select(UserORM).where(
            UserORM.username == username,
            UserORM.password == func.crypt(password or "", UserORM.password),
        )
        result = await self.db.execute(stmt)
        return result.scalars().first()
