from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from askanai.models.user_role import AppRole, UserRole


class CRUDUserRole:
    async def has_role(self, db: AsyncSession, user_id: str, role: AppRole) -> bool:
        result = await db.execute(
            select(UserRole.id)
            .where(UserRole.user_id == user_id)
            .where(UserRole.role == role)
            .limit(1)
        )
        return result.scalar_one_or_none() is not None

    async def grant_role(self, db: AsyncSession, user_id: str, role: AppRole) -> None:
        """Idempotent, granting a role twice is not an error."""
        if await self.has_role(db, user_id, role):
            return
        try:
            db.add(UserRole(user_id=user_id, role=role))
            await db.commit()
        except IntegrityError:
            # a concurrent grant won the race
            await db.rollback()


crud_user_role = CRUDUserRole()
