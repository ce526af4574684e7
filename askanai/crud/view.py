from uuid import UUID
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from askanai.models.poll_view import PollView


class CRUDView:
    async def record_view(self, db: AsyncSession, poll_id: UUID, ip_hash: str, user_agent_hash: str) -> None:
        """One view per (ip hash, user agent hash) fingerprint, repeats are accepted and not stored."""
        try:
            db.add(PollView(poll_id=poll_id, ip_hash=ip_hash, user_agent_hash=user_agent_hash))
            await db.commit()
        except IntegrityError:
            await db.rollback()

    async def count_views(self, db: AsyncSession, poll_id: UUID) -> int:
        result = await db.execute(select(func.count(PollView.id)).where(PollView.poll_id == poll_id))
        return result.scalar_one() or 0


crud_view = CRUDView()
