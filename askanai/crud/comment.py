import logging
from typing import List, Optional, Tuple
from uuid import UUID
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from askanai.core.exceptions import ConflictError, NotFoundError
from askanai.core.security import normalize_text, sha256_hex
from askanai.models.comment import Comment, CommentStatus
from askanai.schemas.comment import CommentCreate

logger = logging.getLogger(__name__)

PAGE_SIZE = 50


class CRUDComment:
    async def create_comment(self, db: AsyncSession, poll_id: UUID, data: CommentCreate,
                             user_id: Optional[str], ip_hash: str, user_agent_hash: str) -> Comment:
        """The same text from the same ip hash on one poll is a DUPLICATE_COMMENT."""
        comment = Comment(
            poll_id=poll_id,
            body=data.body,
            display_name=data.display_name,
            user_id=user_id,
            ip_hash=ip_hash,
            user_agent_hash=user_agent_hash,
            text_hash=sha256_hex(normalize_text(data.body)),
        )
        try:
            db.add(comment)
            await db.commit()
        except IntegrityError:
            await db.rollback()
            raise ConflictError("DUPLICATE_COMMENT")
        return comment

    async def get_poll_comment(self, db: AsyncSession, poll_id: UUID, comment_id: UUID) -> Optional[Comment]:
        result = await db.execute(
            select(Comment).where(Comment.id == comment_id).where(Comment.poll_id == poll_id)
        )
        return result.scalar_one_or_none()

    async def list_visible(self, db: AsyncSession, poll_id: UUID) -> List[Comment]:
        result = await db.execute(
            select(Comment)
            .where(Comment.poll_id == poll_id)
            .where(Comment.status == CommentStatus.VISIBLE)
            .order_by(Comment.created_at.desc())
        )
        return list(result.scalars().all())

    async def list_for_admin(self, db: AsyncSession, status: Optional[CommentStatus],
                             page: int = 1) -> Tuple[List[Comment], int]:
        query = select(Comment)
        count_query = select(func.count(Comment.id))
        if status is not None:
            query = query.where(Comment.status == status)
            count_query = count_query.where(Comment.status == status)
        result = await db.execute(
            query.order_by(Comment.created_at.desc())
            .offset((page - 1) * PAGE_SIZE)
            .limit(PAGE_SIZE)
        )
        total = await db.execute(count_query)
        return list(result.scalars().all()), total.scalar_one()

    async def moderate(self, db: AsyncSession, comment_id: UUID, status: CommentStatus) -> Comment:
        comment = await db.get(Comment, comment_id)
        if comment is None:
            raise NotFoundError()
        comment.status = status
        await db.commit()
        logger.info("comment %s set to %s", comment_id, status.value)
        return comment


crud_comment = CRUDComment()
