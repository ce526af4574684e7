import logging
from datetime import datetime, timezone
from typing import List, Optional, Tuple
from uuid import UUID
from pydantic import BaseModel
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from askanai.core.exceptions import ConflictError, NotFoundError
from askanai.core.security import new_creator_key, random_slug, sha256_hex
from askanai.models.option import Option
from askanai.models.poll import Poll, PollStatus
from askanai.models.question import CHOICE_TYPES, Question, QuestionType
from askanai.models.response import Answer, Response
from askanai.schemas.poll import PollCreate, PollUpdate
from askanai.schemas.results import PollResultsResponse
from askanai.services.results import aggregate

logger = logging.getLogger(__name__)

SLUG_ATTEMPTS = 10
ADMIN_PAGE_SIZE = 50

# status changes a poll owner may make, anything else is rejected
ALLOWED_TRANSITIONS = {
    (PollStatus.DRAFT, PollStatus.OPEN),
    (PollStatus.OPEN, PollStatus.CLOSED),
}


class CRUDPoll:
    async def get_poll_by_id(self, db: AsyncSession, poll_id: UUID, with_questions: bool = False) -> Poll | None:
        query = select(Poll).where(Poll.id == poll_id)
        if with_questions:
            query = query.options(selectinload(Poll.questions).selectinload(Question.options))
        result = await db.execute(query)
        return result.scalar_one_or_none()

    async def get_poll_by_slug(self, db: AsyncSession, slug: str) -> Poll | None:
        result = await db.execute(
            select(Poll)
            .options(selectinload(Poll.questions).selectinload(Question.options))
            .where(Poll.slug == slug.strip().lower())
        )
        return result.scalar_one_or_none()

    async def get_live_poll(self, db: AsyncSession, poll_id: UUID, with_questions: bool = False) -> Poll:
        """A poll that exists and has not been archived, NotFoundError otherwise."""
        poll = await self.get_poll_by_id(db, poll_id, with_questions=with_questions)
        if poll is None or poll.is_archived:
            raise NotFoundError()
        return poll

    async def generate_slug(self, db: AsyncSession) -> str:
        slug = random_slug(5)
        for _ in range(SLUG_ATTEMPTS):
            existing = await db.execute(select(Poll.id).where(Poll.slug == slug))
            if existing.scalar_one_or_none() is None:
                break
            slug = random_slug(5)
        # the unique index on slug still guards the insert if every attempt collided
        return slug

    def _build_question(self, position: int, data) -> Question:
        settings_json = data.settings_json
        if isinstance(settings_json, BaseModel):
            settings_json = settings_json.model_dump()
        question = Question(
            position=position,
            type=QuestionType(data.type),
            prompt=data.prompt,
            is_required=data.is_required,
            settings_json=settings_json,
        )
        # non-choice questions get an empty list so the new rows never lazy load
        question.options = [Option(position=index, label=label)
                            for index, label in enumerate(data.options)] if question.type in CHOICE_TYPES else []
        return question

    async def create_poll(self, db: AsyncSession, data: PollCreate,
                          user_id: Optional[str]) -> Tuple[Poll, str]:
        """
        Create the poll with all of its questions and options in one transaction.
        Returns the poll and the plaintext creator key, which is not stored.
        """
        creator_key = new_creator_key()
        poll = Poll(
            slug=await self.generate_slug(db),
            title=data.title,
            description=data.description,
            status=PollStatus(data.settings.status),
            visibility_mode=data.settings.visibility,
            allow_comments=data.settings.allow_comments,
            preview_image_url=data.settings.preview_image_url or None,
            creator_key_hash=sha256_hex(creator_key),
            created_by_user_id=user_id,
            questions=[self._build_question(position, question)
                       for position, question in enumerate(data.questions)],
        )
        try:
            db.add(poll)
            await db.commit()
        except Exception as e:
            logger.error(f"failed to create poll: {e}", exc_info=True)
            await db.rollback()
            raise
        return poll, creator_key

    async def update_poll(self, db: AsyncSession, poll: Poll, data: PollUpdate) -> Poll:
        if data.status is not None and data.status != poll.status:
            if (poll.status, data.status) not in ALLOWED_TRANSITIONS:
                raise ConflictError("INVALID_STATUS_TRANSITION")
            poll.status = data.status
        if data.visibility is not None:
            poll.visibility_mode = data.visibility
        if data.allow_comments is not None:
            poll.allow_comments = data.allow_comments
        await db.commit()
        await db.refresh(poll)
        return poll

    async def archive_poll(self, db: AsyncSession, poll: Poll, actor_user_id: Optional[str],
                           reason: str = "user_delete") -> Poll:
        """Soft delete: the poll is closed and hidden, its rows are kept."""
        poll.status = PollStatus.CLOSED
        poll.archived_at = datetime.now(timezone.utc)
        poll.archived_reason = reason
        poll.archived_by_user_id = actor_user_id
        await db.commit()
        logger.info("archived poll %s (%s)", poll.id, reason)
        return poll

    async def get_questions(self, db: AsyncSession, poll_id: UUID) -> List[Question]:
        result = await db.execute(
            select(Question)
            .options(selectinload(Question.options))
            .where(Question.poll_id == poll_id)
            .order_by(Question.position)
        )
        return list(result.scalars().all())

    async def count_responses(self, db: AsyncSession, poll_id: UUID) -> int:
        result = await db.execute(select(func.count(Response.id)).where(Response.poll_id == poll_id))
        return result.scalar_one() or 0

    async def get_poll_results(self, db: AsyncSession, poll: Poll) -> PollResultsResponse:
        """Aggregated results, the answer rows are read without their response ids."""
        questions = await self.get_questions(db, poll.id)
        response_count = await self.count_responses(db, poll.id)
        answers = await db.execute(
            select(Answer.question_id, Answer.value_text, Answer.value_number, Answer.value_json)
            .join(Response, Answer.response_id == Response.id)
            .where(Response.poll_id == poll.id)
        )
        return PollResultsResponse(
            response_count=response_count,
            results_by_question_id=aggregate(questions, answers.all()),
        )


    async def list_for_admin(self, db: AsyncSession, status: Optional[PollStatus],
                             page: int = 1) -> Tuple[List[Tuple[Poll, int]], int]:
        """Newest polls first, archived ones included, each with its response count."""
        response_count = func.count(Response.id).label("response_count")
        query = (select(Poll, response_count)
                 .outerjoin(Response, Response.poll_id == Poll.id)
                 .group_by(Poll.id))
        count_query = select(func.count(Poll.id))
        if status is not None:
            query = query.where(Poll.status == status)
            count_query = count_query.where(Poll.status == status)
        result = await db.execute(
            query.order_by(Poll.created_at.desc())
            .offset((page - 1) * ADMIN_PAGE_SIZE)
            .limit(ADMIN_PAGE_SIZE)
        )
        total = await db.execute(count_query)
        return [(poll, count) for poll, count in result.all()], total.scalar_one()

    async def latest_polls(self, db: AsyncSession, limit: int = 5) -> List[Poll]:
        result = await db.execute(select(Poll).order_by(Poll.created_at.desc()).limit(limit))
        return list(result.scalars().all())


crud_poll = CRUDPoll()
