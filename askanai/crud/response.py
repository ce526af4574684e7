import logging
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from askanai.core.exceptions import ConflictError
from askanai.models.poll import Poll
from askanai.models.response import Answer, Response
from askanai.schemas.response import RespondRequest
from askanai.services.answers import answer_columns, validate_answers

logger = logging.getLogger(__name__)


class CRUDResponse:
    async def has_voted(self, db: AsyncSession, poll_id, user_id, ip_hash) -> bool:
        """Logged in callers are matched by user id, anonymous ones by ip hash."""
        query = select(Response.id).where(Response.poll_id == poll_id)
        if user_id:
            query = query.where(Response.user_id == user_id)
        else:
            query = query.where(Response.ip_hash == ip_hash)
        result = await db.execute(query.limit(1))
        return result.scalar_one_or_none() is not None

    async def create_response(self, db: AsyncSession, poll: Poll, data: RespondRequest,
                              user_id, ip_hash, user_agent_hash) -> Response:
        """
        Store one response with its answers. The storage layer's unique
        constraints reject a second response of the same user or ip hash.
        """
        accepted = validate_answers(poll.questions, data.answers)
        response = Response(
            poll_id=poll.id,
            respondent_name=data.respondent_name,
            user_id=user_id,
            ip_hash=ip_hash,
            user_agent_hash=user_agent_hash,
            answers=[Answer(question_id=question.id, **answer_columns(value))
                     for question, value in accepted],
        )
        try:
            db.add(response)
            await db.commit()
        except IntegrityError:
            await db.rollback()
            raise ConflictError("ALREADY_VOTED")
        return response


crud_response = CRUDResponse()
