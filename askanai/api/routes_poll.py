from uuid import UUID
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from askanai.api.deps import Identity, get_identity
from askanai.core.exceptions import ForbiddenError, InvalidInputError, NotFoundError
from askanai.crud.comment import crud_comment
from askanai.crud.poll import crud_poll
from askanai.crud.response import crud_response
from askanai.crud.ticket import crud_ticket
from askanai.crud.view import crud_view
from askanai.db.core import get_db_session
from askanai.models.poll import Poll, PollStatus
from askanai.schemas.comment import CommentCreate, CommentEnvelope, CommentList, CommentOut
from askanai.schemas.common import OkResponse, ViewCountResponse
from askanai.schemas.poll import (
    PollCreate,
    PollCreateResponse,
    PollDetail,
    PollDetailEnvelope,
    PollEnvelope,
    PollOut,
    PollUpdate,
)
from askanai.schemas.response import HasVotedResponse, RespondRequest, RespondResponse, ResponseOut
from askanai.schemas.results import PollResultsResponse
from askanai.schemas.ticket import ReportCreate
from askanai.services.access import ensure_owner, ensure_poll_visible, requires_prior_vote, resolve_access
from askanai.services.rate_limit import enforce_rate_limit, record_event

router = APIRouter(prefix="/polls")


@router.post("/create", response_model=PollCreateResponse)
async def create_poll(data: PollCreate,
                      identity: Identity = Depends(get_identity),
                      db_session: AsyncSession = Depends(get_db_session)):
    await enforce_rate_limit(db_session, "poll_create", user_id=identity.user_id, ip_hash=identity.ip_hash)
    poll, creator_key = await crud_poll.create_poll(db_session, data, user_id=identity.user_id)
    await record_event(db_session, "poll_create_ok", user_id=identity.user_id, ip_hash=identity.ip_hash)
    return PollCreateResponse(poll=PollDetail.model_validate(poll), creatorKey=creator_key)


async def _poll_detail(db_session: AsyncSession, identity: Identity, poll: Poll | None) -> PollDetailEnvelope:
    if poll is None:
        raise NotFoundError()
    ensure_poll_visible(poll, await resolve_access(db_session, identity, poll))
    return PollDetailEnvelope(poll=PollDetail.model_validate(poll))


@router.get("/by-slug/{slug}", response_model=PollDetailEnvelope)
async def get_poll_by_slug(slug: str,
                           identity: Identity = Depends(get_identity),
                           db_session: AsyncSession = Depends(get_db_session)):
    poll = await crud_poll.get_poll_by_slug(db_session, slug)
    return await _poll_detail(db_session, identity, poll)


@router.get("/{poll_id}", response_model=PollDetailEnvelope)
async def get_poll(poll_id: UUID,
                   identity: Identity = Depends(get_identity),
                   db_session: AsyncSession = Depends(get_db_session)):
    poll = await crud_poll.get_poll_by_id(db_session, poll_id, with_questions=True)
    return await _poll_detail(db_session, identity, poll)


@router.patch("/{poll_id}", response_model=PollEnvelope)
async def update_poll(poll_id: UUID, data: PollUpdate,
                      identity: Identity = Depends(get_identity),
                      db_session: AsyncSession = Depends(get_db_session)):
    poll = await crud_poll.get_live_poll(db_session, poll_id)
    ensure_owner(await resolve_access(db_session, identity, poll))
    poll = await crud_poll.update_poll(db_session, poll, data)
    return PollEnvelope(poll=PollOut.model_validate(poll))


@router.post("/{poll_id}/respond", response_model=RespondResponse)
async def respond(poll_id: UUID, data: RespondRequest,
                  identity: Identity = Depends(get_identity),
                  db_session: AsyncSession = Depends(get_db_session)):
    await enforce_rate_limit(db_session, "poll_respond", user_id=identity.user_id, ip_hash=identity.ip_hash)
    poll = await crud_poll.get_live_poll(db_session, poll_id, with_questions=True)
    if poll.status != PollStatus.OPEN:
        raise ForbiddenError("POLL_CLOSED")
    response = await crud_response.create_response(
        db_session, poll, data,
        user_id=identity.user_id,
        ip_hash=identity.ip_hash,
        user_agent_hash=identity.user_agent_hash,
    )
    return RespondResponse(response=ResponseOut.model_validate(response))


@router.get("/{poll_id}/results", response_model=PollResultsResponse)
async def get_results(poll_id: UUID,
                      identity: Identity = Depends(get_identity),
                      db_session: AsyncSession = Depends(get_db_session)):
    poll = await crud_poll.get_poll_by_id(db_session, poll_id)
    if poll is None:
        raise NotFoundError()
    access = await resolve_access(db_session, identity, poll)
    ensure_poll_visible(poll, access)
    if requires_prior_vote(poll, access):
        voted = await crud_response.has_voted(db_session, poll.id, identity.user_id, identity.ip_hash)
        if not voted:
            raise ForbiddenError("GIVE_TO_GET_REQUIRED")
    return await crud_poll.get_poll_results(db_session, poll)


@router.get("/{poll_id}/comments", response_model=CommentList)
async def list_comments(poll_id: UUID,
                        identity: Identity = Depends(get_identity),
                        db_session: AsyncSession = Depends(get_db_session)):
    poll = await crud_poll.get_live_poll(db_session, poll_id)
    ensure_poll_visible(poll, await resolve_access(db_session, identity, poll))
    comments = await crud_comment.list_visible(db_session, poll.id)
    return CommentList(comments=[CommentOut.model_validate(comment) for comment in comments])


@router.post("/{poll_id}/comment", response_model=CommentEnvelope)
async def create_comment(poll_id: UUID, data: CommentCreate,
                         identity: Identity = Depends(get_identity),
                         db_session: AsyncSession = Depends(get_db_session)):
    await enforce_rate_limit(db_session, "comment_create", user_id=identity.user_id, ip_hash=identity.ip_hash)
    poll = await crud_poll.get_live_poll(db_session, poll_id)
    if poll.status != PollStatus.OPEN or not poll.allow_comments:
        raise ForbiddenError("COMMENTS_DISABLED")
    comment = await crud_comment.create_comment(
        db_session, poll.id, data,
        user_id=identity.user_id,
        ip_hash=identity.ip_hash,
        user_agent_hash=identity.user_agent_hash,
    )
    return CommentEnvelope(comment=CommentOut.model_validate(comment))


@router.post("/{poll_id}/report", response_model=OkResponse)
async def report(poll_id: UUID, data: ReportCreate,
                 identity: Identity = Depends(get_identity),
                 db_session: AsyncSession = Depends(get_db_session)):
    await enforce_rate_limit(db_session, "ticket_create", user_id=identity.user_id, ip_hash=identity.ip_hash)
    poll = await crud_poll.get_live_poll(db_session, poll_id)
    if data.comment_id and await crud_comment.get_poll_comment(db_session, poll.id, data.comment_id) is None:
        raise InvalidInputError("INVALID_COMMENT_ID")
    await crud_ticket.create_ticket(db_session, poll.id, data,
                                    ip_hash=identity.ip_hash, user_agent_hash=identity.user_agent_hash)
    return OkResponse()


@router.delete("/{poll_id}/delete", response_model=OkResponse)
async def delete_poll(poll_id: UUID,
                      identity: Identity = Depends(get_identity),
                      db_session: AsyncSession = Depends(get_db_session)):
    poll = await crud_poll.get_live_poll(db_session, poll_id)
    ensure_owner(await resolve_access(db_session, identity, poll))
    await crud_poll.archive_poll(db_session, poll, actor_user_id=identity.user_id)
    return OkResponse()


@router.post("/{poll_id}/view", response_model=OkResponse)
async def record_view(poll_id: UUID,
                      identity: Identity = Depends(get_identity),
                      db_session: AsyncSession = Depends(get_db_session)):
    await enforce_rate_limit(db_session, "poll_view", user_id=identity.user_id, ip_hash=identity.ip_hash)
    poll = await crud_poll.get_live_poll(db_session, poll_id)
    await crud_view.record_view(db_session, poll.id, identity.ip_hash, identity.user_agent_hash)
    return OkResponse()


@router.get("/{poll_id}/view-count", response_model=ViewCountResponse)
async def view_count(poll_id: UUID, db_session: AsyncSession = Depends(get_db_session)):
    poll = await crud_poll.get_live_poll(db_session, poll_id)
    return ViewCountResponse(viewCount=await crud_view.count_views(db_session, poll.id))


@router.get("/{poll_id}/has-voted", response_model=HasVotedResponse)
async def has_voted(poll_id: UUID,
                    identity: Identity = Depends(get_identity),
                    db_session: AsyncSession = Depends(get_db_session)):
    voted = await crud_response.has_voted(db_session, poll_id, identity.user_id, identity.ip_hash)
    return HasVotedResponse(hasVoted=voted)
