import logging
from typing import Literal
from uuid import UUID
from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession
from askanai.api.deps import Identity, get_supabase, require_admin
from askanai.clients.supabase import SupabaseAdmin
from askanai.core.config import get_settings
from askanai.core.exceptions import ForbiddenError, NotFoundError, UnauthorizedError
from askanai.core.security import read_bearer_token
from askanai.crud.comment import crud_comment
from askanai.crud.poll import crud_poll
from askanai.crud.ticket import crud_ticket
from askanai.crud.user_role import crud_user_role
from askanai.db.core import get_db_session
from askanai.models.comment import CommentStatus
from askanai.models.poll import PollStatus
from askanai.models.ticket import TicketStatus
from askanai.models.user_role import AppRole
from askanai.schemas.comment import AdminCommentEnvelope, AdminCommentOut, AdminCommentPage, CommentModeration
from askanai.schemas.common import OkResponse
from askanai.schemas.poll import AdminPollOut, AdminPollPage, AdminStats
from askanai.schemas.ticket import TicketEnvelope, TicketOut, TicketPage, TicketUpdate
from askanai.services.stats import collect_admin_stats

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin")


@router.post("/bootstrap", response_model=OkResponse)
async def bootstrap(request: Request,
                    db_session: AsyncSession = Depends(get_db_session),
                    supabase: SupabaseAdmin = Depends(get_supabase)):
    """Grant the admin role to a signed in user whose email is on the bootstrap list."""
    allowed_emails = get_settings().bootstrap_admin_emails
    if not allowed_emails:
        raise NotFoundError()
    token = read_bearer_token(request)
    user = await supabase.get_user(token) if token else None
    if user is None:
        raise UnauthorizedError()
    if not user.email or user.email.lower() not in allowed_emails:
        raise ForbiddenError()
    await crud_user_role.grant_role(db_session, user.id, AppRole.ADMIN)
    logger.info("granted admin role to %s", user.id)
    return OkResponse()


@router.get("/tickets", response_model=TicketPage)
async def list_tickets(status: Literal["open", "resolved", "all"] = "open",
                       page: int = Query(default=1, ge=1),
                       _: Identity = Depends(require_admin),
                       db_session: AsyncSession = Depends(get_db_session)):
    status_filter = None if status == "all" else TicketStatus(status)
    tickets, total = await crud_ticket.list_for_admin(db_session, status_filter, page=page)
    return TicketPage(tickets=[TicketOut.model_validate(ticket) for ticket in tickets], total=total)


@router.patch("/tickets/{ticket_id}", response_model=TicketEnvelope)
async def update_ticket(ticket_id: UUID, data: TicketUpdate,
                        _: Identity = Depends(require_admin),
                        db_session: AsyncSession = Depends(get_db_session)):
    ticket = await crud_ticket.update_ticket(db_session, ticket_id, data)
    return TicketEnvelope(ticket=TicketOut.model_validate(ticket))


@router.get("/comments", response_model=AdminCommentPage)
async def list_comments(status: Literal["visible", "hidden", "flagged", "all"] = "all",
                        page: int = Query(default=1, ge=1),
                        _: Identity = Depends(require_admin),
                        db_session: AsyncSession = Depends(get_db_session)):
    status_filter = None if status == "all" else CommentStatus(status)
    comments, total = await crud_comment.list_for_admin(db_session, status_filter, page=page)
    return AdminCommentPage(comments=[AdminCommentOut.model_validate(comment) for comment in comments], total=total)


@router.patch("/comments/{comment_id}", response_model=AdminCommentEnvelope)
async def moderate_comment(comment_id: UUID, data: CommentModeration,
                           _: Identity = Depends(require_admin),
                           db_session: AsyncSession = Depends(get_db_session)):
    comment = await crud_comment.moderate(db_session, comment_id, data.status)
    return AdminCommentEnvelope(comment=AdminCommentOut.model_validate(comment))


@router.get("/polls", response_model=AdminPollPage)
async def list_polls(status: Literal["draft", "open", "closed", "all"] = "all",
                     page: int = Query(default=1, ge=1),
                     _: Identity = Depends(require_admin),
                     db_session: AsyncSession = Depends(get_db_session)):
    status_filter = None if status == "all" else PollStatus(status)
    rows, total = await crud_poll.list_for_admin(db_session, status_filter, page=page)
    polls = [AdminPollOut.model_validate(poll).model_copy(update={"responseCount": count})
             for poll, count in rows]
    return AdminPollPage(polls=polls, total=total)


@router.get("/stats", response_model=AdminStats)
async def stats(_: Identity = Depends(require_admin),
                db_session: AsyncSession = Depends(get_db_session)):
    return await collect_admin_stats(db_session)
