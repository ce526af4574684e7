from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from askanai.crud.poll import crud_poll
from askanai.models.comment import Comment
from askanai.models.poll import Poll
from askanai.models.response import Response
from askanai.models.ticket import Ticket, TicketStatus
from askanai.schemas.poll import AdminStats, PollOut

LATEST_POLLS = 5


async def _count(db: AsyncSession, query) -> int:
    result = await db.execute(query)
    return result.scalar_one() or 0


async def collect_admin_stats(db: AsyncSession) -> AdminStats:
    """Dashboard totals. Archived polls and hidden comments are still counted."""
    latest = await crud_poll.latest_polls(db, limit=LATEST_POLLS)
    return AdminStats(
        polls=await _count(db, select(func.count(Poll.id))),
        responses=await _count(db, select(func.count(Response.id))),
        comments=await _count(db, select(func.count(Comment.id))),
        openTickets=await _count(db, select(func.count(Ticket.id)).where(Ticket.status == TicketStatus.OPEN)),
        latestPolls=[PollOut.model_validate(poll) for poll in latest],
    )
