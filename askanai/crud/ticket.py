import logging
from datetime import datetime, timezone
from typing import List, Optional, Tuple
from uuid import UUID
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from askanai.core.exceptions import ConflictError, NotFoundError
from askanai.core.security import normalize_text, sha256_hex
from askanai.models.ticket import Ticket, TicketStatus
from askanai.schemas.ticket import ReportCreate, TicketUpdate

logger = logging.getLogger(__name__)

PAGE_SIZE = 50


def report_text_hash(data: ReportCreate) -> str:
    comment_id = str(data.comment_id) if data.comment_id else ""
    return sha256_hex(normalize_text(f"{data.type}|{data.message or ''}|{comment_id}"))


class CRUDTicket:
    async def create_ticket(self, db: AsyncSession, poll_id: UUID, data: ReportCreate,
                            ip_hash: str, user_agent_hash: str) -> Ticket:
        ticket = Ticket(
            poll_id=poll_id,
            comment_id=data.comment_id,
            type=data.type,
            message=data.message,
            ip_hash=ip_hash,
            user_agent_hash=user_agent_hash,
            text_hash=report_text_hash(data),
        )
        try:
            db.add(ticket)
            await db.commit()
        except IntegrityError:
            await db.rollback()
            raise ConflictError("DUPLICATE_REPORT")
        logger.info("ticket %s filed for poll %s", ticket.id, poll_id)
        return ticket

    async def list_for_admin(self, db: AsyncSession, status: Optional[TicketStatus],
                             page: int = 1) -> Tuple[List[Ticket], int]:
        query = select(Ticket)
        count_query = select(func.count(Ticket.id))
        if status is not None:
            query = query.where(Ticket.status == status)
            count_query = count_query.where(Ticket.status == status)
        result = await db.execute(
            query.order_by(Ticket.created_at.desc())
            .offset((page - 1) * PAGE_SIZE)
            .limit(PAGE_SIZE)
        )
        total = await db.execute(count_query)
        return list(result.scalars().all()), total.scalar_one()

    async def update_ticket(self, db: AsyncSession, ticket_id: UUID, data: TicketUpdate) -> Ticket:
        ticket = await db.get(Ticket, ticket_id)
        if ticket is None:
            raise NotFoundError()
        if data.status == TicketStatus.RESOLVED and ticket.status != TicketStatus.RESOLVED:
            ticket.resolved_at = datetime.now(timezone.utc)
        elif data.status == TicketStatus.OPEN:
            ticket.resolved_at = None
        ticket.status = data.status
        if data.admin_note is not None:
            ticket.admin_note = data.admin_note.strip() or None
        await db.commit()
        return ticket


crud_ticket = CRUDTicket()
