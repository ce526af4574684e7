import logging
from datetime import datetime, timedelta, timezone
from typing import Dict, NamedTuple, Optional
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from askanai.core.exceptions import RateLimitExceededError
from askanai.models.abuse_event import AbuseEvent

logger = logging.getLogger(__name__)


class Limits(NamedTuple):
    per_hour: int
    per_day: int
    per_week: int


LIMITS: Dict[str, Limits] = {
    "auth_register": Limits(per_hour=20, per_day=80, per_week=200),
    "poll_create": Limits(per_hour=20, per_day=100, per_week=300),
    "poll_image_upload": Limits(per_hour=40, per_day=200, per_week=600),
    "poll_respond": Limits(per_hour=120, per_day=400, per_week=1200),
    "comment_create": Limits(per_hour=40, per_day=200, per_week=600),
    "ticket_create": Limits(per_hour=10, per_day=30, per_week=80),
    "poll_view": Limits(per_hour=600, per_day=5000, per_week=20000),
}

# checked in this order, the first exhausted window wins
WINDOWS = (
    ("HOURLY", timedelta(hours=1), "per_hour"),
    ("DAILY", timedelta(hours=24), "per_day"),
    ("WEEKLY", timedelta(days=7), "per_week"),
)


def resolve_scope(user_id: Optional[str], ip_hash: Optional[str]):
    """An authenticated user is limited by user id only, anonymous callers by ip hash only."""
    scope_user_id = user_id or None
    scope_ip_hash = None if scope_user_id else (ip_hash or None)
    return scope_user_id, scope_ip_hash


async def count_events(db_session: AsyncSession, event_type: str, user_id: Optional[str],
                       ip_hash: Optional[str], since: datetime) -> int:
    query = (select(func.count(AbuseEvent.id))
             .where(AbuseEvent.event_type == event_type)
             .where(AbuseEvent.created_at >= since))
    if user_id:
        query = query.where(AbuseEvent.user_id == user_id)
    elif ip_hash:
        query = query.where(AbuseEvent.ip_hash == ip_hash)
    else:
        query = query.where(AbuseEvent.ip_hash.is_(None)).where(AbuseEvent.user_id.is_(None))
    result = await db_session.execute(query)
    return result.scalar_one() or 0


async def record_event(db_session: AsyncSession, event_type: str,
                       user_id: Optional[str] = None, ip_hash: Optional[str] = None) -> AbuseEvent:
    event = AbuseEvent(event_type=event_type, user_id=user_id, ip_hash=ip_hash)
    db_session.add(event)
    await db_session.commit()
    return event


async def enforce_rate_limit(db_session: AsyncSession, event_type: str,
                             user_id: Optional[str] = None, ip_hash: Optional[str] = None,
                             now: Optional[datetime] = None) -> None:
    """
    Count the caller's earlier events of this type in the trailing hour, day
    and week and raise RateLimitExceededError when a threshold is reached.
    Otherwise record one more event.

    Unknown event types pass without being counted or recorded. Counting and
    inserting are two statements, so concurrent requests of one identity can
    both pass the check before either insert lands.
    """
    limits = LIMITS.get(event_type)
    if limits is None:
        return

    scope_user_id, scope_ip_hash = resolve_scope(user_id, ip_hash)
    now = now or datetime.now(timezone.utc)

    for window, span, field in WINDOWS:
        count = await count_events(db_session, event_type, scope_user_id, scope_ip_hash, since=now - span)
        if count >= getattr(limits, field):
            logger.warning("rate limit %s reached for %s", window, event_type)
            raise RateLimitExceededError(window)

    await record_event(db_session, event_type, user_id=scope_user_id, ip_hash=scope_ip_hash)
