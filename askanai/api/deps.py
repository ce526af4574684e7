from dataclasses import dataclass
from typing import Optional
from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession
from askanai.clients.supabase import SupabaseAdmin
from askanai.core.exceptions import ForbiddenError, UnauthorizedError
from askanai.core.security import (
    compute_ip_hash,
    compute_user_agent_hash,
    read_bearer_token,
    read_creator_key,
)
from askanai.db.core import get_db_session
from askanai.models.user_role import AppRole
from askanai.crud.user_role import crud_user_role


@dataclass
class Identity:
    """Who is calling: an authenticated user id if the bearer token resolves, else anonymous."""
    user_id: Optional[str]
    ip_hash: str
    user_agent_hash: str
    creator_key: Optional[str] = None


def get_supabase(request: Request) -> SupabaseAdmin:
    """The process-scoped client built in the application lifespan."""
    return request.app.state.supabase


async def resolve_user_id(request: Request, supabase: SupabaseAdmin) -> Optional[str]:
    token = read_bearer_token(request)
    if not token:
        return None
    user = await supabase.get_user(token)
    return user.id if user else None


async def get_identity(request: Request, supabase: SupabaseAdmin = Depends(get_supabase)) -> Identity:
    user_id = await resolve_user_id(request, supabase)
    return Identity(
        user_id=user_id,
        ip_hash=compute_ip_hash(request),
        user_agent_hash=compute_user_agent_hash(request),
        creator_key=read_creator_key(request),
    )


async def require_admin(identity: Identity = Depends(get_identity),
                        db_session: AsyncSession = Depends(get_db_session)) -> Identity:
    if not identity.user_id:
        raise UnauthorizedError()
    if not await crud_user_role.has_role(db_session, identity.user_id, AppRole.ADMIN):
        raise ForbiddenError()
    return identity
