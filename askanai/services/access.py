import secrets
from dataclasses import dataclass
from sqlalchemy.ext.asyncio import AsyncSession
from askanai.core.exceptions import ForbiddenError, NotFoundError
from askanai.core.security import sha256_hex
from askanai.crud.user_role import crud_user_role
from askanai.models.poll import Poll, PollStatus, VisibilityMode
from askanai.models.user_role import AppRole


@dataclass
class PollAccess:
    is_admin: bool
    is_owner_user: bool
    is_owner_key: bool

    @property
    def is_owner(self) -> bool:
        # any one of the three is enough
        return self.is_admin or self.is_owner_user or self.is_owner_key


async def resolve_access(db: AsyncSession, identity, poll: Poll) -> PollAccess:
    is_admin = bool(identity.user_id) and await crud_user_role.has_role(db, identity.user_id, AppRole.ADMIN)
    is_owner_user = bool(identity.user_id and poll.created_by_user_id
                         and identity.user_id == poll.created_by_user_id)
    is_owner_key = bool(identity.creator_key and poll.creator_key_hash
                        and secrets.compare_digest(sha256_hex(identity.creator_key), poll.creator_key_hash))
    return PollAccess(is_admin=is_admin, is_owner_user=is_owner_user, is_owner_key=is_owner_key)


def ensure_poll_visible(poll: Poll, access: PollAccess) -> None:
    """
    Drafts and private polls answer NOT_FOUND to everyone but the owner,
    so their existence is not revealed. Archived polls are only visible to admins.
    """
    if poll.is_archived and not access.is_admin:
        raise NotFoundError()
    if poll.status == PollStatus.DRAFT and not access.is_owner:
        raise NotFoundError()
    if poll.visibility_mode == VisibilityMode.PRIVATE and not access.is_owner:
        raise NotFoundError()


def requires_prior_vote(poll: Poll, access: PollAccess) -> bool:
    return poll.visibility_mode == VisibilityMode.VOTERS and not access.is_owner


def ensure_owner(access: PollAccess) -> None:
    if not access.is_owner:
        raise ForbiddenError()
