import logging
from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession
from askanai.api.deps import get_supabase
from askanai.clients.supabase import SupabaseAdmin
from askanai.core.config import get_settings
from askanai.core.security import compute_ip_hash
from askanai.db.core import get_db_session
from askanai.schemas.auth import RegisteredUser, RegisterRequest, RegisterResponse
from askanai.services.mailer import send_account_created_emails
from askanai.services.rate_limit import enforce_rate_limit

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth")


@router.post("/register", response_model=RegisterResponse)
async def register(request: Request, data: RegisterRequest,
                   db_session: AsyncSession = Depends(get_db_session),
                   supabase: SupabaseAdmin = Depends(get_supabase)):
    # there is no user yet, registrations are limited per ip hash
    await enforce_rate_limit(db_session, "auth_register", ip_hash=compute_ip_hash(request))
    user = await supabase.create_user(data.email, data.password)
    logger.info("registered user %s", user.id)
    mail_sent = await send_account_created_emails(get_settings(), data.email)
    return RegisterResponse(mailSent=mail_sent, user=RegisteredUser(id=user.id, email=user.email or data.email))
