import logging
import uuid
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from askanai.api.deps import Identity, get_identity, get_supabase
from askanai.clients.supabase import SupabaseAdmin
from askanai.core.config import get_settings
from askanai.core.security import sha256_hex
from askanai.db.core import get_db_session
from askanai.schemas.storage import SignedUploadRequest, SignedUploadResponse
from askanai.services.rate_limit import enforce_rate_limit, record_event

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/storage")


@router.post("/poll-image-signed-upload", response_model=SignedUploadResponse)
async def poll_image_signed_upload(data: SignedUploadRequest,
                                   identity: Identity = Depends(get_identity),
                                   db_session: AsyncSession = Depends(get_db_session),
                                   supabase: SupabaseAdmin = Depends(get_supabase)):
    """
    Hands out a one-shot upload url for a poll preview image. The file goes
    straight to object storage, this service never sees the bytes.
    """
    await enforce_rate_limit(db_session, "poll_image_upload", user_id=identity.user_id, ip_hash=identity.ip_hash)
    bucket = get_settings().POLL_IMAGES_BUCKET
    path = f"previews/{uuid.uuid4()}.{data.extension}"
    upload = await supabase.create_signed_upload_url(bucket, path)
    await record_event(db_session, "poll_image_upload_signed", user_id=identity.user_id, ip_hash=identity.ip_hash)
    return SignedUploadResponse(
        path=path,
        token=upload.token,
        signedUrl=upload.signed_url,
        publicUrl=supabase.public_url(bucket, path),
        key=sha256_hex(path),
    )
