import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from askanai.clients.supabase import SupabaseAdmin
from askanai.core.config import settings
from askanai.core.handlers import register_exception_handlers, register_middleware
from askanai.db.core import dispose_db, init_db
import askanai.api.routes_admin as routes_admin
import askanai.api.routes_auth as routes_auth
import askanai.api.routes_health as routes_health
import askanai.api.routes_poll as routes_poll
import askanai.api.routes_storage as routes_storage

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("starting %s (%s)", settings.APP_NAME, settings.ENV)
    if settings.ENV == "development":
        await init_db()
    app.state.supabase = SupabaseAdmin.from_settings(settings)
    if not app.state.supabase.is_configured():
        logger.warning("SUPABASE_URL or SUPABASE_SERVICE_ROLE_KEY is not set, auth and storage calls will fail")
    yield
    logger.info("shutting down")
    await app.state.supabase.aclose()
    await dispose_db()


def create_app():
    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="Poll and survey API",
        lifespan=lifespan
    )

    register_middleware(app, settings)
    register_exception_handlers(app)

    app.include_router(routes_health.router)
    app.include_router(routes_auth.router)
    app.include_router(routes_poll.router)
    app.include_router(routes_storage.router)
    app.include_router(routes_admin.router)
    return app


app = create_app()
