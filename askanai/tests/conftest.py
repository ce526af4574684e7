import json
import os

# settings are read once at import time
os.environ.setdefault("ENV", "test")
os.environ.setdefault("IP_HASH_SALT", "test-salt")
os.environ.setdefault("SUPABASE_URL", "https://supabase.test")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "service-key")

import httpx
import pytest
from httpx import ASGITransport
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from askanai.api.deps import get_supabase
from askanai.app import create_app
from askanai.clients.supabase import SupabaseAdmin
from askanai.crud.user_role import crud_user_role
from askanai.db.base import Base
from askanai.db.core import get_db_session
from askanai.models.user_role import AppRole

SUPABASE_URL = "https://supabase.test"


class FakeSupabaseBackend:
    """In-memory stand-in for the GoTrue and Storage REST endpoints, served through httpx.MockTransport."""

    def __init__(self):
        self.users_by_token = {}
        self.registered_emails = set()
        self.signed_paths = []

    def add_user(self, token, user_id, email=None):
        self.users_by_token[token] = {"id": user_id, "email": email}

    def handle(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if request.method == "GET" and path == "/auth/v1/user":
            token = request.headers.get("authorization", "").removeprefix("Bearer ").strip()
            user = self.users_by_token.get(token)
            if user is None:
                return httpx.Response(401, json={"msg": "invalid JWT"})
            return httpx.Response(200, json=user)

        if request.method == "POST" and path == "/auth/v1/admin/users":
            email = json.loads(request.content)["email"]
            if email in self.registered_emails:
                return httpx.Response(422, json={"msg": "A user with this email address has already been registered"})
            self.registered_emails.add(email)
            return httpx.Response(200, json={"id": f"user-{len(self.registered_emails)}", "email": email})

        prefix = "/storage/v1/object/upload/sign/"
        if request.method == "POST" and path.startswith(prefix):
            object_path = path[len(prefix):]
            self.signed_paths.append(object_path)
            return httpx.Response(200, json={"url": f"/object/upload/sign/{object_path}?token=upload-token"})

        return httpx.Response(404, json={"msg": "not found"})


@pytest.fixture
async def db_engine():
    """In-memory sqlite unless TEST_DATABASE_URL points at a real database."""
    test_db_url = os.environ.get("TEST_DATABASE_URL")
    if test_db_url:
        engine = create_async_engine(test_db_url, echo=False)
    else:
        engine = create_async_engine(
            "sqlite+aiosqlite://",
            echo=False,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def db_session_factory(db_engine):
    return async_sessionmaker(bind=db_engine, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def db_session(db_session_factory):
    async with db_session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def supabase_backend():
    return FakeSupabaseBackend()


@pytest.fixture
async def supabase(supabase_backend):
    client = SupabaseAdmin(SUPABASE_URL, "service-key",
                           transport=httpx.MockTransport(supabase_backend.handle))
    yield client
    await client.aclose()


@pytest.fixture
def app(db_session_factory, supabase):
    app = create_app()

    async def override_db_session():
        async with db_session_factory() as session:
            yield session
            await session.rollback()

    # the lifespan does not run under ASGITransport
    app.state.supabase = supabase
    app.dependency_overrides[get_db_session] = override_db_session
    app.dependency_overrides[get_supabase] = lambda: supabase
    return app


@pytest.fixture
async def client(app):
    async with httpx.AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


@pytest.fixture
async def admin_headers(supabase_backend, db_session_factory):
    supabase_backend.add_user("admin-token", "admin-1", "admin@example.com")
    async with db_session_factory() as session:
        await crud_user_role.grant_role(session, "admin-1", AppRole.ADMIN)
    return {"Authorization": "Bearer admin-token"}


def poll_payload(**overrides):
    payload = {
        "title": "Favourite colour",
        "description": "Pick one",
        "questions": [
            {"type": "single_choice", "prompt": "Which one?", "options": ["A", "B"], "isRequired": True},
        ],
        "settings": {"visibility": "public", "allowComments": True},
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def create_poll(client):
    """Create a poll through the API, returns the response json."""
    async def _create(headers=None, **overrides):
        response = await client.post("/polls/create", json=poll_payload(**overrides), headers=headers or {})
        assert response.status_code == 200, response.text
        return response.json()
    return _create


@pytest.fixture
def voter():
    """Headers that make a request look like it came from a distinct client ip."""
    return lambda n: {"X-Forwarded-For": f"10.0.0.{n}"}
