"""Auth provider and object storage client for the Supabase REST APIs."""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional
from urllib.parse import parse_qs, urlparse

import httpx

from askanai.core.config import Settings
from askanai.core.exceptions import ConfigurationError, ConflictError

logger = logging.getLogger(__name__)


@dataclass
class AuthUser:
    id: str
    email: Optional[str] = None


@dataclass
class SignedUpload:
    signed_url: str
    token: Optional[str]


class SupabaseError(Exception):
    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class SupabaseAdmin:
    """
    Service-role client. Built once per process in the application lifespan
    and handed to request handlers through the ``get_supabase`` dependency.
    """

    def __init__(self, url: str, service_key: str, timeout: float = 10.0,
                 transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
        self.url = url.strip().rstrip("/")
        self.service_key = service_key.strip()
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)

    @classmethod
    def from_settings(cls, settings: Settings) -> "SupabaseAdmin":
        return cls(settings.SUPABASE_URL, settings.SUPABASE_SERVICE_ROLE_KEY,
                   timeout=settings.AUTH_TIMEOUT_SECONDS)

    def is_configured(self) -> bool:
        return bool(self.url and self.service_key)

    def _require_config(self) -> None:
        if not self.url:
            raise ConfigurationError("SUPABASE_URL")
        if not self.service_key:
            raise ConfigurationError("SUPABASE_SERVICE_ROLE_KEY")

    def _service_headers(self) -> Dict[str, str]:
        return {"apikey": self.service_key, "Authorization": f"Bearer {self.service_key}"}

    async def aclose(self) -> None:
        await self._client.aclose()

    @staticmethod
    def _user_from_payload(payload: Dict[str, Any]) -> Optional[AuthUser]:
        # admin endpoints answer with the user object, some versions wrap it in {"user": ...}
        user = payload.get("user") if isinstance(payload.get("user"), dict) else payload
        if not user or not user.get("id"):
            return None
        return AuthUser(id=str(user["id"]), email=user.get("email"))

    async def get_user(self, token: str) -> Optional[AuthUser]:
        """Resolve an access token, ``None`` when the provider rejects it or is unreachable."""
        self._require_config()
        try:
            response = await self._client.get(
                f"{self.url}/auth/v1/user",
                headers={"apikey": self.service_key, "Authorization": f"Bearer {token}"},
            )
        except httpx.HTTPError as e:
            logger.warning(f"token lookup failed: {e}")
            return None
        if response.status_code != 200:
            return None
        return self._user_from_payload(response.json())

    async def create_user(self, email: str, password: str) -> AuthUser:
        self._require_config()
        response = await self._client.post(
            f"{self.url}/auth/v1/admin/users",
            headers=self._service_headers(),
            json={"email": email, "password": password, "email_confirm": True},
        )
        if response.is_success:
            user = self._user_from_payload(response.json())
            if user is None:
                raise SupabaseError("user creation returned no user", response.status_code)
            return user

        message = self._error_message(response).lower()
        if response.status_code == 422 or "already" in message or "registered" in message:
            raise ConflictError("ALREADY_REGISTERED")
        raise SupabaseError(f"user creation failed: {message}", response.status_code)

    async def create_signed_upload_url(self, bucket: str, path: str) -> SignedUpload:
        self._require_config()
        response = await self._client.post(
            f"{self.url}/storage/v1/object/upload/sign/{bucket}/{path}",
            headers=self._service_headers(),
        )
        if not response.is_success:
            raise SupabaseError(f"signed upload failed: {self._error_message(response)}", response.status_code)
        relative_url = response.json().get("url", "")
        signed_url = f"{self.url}/storage/v1{relative_url}"
        token = parse_qs(urlparse(signed_url).query).get("token", [None])[0]
        return SignedUpload(signed_url=signed_url, token=token)

    def public_url(self, bucket: str, path: str) -> str:
        return f"{self.url}/storage/v1/object/public/{bucket}/{path}"

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            payload = response.json()
        except ValueError:
            return response.text
        if isinstance(payload, dict):
            return str(payload.get("msg") or payload.get("message") or payload.get("error_description")
                       or payload.get("error") or payload)
        return str(payload)
