import hashlib
import re
import secrets
import uuid
from typing import Dict, Optional
from fastapi import Request
from askanai.core.config import settings
from askanai.core.exceptions import ConfigurationError

SLUG_ALPHABET = "abcdefghijklmnopqrstuvwxyz0123456789"
BEARER_RE = re.compile(r"^Bearer\s+(.+)$", re.IGNORECASE)


def sha256_hex(value: str) -> str:
    return hashlib.sha256(value.encode("utf-8")).hexdigest()


def random_slug(length: int = 5) -> str:
    return "".join(secrets.choice(SLUG_ALPHABET) for _ in range(length))


def new_creator_key() -> str:
    return str(uuid.uuid4())


def normalize_text(value: str) -> str:
    """Collapse whitespace and lower-case, used for duplicate detection hashes."""
    return re.sub(r"\s+", " ", value.strip()).lower()


def no_store_headers() -> Dict[str, str]:
    return {
        "Cache-Control": "no-store, max-age=0",
        "Pragma": "no-cache",
    }


def get_request_ip(request: Request) -> Optional[str]:
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()
    cf_ip = request.headers.get("cf-connecting-ip")
    if cf_ip:
        return cf_ip.strip()
    if request.client and request.client.host:
        return request.client.host
    return None


def _salt() -> str:
    if not settings.IP_HASH_SALT:
        raise ConfigurationError("IP_HASH_SALT")
    return settings.IP_HASH_SALT


def compute_ip_hash(request: Request) -> str:
    ip = get_request_ip(request) or "unknown"
    return sha256_hex(f"{_salt()}|ip|{ip}")


def compute_user_agent_hash(request: Request) -> str:
    user_agent = request.headers.get("user-agent") or "unknown"
    return sha256_hex(f"{_salt()}|ua|{user_agent}")


def read_bearer_token(request: Request) -> Optional[str]:
    header = request.headers.get("authorization")
    if not header:
        return None
    match = BEARER_RE.match(header)
    return match.group(1) if match else None


def read_creator_key(request: Request) -> Optional[str]:
    key = request.headers.get("x-creator-key")
    if key and key.strip():
        return key.strip()
    return None
