import re
from typing import Optional
from pydantic import BaseModel, Field, field_validator

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


class RegisterRequest(BaseModel):
    email: str
    password: str = Field(min_length=6, max_length=128)

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v):
        email = str(v or "").strip().lower()
        if len(email) > 255 or not EMAIL_RE.match(email):
            raise ValueError("invalid email")
        return email


class RegisteredUser(BaseModel):
    id: Optional[str]
    email: str


class RegisterResponse(BaseModel):
    ok: bool = True
    mailSent: bool
    user: RegisteredUser
