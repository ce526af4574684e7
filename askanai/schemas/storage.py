from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

CONTENT_TYPE_EXTENSIONS = {
    "image/png": "png",
    "image/jpeg": "jpg",
    "image/webp": "webp",
    "image/gif": "gif",
}


class SignedUploadRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    content_type: str = Field(alias="contentType")
    file_name: Optional[str] = Field(default=None, alias="fileName")

    @field_validator("content_type", mode="before")
    @classmethod
    def supported_type(cls, v):
        content_type = str(v or "").strip().lower()
        if content_type not in CONTENT_TYPE_EXTENSIONS:
            raise ValueError("unsupported file type")
        return content_type

    @property
    def extension(self) -> str:
        return CONTENT_TYPE_EXTENSIONS[self.content_type]


class SignedUploadResponse(BaseModel):
    path: str
    token: Optional[str]
    signedUrl: str
    publicUrl: str
    # sha256 of the path, a non-sensitive correlation id
    key: str
