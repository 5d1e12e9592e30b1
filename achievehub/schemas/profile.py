from typing import Optional

from pydantic import BaseModel, field_validator


class ProfileForm(BaseModel):
    department: Optional[str] = None
    website: Optional[str] = None
    avatar_url: Optional[str] = None

    @field_validator("department", "website", "avatar_url", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        if isinstance(v, str):
            v = v.strip()
        return v or None

    @field_validator("website", "avatar_url")
    @classmethod
    def validate_url(cls, v):
        if v and not v.startswith(("http://", "https://")):
            raise ValueError("URL must start with http:// or https://")
        return v
