from pydantic import BaseModel, field_validator

from fastapi import Form


class SignupForm(BaseModel):
    email: str
    name: str
    password: str

    @field_validator("email")
    @classmethod
    def normalise_email(cls, v):
        v = v.strip().lower()
        if "@" not in v or v.startswith("@") or v.endswith("@"):
            raise ValueError("Please enter a valid email address")
        return v

    @field_validator("name")
    @classmethod
    def name_required(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Name is required")
        return v

    @field_validator("password")
    @classmethod
    def password_length(cls, v):
        if len(v) < 8:
            raise ValueError("Password must be at least 8 characters")
        return v

    @classmethod
    def as_form(
        cls,
        email: str = Form(""),
        name: str = Form(""),
        password: str = Form(""),
    ) -> dict:
        return dict(email=email, name=name, password=password)
