"""User Schemas — admin user management payloads and public user views.

Invariants:
    - name: 1-100 chars after stripping
    - UserUpdate carries at least one field
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


def _strip_name(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("name cannot be empty or whitespace")
    return v


class UserSummary(BaseModel):
    """Minimal user reference embedded in GoodJob and transfer views."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str


class UserResponse(BaseModel):
    """Public-facing user data."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    is_admin: bool


class UserListResponse(BaseModel):
    users: list[UserResponse]


class UserCreate(BaseModel):
    """Admin-only user creation."""
    name: str = Field(min_length=1, max_length=100)
    password: str = Field(min_length=1, max_length=128)
    is_admin: bool = False

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        return _strip_name(v)


class UserUpdate(BaseModel):
    """Partial user update; omitted fields are left untouched."""
    name: str | None = Field(None, min_length=1, max_length=100)
    password: str | None = Field(None, min_length=1, max_length=128)
    is_admin: bool | None = None

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str | None) -> str | None:
        return _strip_name(v) if v is not None else None

    @model_validator(mode="after")
    def require_some_field(self):
        if self.name is None and self.password is None and self.is_admin is None:
            raise ValueError("update requires at least one of name, password, is_admin")
        return self
