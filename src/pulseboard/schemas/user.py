"""User-related Pydantic schemas."""

from pydantic import BaseModel, ConfigDict, Field, field_validator

from pulseboard.core.enums import Role


class UserCreate(BaseModel):
    """Schema for account registration; field rules are checked by the service."""

    email: str = Field(..., description="Login e-mail address")
    name: str = Field(..., max_length=100, description="Display name")
    password: str
    confirm_password: str
    image_url: str | None = None


class UserUpdate(UserCreate):
    """Schema for replacing the caller's own profile; same field rules as registration."""


class LoginRequest(BaseModel):
    email: str
    password: str


class LoginResponse(BaseModel):
    """Response returned after successful login."""

    token: str = Field(..., description="JWT access token")
    token_type: str = "bearer"
    user_id: int


class RoleUpdate(BaseModel):
    """Schema for an administrator changing a user's role."""

    role: Role

    @field_validator("role", mode="before")
    @classmethod
    def _parse_role(cls, value: object) -> Role:
        return Role.parse(value)


class UserOut(BaseModel):
    """Public account fields; the password hash is never exposed."""

    id: int
    email: str
    name: str
    image_url: str | None
    role: Role
    favorites: list[int] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)
