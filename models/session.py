from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

from enums.user_role import UserRole


class AuthUser(BaseModel):
    """
    User profile as returned by /auth/login and /auth/signup.

    The backend echoes the password hash and the token inside the profile;
    both are dropped here (extra="ignore") so they never reach storage.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    id: int | str | None = None
    email: str | None = None
    name: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    phone_number: str | None = None
    role: UserRole = UserRole.USER

    @field_validator('role', mode='before')
    @classmethod
    def normalize_role(cls, v):
        """Accept "ROLE_ADMIN", "admin", UserRole; anything unknown is a plain user."""
        if isinstance(v, UserRole):
            return v
        return UserRole.from_claim(v) or UserRole.USER

    @property
    def display_name(self) -> str:
        if self.name:
            return self.name
        full_name = " ".join(part for part in (self.first_name, self.last_name) if part)
        if full_name:
            return full_name
        return (self.email or "").split("@")[0]

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


class Session(BaseModel):
    token: str
    user: AuthUser

    @property
    def is_admin(self) -> bool:
        return self.user.is_admin
