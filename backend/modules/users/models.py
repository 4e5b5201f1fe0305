"""
Users module data models.

These models define the stored user record, the public projection sent to
clients, and the request bodies of the account endpoints.
"""

from datetime import datetime
from enum import Enum
from typing import Annotated, Optional
from pydantic import AfterValidator, BaseModel, Field

from shared.models import CamelModel
from shared.security import PASSWORD_MAX_BYTES, password_too_long


def check_password_length(value: str) -> str:
    if password_too_long(value):
        raise ValueError(f"Password must be at most {PASSWORD_MAX_BYTES} bytes")
    return value


NewPassword = Annotated[str, Field(min_length=8), AfterValidator(check_password_length)]


class OAuthProvider(str, Enum):
    """Supported external sign-in providers."""

    GOOGLE = "google"
    GITHUB = "github"
    LINKEDIN = "linkedin"
    FACEBOOK = "facebook"

    @property
    def id_field(self) -> str:
        """Name of the user column holding this provider's account id."""
        return f"{self.value}_id"


class User(BaseModel):
    """
    A stored user record.

    The email is always lower case; the store enforces its uniqueness.
    """

    id: str
    first_name: str
    last_name: str = ""
    email: str
    password_hash: str
    is_verified: bool = False
    google_id: Optional[str] = None
    github_id: Optional[str] = None
    linkedin_id: Optional[str] = None
    facebook_id: Optional[str] = None
    profile_image: Optional[str] = None
    provider: Optional[str] = None
    provider_username: Optional[str] = None
    use_provider_username: bool = False
    reset_password_token: Optional[str] = None
    reset_password_expires: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    def provider_id(self, provider: OAuthProvider) -> Optional[str]:
        return getattr(self, provider.id_field)

    def to_public(self) -> "PublicUser":
        return PublicUser(
            id=self.id,
            first_name=self.first_name,
            last_name=self.last_name,
            email=self.email,
            is_verified=self.is_verified,
            profile_image=self.profile_image,
            provider=self.provider,
            provider_username=self.provider_username,
            use_provider_username=self.use_provider_username,
            created_at=self.created_at,
        )


class PublicUser(CamelModel):
    """User data safe to return to clients (no password or reset fields)."""

    id: str
    first_name: str
    last_name: str
    email: str
    is_verified: bool
    profile_image: Optional[str] = None
    provider: Optional[str] = None
    provider_username: Optional[str] = None
    use_provider_username: bool = False
    created_at: datetime


class OAuthProfile(BaseModel):
    """
    Profile returned by an OAuth provider after a successful sign-in.

    Mirrors the normalised profile shape produced by provider SDKs.
    """

    id: str = Field(..., description="Account id at the provider")
    emails: list[str] = Field(default_factory=list)
    display_name: Optional[str] = None
    given_name: Optional[str] = None
    family_name: Optional[str] = None
    username: Optional[str] = None
    photos: list[str] = Field(default_factory=list)

    @property
    def primary_email(self) -> Optional[str]:
        return self.emails[0].strip().lower() if self.emails else None

    @property
    def photo(self) -> Optional[str]:
        return self.photos[0] if self.photos else None


class RegisterRequest(CamelModel):
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    email: str
    password: NewPassword


class LoginRequest(CamelModel):
    email: str
    password: str = Field(..., min_length=1)


class ProfileUpdateRequest(CamelModel):
    """Partial profile update; omitted fields stay unchanged."""

    first_name: Optional[str] = Field(None, min_length=1)
    last_name: Optional[str] = Field(None, min_length=1)
    profile_image: Optional[str] = None
    use_provider_username: Optional[bool] = None


class ChangePasswordRequest(CamelModel):
    current_password: str
    new_password: NewPassword


class ForgotPasswordRequest(CamelModel):
    email: str


class ResetPasswordRequest(CamelModel):
    email: str
    token: str = Field(..., min_length=1)
    new_password: NewPassword
