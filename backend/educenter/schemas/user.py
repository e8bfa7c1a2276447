from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator

from educenter.models.user import UserRole
from educenter.schemas.common import ApiModel, reject_explicit_nulls, require_text, strip_or_none


class UserBase(ApiModel):
    name: str = Field(min_length=1, max_length=200)
    email: EmailStr
    phone: str | None = Field(default=None, max_length=50)
    role: UserRole
    branch_id: str | None = Field(default=None, alias="branchId", max_length=36)

    @field_validator("name")
    @classmethod
    def normalize_name(cls, value: str) -> str:
        return require_text(value)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower()

    @field_validator("phone")
    @classmethod
    def normalize_phone(cls, value: str | None) -> str | None:
        return strip_or_none(value)


class UserCreate(UserBase):
    password: str = Field(min_length=6, max_length=128)


class UserUpdate(ApiModel):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    email: EmailStr | None = None
    phone: str | None = Field(default=None, max_length=50)
    branch_id: str | None = Field(default=None, alias="branchId", max_length=36)
    is_active: bool | None = Field(default=None, alias="isActive")
    password: str | None = Field(default=None, min_length=6, max_length=128)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str | None) -> str | None:
        return value.strip().lower() if value else None

    @model_validator(mode="after")
    def validate_required_fields(self) -> "UserUpdate":
        reject_explicit_nulls(self, ("name", "email", "is_active"))
        return self


class UserRoleUpdate(BaseModel):
    role: UserRole


class UserOut(UserBase):
    id: str
    is_active: bool = Field(alias="isActive")


class UserLogin(BaseModel):
    """Either ``email`` or ``phone`` identifies the account."""

    email: str | None = Field(default=None, max_length=255)
    phone: str | None = Field(default=None, max_length=50)
    password: str = Field(min_length=1, max_length=128)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str | None) -> str | None:
        return value.strip().lower() if value and value.strip() else None

    @field_validator("phone")
    @classmethod
    def normalize_phone(cls, value: str | None) -> str | None:
        return strip_or_none(value)

    @model_validator(mode="after")
    def require_identifier(self) -> "UserLogin":
        if not self.email and not self.phone:
            raise ValueError("Either email or phone is required")
        return self


class RefreshRequest(ApiModel):
    refresh_token: str = Field(alias="refreshToken", min_length=1)


class PrincipalOut(ApiModel):
    id: str
    kind: str
    name: str
    email: str | None = None
    phone: str | None = None
    role: UserRole
    branch_id: str | None = Field(default=None, alias="branchId")


class Token(ApiModel):
    access_token: str = Field(alias="accessToken")
    refresh_token: str = Field(alias="refreshToken")
    token_type: str = Field(default="bearer", alias="tokenType")
    user: PrincipalOut
