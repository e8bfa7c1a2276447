from pydantic import Field, field_validator, model_validator

from educenter.models.branch import BranchStatus
from educenter.schemas.common import ApiModel, reject_explicit_nulls, require_text, strip_or_none


class BranchBase(ApiModel):
    name: str = Field(min_length=1, max_length=200)
    region: str | None = Field(default=None, max_length=200)
    district: str | None = Field(default=None, max_length=200)
    address: str | None = Field(default=None, max_length=500)
    phone: str | None = Field(default=None, max_length=50)
    status: BranchStatus = BranchStatus.active

    @field_validator("name")
    @classmethod
    def normalize_name(cls, value: str) -> str:
        return require_text(value)

    @field_validator("region", "district", "address", "phone")
    @classmethod
    def normalize_optional(cls, value: str | None) -> str | None:
        return strip_or_none(value)


class BranchCreate(BranchBase):
    pass


class BranchUpdate(ApiModel):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    region: str | None = Field(default=None, max_length=200)
    district: str | None = Field(default=None, max_length=200)
    address: str | None = Field(default=None, max_length=500)
    phone: str | None = Field(default=None, max_length=50)
    status: BranchStatus | None = None

    @model_validator(mode="after")
    def validate_required_fields(self) -> "BranchUpdate":
        reject_explicit_nulls(self, ("name", "status"))
        return self


class BranchOut(BranchBase):
    id: str
