from pydantic import Field, field_validator, model_validator

from educenter.schemas.common import ApiModel, reject_explicit_nulls, require_text


class CategoryCreate(ApiModel):
    name: str = Field(min_length=1, max_length=200)
    branch_id: str = Field(alias="branchId", min_length=1, max_length=36)

    @field_validator("name")
    @classmethod
    def normalize_name(cls, value: str) -> str:
        return require_text(value)


class CategoryUpdate(ApiModel):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    branch_id: str | None = Field(default=None, alias="branchId", min_length=1, max_length=36)

    @model_validator(mode="after")
    def validate_required_fields(self) -> "CategoryUpdate":
        reject_explicit_nulls(self, ("name", "branch_id"))
        return self


class CategoryOut(ApiModel):
    id: str
    name: str
    branch_id: str = Field(alias="branchId")
    course_count: int = Field(default=0, alias="courseCount")
