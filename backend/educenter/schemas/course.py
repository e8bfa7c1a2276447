from pydantic import Field, field_validator, model_validator

from educenter.models.course import CourseStatus
from educenter.schemas.common import ApiModel, reject_explicit_nulls, require_text, strip_or_none


class CourseBase(ApiModel):
    name: str = Field(min_length=1, max_length=200)
    branch_id: str = Field(alias="branchId", min_length=1, max_length=36)
    category_id: str = Field(alias="categoryId", min_length=1, max_length=36)
    status: CourseStatus = CourseStatus.active
    price: float = Field(default=0, ge=0)
    duration_hours: int = Field(default=0, ge=0, le=10000)
    duration_months: int = Field(default=0, ge=0, le=120)
    description: str | None = Field(default=None, max_length=5000)

    @field_validator("name")
    @classmethod
    def normalize_name(cls, value: str) -> str:
        return require_text(value)

    @field_validator("description")
    @classmethod
    def normalize_description(cls, value: str | None) -> str | None:
        return strip_or_none(value)


class CourseCreate(CourseBase):
    pass


class CourseUpdate(ApiModel):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    branch_id: str | None = Field(default=None, alias="branchId", min_length=1, max_length=36)
    category_id: str | None = Field(default=None, alias="categoryId", min_length=1, max_length=36)
    status: CourseStatus | None = None
    price: float | None = Field(default=None, ge=0)
    duration_hours: int | None = Field(default=None, ge=0, le=10000)
    duration_months: int | None = Field(default=None, ge=0, le=120)
    description: str | None = Field(default=None, max_length=5000)

    @model_validator(mode="after")
    def validate_required_fields(self) -> "CourseUpdate":
        reject_explicit_nulls(
            self,
            ("name", "branch_id", "category_id", "status", "price", "duration_hours", "duration_months"),
        )
        return self


class CategorySummary(ApiModel):
    id: str
    name: str


class CourseOut(CourseBase):
    id: str
    category: CategorySummary | None = None


class CourseStatusCounts(ApiModel):
    active: int
    draft: int
    archived: int


class CourseStatistics(ApiModel):
    total: int
    by_status: CourseStatusCounts = Field(alias="byStatus")
    average_price: float = Field(alias="averagePrice")
