from datetime import date

from pydantic import EmailStr, Field, field_validator, model_validator

from educenter.models.teacher import Gender, TeacherStatus
from educenter.schemas.common import ApiModel, BranchSummary, reject_explicit_nulls, require_text, strip_or_none


class TeacherBase(ApiModel):
    fullname: str = Field(min_length=1, max_length=200)
    phone: str = Field(min_length=3, max_length=50)
    email: EmailStr | None = None
    gender: Gender
    birthday: date | None = None
    branch_id: str = Field(alias="branchId", min_length=1, max_length=36)
    status: TeacherStatus = TeacherStatus.active
    description: str | None = Field(default=None, max_length=2000)

    @field_validator("fullname", "phone")
    @classmethod
    def normalize_text(cls, value: str) -> str:
        return require_text(value)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str | None) -> str | None:
        return value.strip().lower() if value else None

    @field_validator("description")
    @classmethod
    def normalize_description(cls, value: str | None) -> str | None:
        return strip_or_none(value)


class TeacherCreate(TeacherBase):
    password: str | None = Field(default=None, min_length=6, max_length=128)


class TeacherUpdate(ApiModel):
    fullname: str | None = Field(default=None, min_length=1, max_length=200)
    phone: str | None = Field(default=None, min_length=3, max_length=50)
    email: EmailStr | None = None
    gender: Gender | None = None
    birthday: date | None = None
    branch_id: str | None = Field(default=None, alias="branchId", min_length=1, max_length=36)
    status: TeacherStatus | None = None
    description: str | None = Field(default=None, max_length=2000)
    password: str | None = Field(default=None, min_length=6, max_length=128)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str | None) -> str | None:
        return value.strip().lower() if value else None

    @model_validator(mode="after")
    def validate_required_fields(self) -> "TeacherUpdate":
        reject_explicit_nulls(self, ("fullname", "phone", "gender", "branch_id", "status"))
        return self


class TeacherStatusUpdate(ApiModel):
    status: TeacherStatus


class TeacherGroupSummary(ApiModel):
    id: str
    name: str
    status: str
    course_name: str | None = Field(default=None, alias="courseName")


class TeacherOut(ApiModel):
    id: str
    fullname: str
    phone: str
    email: str | None = None
    gender: Gender
    birthday: date | None = None
    branch_id: str = Field(alias="branchId")
    status: TeacherStatus
    description: str | None = None
    branch: BranchSummary | None = None
    groups: list[TeacherGroupSummary] = Field(default_factory=list)


class TeachersByBranch(ApiModel):
    branch_id: str = Field(alias="branchId")
    branch_name: str = Field(alias="branchName")
    teacher_count: int = Field(alias="teacherCount")


class TeacherStats(ApiModel):
    total_teachers: int = Field(alias="totalTeachers")
    active_teachers: int = Field(alias="activeTeachers")
    inactive_teachers: int = Field(alias="inactiveTeachers")
    male_teachers: int = Field(alias="maleTeachers")
    female_teachers: int = Field(alias="femaleTeachers")
    teachers_with_groups: int = Field(alias="teachersWithGroups")
    total_groups: int = Field(alias="totalGroups")
    teachers_by_branch: list[TeachersByBranch] = Field(alias="teachersByBranch")
