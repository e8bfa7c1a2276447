from datetime import date

from pydantic import EmailStr, Field, field_validator, model_validator

from educenter.models.student import StudentStatus
from educenter.models.teacher import Gender
from educenter.schemas.common import ApiModel, BranchSummary, reject_explicit_nulls, require_text, strip_or_none


class StudentBase(ApiModel):
    fullname: str = Field(min_length=1, max_length=200)
    email: EmailStr | None = None
    phone: str | None = Field(default=None, max_length=50)
    gender: Gender | None = None
    birthday: date | None = None
    status: StudentStatus = StudentStatus.active
    other_details: dict = Field(default_factory=dict, alias="otherDetails")
    branch_id: str = Field(alias="branchId", min_length=1, max_length=36)

    @field_validator("fullname")
    @classmethod
    def normalize_fullname(cls, value: str) -> str:
        return require_text(value)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str | None) -> str | None:
        return value.strip().lower() if value else None

    @field_validator("phone")
    @classmethod
    def normalize_phone(cls, value: str | None) -> str | None:
        return strip_or_none(value)


class StudentCreate(StudentBase):
    password: str | None = Field(default=None, min_length=6, max_length=128)


class StudentUpdate(ApiModel):
    fullname: str | None = Field(default=None, min_length=1, max_length=200)
    email: EmailStr | None = None
    phone: str | None = Field(default=None, max_length=50)
    gender: Gender | None = None
    birthday: date | None = None
    status: StudentStatus | None = None
    other_details: dict | None = Field(default=None, alias="otherDetails")
    branch_id: str | None = Field(default=None, alias="branchId", min_length=1, max_length=36)
    password: str | None = Field(default=None, min_length=6, max_length=128)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str | None) -> str | None:
        return value.strip().lower() if value else None

    @model_validator(mode="after")
    def validate_required_fields(self) -> "StudentUpdate":
        reject_explicit_nulls(self, ("fullname", "status", "branch_id", "other_details"))
        return self


class StudentOut(StudentBase):
    id: str
    branch: BranchSummary | None = None
    group_count: int = Field(default=0, alias="groupCount")
    active_group_count: int = Field(default=0, alias="activeGroupCount")


class StudentGroupSummary(ApiModel):
    id: str
    name: str
    status: str
    course_name: str | None = Field(default=None, alias="courseName")
    days: list[str] = Field(default_factory=list)
    start_time: str | None = None


class StudentDetailOut(StudentOut):
    groups: list[StudentGroupSummary] = Field(default_factory=list)


class StudentStatusCounts(ApiModel):
    active: int
    inactive: int


class StudentGenderCounts(ApiModel):
    male: int
    female: int
    unspecified: int


class StudentEnrollmentStats(ApiModel):
    enrolled: int
    not_enrolled: int = Field(alias="notEnrolled")
    total_enrollments: int = Field(alias="totalEnrollments")


class StudentStatistics(ApiModel):
    total: int
    by_status: StudentStatusCounts = Field(alias="byStatus")
    by_gender: StudentGenderCounts = Field(alias="byGender")
    enrollment_stats: StudentEnrollmentStats = Field(alias="enrollmentStats")
