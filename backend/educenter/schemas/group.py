from datetime import date, time

from pydantic import Field, field_validator, model_validator

from educenter.models.group import GroupStatus
from educenter.schemas.common import ApiModel, BranchSummary, reject_explicit_nulls, require_text
from educenter.services.schedule import normalize_days, parse_time


def _parse_optional_time(value):
    if isinstance(value, str):
        return parse_time(value)
    return value


def check_date_range(start_date: date | None, end_date: date | None) -> None:
    if end_date is None:
        return
    if start_date is None:
        raise ValueError("end_date requires start_date")
    if end_date < start_date:
        raise ValueError("end_date must be on or after start_date")


class GroupCreate(ApiModel):
    name: str = Field(min_length=1, max_length=200)
    course_id: str = Field(alias="courseId", min_length=1, max_length=36)
    room_id: str | None = Field(default=None, alias="roomId", max_length=36)
    teacher_id: str | None = Field(default=None, alias="teacherId", max_length=36)
    branch_id: str = Field(alias="branchId", min_length=1, max_length=36)
    status: GroupStatus = GroupStatus.planned
    days: list[str] = Field(min_length=1, max_length=7)
    start_time: time | None = None
    start_date: date | None = None
    end_date: date | None = None

    @field_validator("name")
    @classmethod
    def normalize_name(cls, value: str) -> str:
        return require_text(value)

    @field_validator("days")
    @classmethod
    def validate_days(cls, value: list[str]) -> list[str]:
        return normalize_days(value)

    @field_validator("start_time", mode="before")
    @classmethod
    def validate_start_time(cls, value):
        return _parse_optional_time(value)

    @model_validator(mode="after")
    def validate_dates(self) -> "GroupCreate":
        check_date_range(self.start_date, self.end_date)
        return self


class GroupUpdate(ApiModel):
    """Partial update; the date range is checked again after merging with the stored group."""

    name: str | None = Field(default=None, min_length=1, max_length=200)
    course_id: str | None = Field(default=None, alias="courseId", max_length=36)
    room_id: str | None = Field(default=None, alias="roomId", max_length=36)
    teacher_id: str | None = Field(default=None, alias="teacherId", max_length=36)
    branch_id: str | None = Field(default=None, alias="branchId", max_length=36)
    status: GroupStatus | None = None
    days: list[str] | None = Field(default=None, min_length=1, max_length=7)
    start_time: time | None = None
    start_date: date | None = None
    end_date: date | None = None

    @field_validator("name")
    @classmethod
    def normalize_name(cls, value: str | None) -> str | None:
        return require_text(value) if value is not None else None

    @field_validator("days")
    @classmethod
    def validate_days(cls, value: list[str] | None) -> list[str] | None:
        return normalize_days(value) if value is not None else None

    @field_validator("start_time", mode="before")
    @classmethod
    def validate_start_time(cls, value):
        return _parse_optional_time(value)

    @model_validator(mode="after")
    def validate_required_fields(self) -> "GroupUpdate":
        reject_explicit_nulls(self, ("name", "course_id", "branch_id", "status", "days"))
        return self


class CourseSummary(ApiModel):
    id: str
    name: str
    price: float | None = None


class RoomSummary(ApiModel):
    id: str
    name: str
    capacity: int | None = None


class TeacherSummary(ApiModel):
    id: str
    fullname: str
    phone: str | None = None


class GroupOut(ApiModel):
    id: str
    name: str
    course_id: str = Field(alias="courseId")
    room_id: str | None = Field(default=None, alias="roomId")
    teacher_id: str | None = Field(default=None, alias="teacherId")
    branch_id: str = Field(alias="branchId")
    status: GroupStatus
    days: list[str]
    start_time: time | None = None
    start_date: date | None = None
    end_date: date | None = None
    course: CourseSummary | None = None
    room: RoomSummary | None = None
    teacher: TeacherSummary | None = None
    branch: BranchSummary | None = None
    student_count: int = Field(default=0, alias="studentCount")


class EnrolledStudent(ApiModel):
    id: str
    fullname: str
    phone: str | None = None
    email: str | None = None


class GroupDetailOut(GroupOut):
    students: list[EnrolledStudent] = Field(default_factory=list)


class GroupStatusCounts(ApiModel):
    planned: int
    ongoing: int
    completed: int


class GroupStatistics(ApiModel):
    total: int
    by_status: GroupStatusCounts = Field(alias="byStatus")
    by_days: dict[str, int] = Field(alias="byDays")
    average_students_per_group: float = Field(alias="averageStudentsPerGroup")
    total_students: int = Field(alias="totalStudents")
