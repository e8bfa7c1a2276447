from datetime import datetime

from pydantic import Field

from educenter.schemas.common import ApiModel


class EnrollmentCreate(ApiModel):
    student_id: str = Field(alias="studentId", min_length=1, max_length=36)
    group_id: str = Field(alias="groupId", min_length=1, max_length=36)
    branch_id: str = Field(alias="branchId", min_length=1, max_length=36)


class EnrollmentOut(ApiModel):
    id: str
    student_id: str = Field(alias="studentId")
    group_id: str = Field(alias="groupId")
    branch_id: str = Field(alias="branchId")
    created_at: datetime | None = Field(default=None, alias="createdAt")
    student_name: str | None = Field(default=None, alias="studentName")
    group_name: str | None = Field(default=None, alias="groupName")
