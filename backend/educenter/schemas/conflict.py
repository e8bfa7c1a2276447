from datetime import time
from enum import Enum

from pydantic import Field, field_validator

from educenter.schemas.common import ApiModel
from educenter.services.schedule import normalize_days, parse_time


class ConflictType(str, Enum):
    teacher = "TEACHER_CONFLICT"
    room = "ROOM_CONFLICT"


class ConflictRecord(ApiModel):
    conflict_type: ConflictType = Field(alias="conflictType")
    conflicting_group_id: str = Field(alias="conflictingGroupId")
    conflicting_group_name: str = Field(alias="conflictingGroupName")
    conflict_days: list[str] = Field(alias="conflictDays")
    conflict_time: str = Field(alias="conflictTime")


class ConflictCheckRequest(ApiModel):
    teacher_id: str | None = Field(default=None, alias="teacherId", max_length=36)
    room_id: str | None = Field(default=None, alias="roomId", max_length=36)
    days: list[str] = Field(default_factory=list, max_length=7)
    start_time: time | None = None
    exclude_group_id: str | None = Field(default=None, alias="excludeGroupId", max_length=36)

    @field_validator("days")
    @classmethod
    def validate_days(cls, value: list[str]) -> list[str]:
        return normalize_days(value)

    @field_validator("start_time", mode="before")
    @classmethod
    def validate_start_time(cls, value):
        if isinstance(value, str):
            return parse_time(value)
        return value


class ConflictCheckOut(ApiModel):
    has_conflicts: bool = Field(alias="hasConflicts")
    conflicts: list[ConflictRecord] = Field(default_factory=list)
