from datetime import date, time

from pydantic import Field, field_validator, model_validator

from educenter.models.group import GroupStatus
from educenter.schemas.common import ApiModel, BranchSummary, reject_explicit_nulls, require_text, strip_or_none
from educenter.services.schedule import normalize_days, parse_time


class RoomBase(ApiModel):
    name: str = Field(min_length=1, max_length=100)
    capacity: int = Field(ge=1, le=1000)
    branch_id: str = Field(alias="branchId", min_length=1, max_length=36)
    description: str | None = Field(default=None, max_length=2000)

    @field_validator("name")
    @classmethod
    def normalize_name(cls, value: str) -> str:
        return require_text(value)

    @field_validator("description")
    @classmethod
    def normalize_description(cls, value: str | None) -> str | None:
        return strip_or_none(value)


class RoomCreate(RoomBase):
    pass


class RoomUpdate(ApiModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    capacity: int | None = Field(default=None, ge=1, le=1000)
    branch_id: str | None = Field(default=None, alias="branchId", min_length=1, max_length=36)
    description: str | None = Field(default=None, max_length=2000)

    @model_validator(mode="after")
    def validate_required_fields(self) -> "RoomUpdate":
        reject_explicit_nulls(self, ("name", "capacity", "branch_id"))
        return self


class RoomOut(RoomBase):
    id: str
    branch: BranchSummary | None = None
    group_count: int = Field(default=0, alias="groupCount")
    is_available: bool | None = Field(default=None, alias="isAvailable")
    current_groups: int | None = Field(default=None, alias="currentGroups")
    utilization_rate: int | None = Field(default=None, alias="utilizationRate")


class RoomGroupOut(ApiModel):
    id: str
    name: str
    status: GroupStatus
    days: list[str]
    start_time: time | None = None
    start_date: date | None = None
    end_date: date | None = None
    student_count: int = Field(default=0, alias="studentCount")


class RoomUtilization(ApiModel):
    total_groups: int = Field(alias="totalGroups")
    active_groups: int = Field(alias="activeGroups")
    total_students: int = Field(alias="totalStudents")
    average_group_size: int = Field(alias="averageGroupSize")
    capacity_utilization: int = Field(alias="capacityUtilization")
    peak_days_usage: dict[str, int] = Field(alias="peakDaysUsage")


class RoomDetailOut(RoomOut):
    groups: list[RoomGroupOut] = Field(default_factory=list)
    utilization_metrics: RoomUtilization = Field(alias="utilizationMetrics")


class RoomAvailabilityRequest(ApiModel):
    room_id: str = Field(alias="roomId", min_length=1, max_length=36)
    days: list[str] = Field(min_length=1, max_length=7)
    start_time: time = Field(alias="startTime")
    exclude_group_id: str | None = Field(default=None, alias="excludeGroupId")

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


class OccupyingGroup(ApiModel):
    id: str
    name: str
    days: list[str]
    time: str


class DaySlots(ApiModel):
    day: str
    slots: list[str]


class RoomAvailabilityOut(ApiModel):
    room_id: str = Field(alias="roomId")
    room_name: str = Field(alias="roomName")
    is_available: bool = Field(alias="isAvailable")
    conflicting_groups: list[OccupyingGroup] = Field(alias="conflictingGroups")
    available_time_slots: list[DaySlots] | None = Field(default=None, alias="availableTimeSlots")


class CapacityDistribution(ApiModel):
    small: int
    medium: int
    large: int


class RoomAvailabilityStats(ApiModel):
    available: int
    occupied: int


class RoomStatistics(ApiModel):
    total: int
    total_capacity: int = Field(alias="totalCapacity")
    average_capacity: int = Field(alias="averageCapacity")
    capacity_distribution: CapacityDistribution = Field(alias="capacityDistribution")
    availability_stats: RoomAvailabilityStats = Field(alias="availabilityStats")
