from educenter.models.branch import Branch, BranchStatus  # noqa: F401
from educenter.models.category import CourseCategory  # noqa: F401
from educenter.models.course import Course, CourseStatus  # noqa: F401
from educenter.models.enrollment import StudentGroup  # noqa: F401
from educenter.models.group import (  # noqa: F401
    ACTIVE_GROUP_STATUSES,
    DayOfWeek,
    Group,
    GroupScheduleSlot,
    GroupStatus,
)
from educenter.models.room import Room  # noqa: F401
from educenter.models.student import Student, StudentStatus  # noqa: F401
from educenter.models.teacher import Gender, Teacher, TeacherStatus  # noqa: F401
from educenter.models.user import User, UserRole  # noqa: F401
