from datetime import time

import pytest

from educenter.core.exceptions import ConflictError, ScheduleConflictError
from educenter.models import Branch, Course, CourseCategory, Group, GroupStatus, Room, Teacher
from educenter.models.teacher import Gender
from educenter.schemas.conflict import ConflictType
from educenter.schemas.group import GroupCreate
from educenter.services import group_service
from educenter.services.conflict_service import ensure_no_conflicts, find_schedule_conflicts
from educenter.services.group_service import sync_schedule_slots


@pytest.fixture()
def catalog(db_session):
    branch = Branch(name="Main")
    db_session.add(branch)
    db_session.flush()
    category = CourseCategory(name="Maths", branch_id=branch.id)
    db_session.add(category)
    db_session.flush()
    course = Course(name="Algebra", branch_id=branch.id, category_id=category.id)
    teacher = Teacher(fullname="T One", phone="+1000", gender=Gender.male, branch_id=branch.id)
    other_teacher = Teacher(fullname="T Two", phone="+1001", gender=Gender.female, branch_id=branch.id)
    room = Room(name="R1", capacity=10, branch_id=branch.id)
    db_session.add_all([course, teacher, other_teacher, room])
    db_session.commit()
    return {"branch": branch, "course": course, "teacher": teacher, "other_teacher": other_teacher, "room": room}


def add_group(db_session, catalog, name, days, start, *, teacher=None, room=None, status=GroupStatus.planned):
    group = Group(
        name=name,
        course_id=catalog["course"].id,
        branch_id=catalog["branch"].id,
        teacher_id=teacher.id if teacher else None,
        room_id=room.id if room else None,
        days=days,
        start_time=start,
        status=status,
    )
    sync_schedule_slots(group)
    db_session.add(group)
    db_session.commit()
    return group


def test_shared_teacher_on_overlapping_day_is_a_teacher_conflict(db_session, catalog):
    g1 = add_group(db_session, catalog, "G1", ["MON", "WED"], time(9), teacher=catalog["teacher"])

    conflicts = find_schedule_conflicts(
        db_session, days=["WED", "FRI"], start_time=time(9), teacher_id=catalog["teacher"].id
    )

    assert len(conflicts) == 1
    record = conflicts[0]
    assert record.conflict_type == ConflictType.teacher
    assert record.conflicting_group_id == g1.id
    assert record.conflicting_group_name == "G1"
    assert record.conflict_days == ["WED"]
    assert record.conflict_time == "09:00:00"


def test_disjoint_days_or_different_time_never_conflict(db_session, catalog):
    add_group(db_session, catalog, "G1", ["MON", "WED"], time(9), teacher=catalog["teacher"], room=catalog["room"])

    assert find_schedule_conflicts(
        db_session,
        days=["TUE", "THU"],
        start_time=time(9),
        teacher_id=catalog["teacher"].id,
        room_id=catalog["room"].id,
    ) == []
    assert find_schedule_conflicts(
        db_session,
        days=["MON"],
        start_time=time(10),
        teacher_id=catalog["teacher"].id,
        room_id=catalog["room"].id,
    ) == []


def test_teacher_conflicts_are_reported_before_room_conflicts(db_session, catalog):
    add_group(db_session, catalog, "Room holder", ["MON"], time(9), teacher=catalog["other_teacher"], room=catalog["room"])
    add_group(db_session, catalog, "Teacher holder", ["MON", "TUE"], time(9), teacher=catalog["teacher"])

    conflicts = find_schedule_conflicts(
        db_session,
        days=["MON", "TUE"],
        start_time=time(9),
        teacher_id=catalog["teacher"].id,
        room_id=catalog["room"].id,
    )

    assert [item.conflict_type for item in conflicts] == [ConflictType.teacher, ConflictType.room]
    assert conflicts[0].conflicting_group_name == "Teacher holder"
    assert conflicts[0].conflict_days == ["MON", "TUE"]
    assert conflicts[1].conflicting_group_name == "Room holder"
    assert conflicts[1].conflict_days == ["MON"]


def test_excluded_group_does_not_conflict_with_itself(db_session, catalog):
    group = add_group(db_session, catalog, "G1", ["MON", "WED"], time(9), teacher=catalog["teacher"], room=catalog["room"])

    assert find_schedule_conflicts(
        db_session,
        days=["MON", "WED"],
        start_time=time(9),
        teacher_id=catalog["teacher"].id,
        room_id=catalog["room"].id,
        exclude_group_id=group.id,
    ) == []


def test_missing_days_time_or_resources_yield_no_conflicts(db_session, catalog):
    add_group(db_session, catalog, "G1", ["MON"], time(9), teacher=catalog["teacher"], room=catalog["room"])

    assert find_schedule_conflicts(db_session, days=[], start_time=time(9), teacher_id=catalog["teacher"].id) == []
    assert find_schedule_conflicts(db_session, days=["MON"], start_time=None, teacher_id=catalog["teacher"].id) == []
    assert find_schedule_conflicts(db_session, days=["MON"], start_time=time(9)) == []


def test_completed_groups_still_count_for_conflicts(db_session, catalog):
    add_group(
        db_session, catalog, "Old", ["FRI"], time(15), teacher=catalog["teacher"], status=GroupStatus.completed
    )

    conflicts = find_schedule_conflicts(
        db_session, days=["FRI"], start_time=time(15), teacher_id=catalog["teacher"].id
    )
    assert [item.conflicting_group_name for item in conflicts] == ["Old"]


def test_ensure_no_conflicts_raises_with_every_record(db_session, catalog):
    add_group(db_session, catalog, "G1", ["MON"], time(9), teacher=catalog["teacher"], room=catalog["room"])

    with pytest.raises(ScheduleConflictError) as excinfo:
        ensure_no_conflicts(
            db_session,
            days=["MON"],
            start_time=time(9),
            teacher_id=catalog["teacher"].id,
            room_id=catalog["room"].id,
        )

    payload = excinfo.value.to_payload()
    assert excinfo.value.status_code == 409
    assert [item["conflictType"] for item in payload["conflicts"]] == ["TEACHER_CONFLICT", "ROOM_CONFLICT"]
    assert payload["details"] == {"count": 2}


def test_find_is_idempotent(db_session, catalog):
    add_group(db_session, catalog, "G1", ["MON", "WED"], time(9), teacher=catalog["teacher"])
    kwargs = {"days": ["WED"], "start_time": time(9), "teacher_id": catalog["teacher"].id}

    assert find_schedule_conflicts(db_session, **kwargs) == find_schedule_conflicts(db_session, **kwargs)


def make_payload(catalog, name, days, start):
    return GroupCreate(
        name=name,
        course_id=catalog["course"].id,
        branch_id=catalog["branch"].id,
        teacher_id=catalog["teacher"].id,
        days=days,
        start_time=start,
    )


def test_slot_index_rejects_a_booking_that_slipped_past_the_check(db_session, catalog, monkeypatch):
    g1 = add_group(db_session, catalog, "G1", ["MON"], time(9), teacher=catalog["teacher"])
    # Another writer committed G1 after this request ran its conflict check.
    monkeypatch.setattr(group_service, "ensure_no_conflicts", lambda *args, **kwargs: None)

    with pytest.raises(ScheduleConflictError) as excinfo:
        group_service.create_group(db_session, make_payload(catalog, "G2", ["MON", "THU"], time(9)))

    assert [record.conflicting_group_id for record in excinfo.value.conflicts] == [g1.id]
    assert excinfo.value.conflicts[0].conflict_days == ["MON"]
    assert db_session.query(Group).filter_by(name="G2").count() == 0


def test_slot_index_violation_without_visible_rival_is_a_plain_conflict(db_session, catalog, monkeypatch):
    add_group(db_session, catalog, "G1", ["MON"], time(9), teacher=catalog["teacher"])
    monkeypatch.setattr(group_service, "ensure_no_conflicts", lambda *args, **kwargs: None)
    monkeypatch.setattr(group_service, "find_schedule_conflicts", lambda *args, **kwargs: [])

    with pytest.raises(ConflictError) as excinfo:
        group_service.create_group(db_session, make_payload(catalog, "G2", ["MON"], time(9)))

    assert not isinstance(excinfo.value, ScheduleConflictError)
    assert excinfo.value.status_code == 409
