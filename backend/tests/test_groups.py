from educenter.services import group_service


def group_payload(setup, name, days, start_time="09:00:00", *, teacher=0, room=None, **extra):
    payload = {
        "name": name,
        "courseId": setup["course_id"],
        "branchId": setup["branch_id"],
        "days": days,
        "start_time": start_time,
    }
    if teacher is not None:
        payload["teacherId"] = setup["teacher_ids"][teacher]
    if room is not None:
        payload["roomId"] = setup["room_ids"][room]
    payload.update(extra)
    return payload


def test_teacher_double_booking_is_rejected_with_shared_days(client, admin_headers, branch_setup):
    g1 = client.post("/api/groups", json=group_payload(branch_setup, "G1", ["MON", "WED"]), headers=admin_headers)
    assert g1.status_code == 201
    assert g1.json()["status"] == "PLANNED"
    assert g1.json()["start_time"] == "09:00:00"

    g2 = client.post("/api/groups", json=group_payload(branch_setup, "G2", ["WED", "FRI"]), headers=admin_headers)
    assert g2.status_code == 409
    body = g2.json()
    assert body["message"] == "Schedule conflicts detected"
    assert body["conflicts"] == [
        {
            "conflictType": "TEACHER_CONFLICT",
            "conflictingGroupId": g1.json()["id"],
            "conflictingGroupName": "G1",
            "conflictDays": ["WED"],
            "conflictTime": "09:00:00",
        }
    ]

    g3 = client.post("/api/groups", json=group_payload(branch_setup, "G3", ["TUE", "THU"]), headers=admin_headers)
    assert g3.status_code == 201


def test_room_double_booking_is_rejected(client, admin_headers, branch_setup):
    first = client.post(
        "/api/groups",
        json=group_payload(branch_setup, "Morning", ["MON"], "10:00:00", teacher=0, room=0),
        headers=admin_headers,
    )
    assert first.status_code == 201

    second = client.post(
        "/api/groups",
        json=group_payload(branch_setup, "Clash", ["MON", "TUE"], "10:00:00", teacher=1, room=0),
        headers=admin_headers,
    )
    assert second.status_code == 409
    conflicts = second.json()["conflicts"]
    assert [item["conflictType"] for item in conflicts] == ["ROOM_CONFLICT"]
    assert conflicts[0]["conflictDays"] == ["MON"]


def test_groups_without_teacher_or_room_never_conflict(client, admin_headers, branch_setup):
    for name in ("Self study A", "Self study B"):
        response = client.post(
            "/api/groups",
            json=group_payload(branch_setup, name, ["MON"], teacher=None),
            headers=admin_headers,
        )
        assert response.status_code == 201


def test_update_to_same_schedule_does_not_self_conflict(client, admin_headers, branch_setup):
    created = client.post(
        "/api/groups",
        json=group_payload(branch_setup, "G1", ["MON", "WED"], room=0),
        headers=admin_headers,
    )
    group_id = created.json()["id"]

    response = client.patch(
        f"/api/groups/{group_id}",
        json={"days": ["MON", "WED"], "start_time": "09:00:00", "teacherId": branch_setup["teacher_ids"][0]},
        headers=admin_headers,
    )
    assert response.status_code == 200

    moved = client.patch(f"/api/groups/{group_id}", json={"days": ["WED", "FRI"]}, headers=admin_headers)
    assert moved.status_code == 200
    assert moved.json()["days"] == ["WED", "FRI"]


def test_update_into_occupied_slot_is_rejected(client, admin_headers, branch_setup):
    client.post("/api/groups", json=group_payload(branch_setup, "G1", ["MON"]), headers=admin_headers)
    other = client.post(
        "/api/groups", json=group_payload(branch_setup, "G2", ["MON"], "11:00:00"), headers=admin_headers
    )

    response = client.patch(
        f"/api/groups/{other.json()['id']}", json={"start_time": "09:00:00"}, headers=admin_headers
    )
    assert response.status_code == 409
    assert response.json()["conflicts"][0]["conflictingGroupName"] == "G1"


def test_check_conflicts_is_a_dry_run(client, admin_headers, branch_setup):
    g1 = client.post("/api/groups", json=group_payload(branch_setup, "G1", ["MON", "WED"]), headers=admin_headers)
    body = {
        "teacherId": branch_setup["teacher_ids"][0],
        "days": ["wed", "fri"],
        "start_time": "09:00:00",
    }

    first = client.post("/api/groups/check-conflicts", json=body, headers=admin_headers)
    second = client.post("/api/groups/check-conflicts", json=body, headers=admin_headers)
    assert first.status_code == 200
    assert first.json() == second.json()
    assert first.json()["hasConflicts"] is True
    assert first.json()["conflicts"][0]["conflictDays"] == ["WED"]

    excluded = client.post(
        "/api/groups/check-conflicts", json={**body, "excludeGroupId": g1.json()["id"]}, headers=admin_headers
    )
    assert excluded.json() == {"hasConflicts": False, "conflicts": []}


def test_group_validation_rules(client, admin_headers, branch_setup):
    empty_days = client.post("/api/groups", json=group_payload(branch_setup, "G", []), headers=admin_headers)
    assert empty_days.status_code == 400
    assert empty_days.json()["message"] == "Validation failed"

    bad_time = client.post(
        "/api/groups", json=group_payload(branch_setup, "G", ["MON"], "9am"), headers=admin_headers
    )
    assert bad_time.status_code == 400

    bad_dates = client.post(
        "/api/groups",
        json=group_payload(branch_setup, "G", ["MON"], start_date="2026-03-01", end_date="2026-02-01"),
        headers=admin_headers,
    )
    assert bad_dates.status_code == 400

    missing_course = client.post(
        "/api/groups",
        json=group_payload(branch_setup, "G", ["MON"], courseId="00000000-0000-0000-0000-000000000000"),
        headers=admin_headers,
    )
    assert missing_course.status_code == 400
    assert missing_course.json()["message"] == "Course with ID 00000000-0000-0000-0000-000000000000 not found"


def test_group_rejects_resources_from_another_branch(client, admin_headers, branch_setup):
    other = client.post("/api/branches", json={"name": "Uptown"}, headers=admin_headers).json()
    room = client.post(
        "/api/rooms", json={"name": "Far room", "capacity": 10, "branchId": other["id"]}, headers=admin_headers
    ).json()

    response = client.post(
        "/api/groups",
        json=group_payload(branch_setup, "G", ["MON"], roomId=room["id"]),
        headers=admin_headers,
    )
    assert response.status_code == 400
    assert "branch" in response.json()["message"]


def test_inactive_branch_rejects_new_groups(client, admin_headers, branch_setup):
    client.patch(f"/api/branches/{branch_setup['branch_id']}", json={"status": "INACTIVE"}, headers=admin_headers)

    response = client.post("/api/groups", json=group_payload(branch_setup, "G", ["MON"]), headers=admin_headers)
    assert response.status_code == 400
    assert response.json()["message"] == "Branch is not active"


def test_duplicate_group_name_in_branch_conflicts(client, admin_headers, branch_setup):
    client.post("/api/groups", json=group_payload(branch_setup, "G1", ["MON"]), headers=admin_headers)
    response = client.post(
        "/api/groups", json=group_payload(branch_setup, "G1", ["TUE"]), headers=admin_headers
    )
    assert response.status_code == 409
    assert "conflicts" not in response.json()


def test_group_detail_list_and_statistics(client, admin_headers, branch_setup):
    created = client.post(
        "/api/groups", json=group_payload(branch_setup, "Evening", ["MON", "WED"], "18:00:00", room=1),
        headers=admin_headers,
    ).json()
    client.post("/api/groups", json=group_payload(branch_setup, "Weekend", ["SAT"], teacher=1), headers=admin_headers)

    detail = client.get(f"/api/groups/{created['id']}", headers=admin_headers)
    assert detail.status_code == 200
    assert detail.json()["course"]["name"] == "English A1"
    assert detail.json()["room"]["name"] == "Room 2"
    assert detail.json()["students"] == []

    listing = client.get("/api/groups", params={"days": "MON,TUE", "limit": 5}, headers=admin_headers)
    assert listing.status_code == 200
    assert [item["name"] for item in listing.json()["data"]] == ["Evening"]
    assert listing.json()["meta"] == {"total": 1, "page": 1, "limit": 5, "totalPages": 1}

    search = client.get("/api/groups", params={"search": "teacher two"}, headers=admin_headers)
    assert [item["name"] for item in search.json()["data"]] == ["Weekend"]

    stats = client.get("/api/groups/statistics", headers=admin_headers)
    assert stats.status_code == 200
    assert stats.json()["total"] == 2
    assert stats.json()["byStatus"] == {"planned": 2, "ongoing": 0, "completed": 0}
    assert stats.json()["byDays"]["MON"] == 1
    assert stats.json()["byDays"]["SAT"] == 1
    assert stats.json()["averageStudentsPerGroup"] == 0


def test_missing_group_returns_not_found(client, admin_headers):
    response = client.get("/api/groups/does-not-exist", headers=admin_headers)
    assert response.status_code == 404
    assert response.json()["message"] == "Group with ID does-not-exist not found"


def test_unknown_room_or_teacher_is_a_bad_request(client, admin_headers, branch_setup):
    unknown_room = client.post(
        "/api/groups", json=group_payload(branch_setup, "G", ["MON"], roomId="nope"), headers=admin_headers
    )
    assert unknown_room.status_code == 400
    assert unknown_room.json()["message"] == "Room with ID nope not found"

    unknown_teacher = client.post(
        "/api/groups", json=group_payload(branch_setup, "G", ["MON"], teacherId="nope"), headers=admin_headers
    )
    assert unknown_teacher.status_code == 400

    group = client.post("/api/groups", json=group_payload(branch_setup, "G", ["MON"]), headers=admin_headers).json()
    moved = client.patch(f"/api/groups/{group['id']}", json={"roomId": "nope"}, headers=admin_headers)
    assert moved.status_code == 400


def test_list_filters_by_time_and_date_ranges(client, admin_headers, branch_setup):
    client.post(
        "/api/groups",
        json=group_payload(
            branch_setup, "Morning", ["MON"], "09:00:00", start_date="2026-01-10", end_date="2026-03-10"
        ),
        headers=admin_headers,
    )
    client.post(
        "/api/groups",
        json=group_payload(
            branch_setup, "Late", ["MON"], "15:00:00", teacher=1, start_date="2026-02-10", end_date="2026-06-10"
        ),
        headers=admin_headers,
    )

    def names(**params):
        response = client.get("/api/groups", params=params, headers=admin_headers)
        assert response.status_code == 200
        return sorted(item["name"] for item in response.json()["data"])

    assert names(timeFrom="14:00", timeTo="16:00") == ["Late"]
    assert names(timeFrom="08:00:00", timeTo="09:00:00") == ["Morning"]
    assert names(startDateFrom="2026-01-01", startDateTo="2026-01-31") == ["Morning"]
    assert names(endDateFrom="2026-05-01", endDateTo="2026-12-31") == ["Late"]

    # A range with a single bound is ignored.
    assert names(timeFrom="14:00") == ["Late", "Morning"]
    assert names(startDateTo="2026-01-31") == ["Late", "Morning"]
    assert names(endDateFrom="2026-05-01") == ["Late", "Morning"]


def test_slot_taken_at_commit_time_is_reported_with_conflicts(client, admin_headers, branch_setup, monkeypatch):
    g1 = client.post(
        "/api/groups", json=group_payload(branch_setup, "G1", ["MON"], status="ONGOING"), headers=admin_headers
    ).json()
    g2 = client.post("/api/groups", json=group_payload(branch_setup, "G2", ["TUE"]), headers=admin_headers).json()

    # Simulate a rival write landing between the conflict check and the commit.
    monkeypatch.setattr(group_service, "ensure_no_conflicts", lambda *args, **kwargs: None)
    response = client.patch(f"/api/groups/{g2['id']}", json={"days": ["MON"]}, headers=admin_headers)

    assert response.status_code == 409
    body = response.json()
    assert body["message"] == "Schedule conflicts detected"
    assert body["conflicts"] == [
        {
            "conflictType": "TEACHER_CONFLICT",
            "conflictingGroupId": g1["id"],
            "conflictingGroupName": "G1",
            "conflictDays": ["MON"],
            "conflictTime": "09:00:00",
        }
    ]
    detail = client.get(f"/api/groups/{g2['id']}", headers=admin_headers).json()
    assert detail["days"] == ["TUE"]
