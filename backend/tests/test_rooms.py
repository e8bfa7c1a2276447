def create_group(client, headers, setup, name, days, start_time, *, room=0, teacher=0, status="PLANNED"):
    response = client.post(
        "/api/groups",
        json={
            "name": name,
            "courseId": setup["course_id"],
            "branchId": setup["branch_id"],
            "teacherId": setup["teacher_ids"][teacher],
            "roomId": setup["room_ids"][room],
            "days": days,
            "start_time": start_time,
            "status": status,
        },
        headers=headers,
    )
    assert response.status_code == 201
    return response.json()


def test_room_availability_reports_occupying_groups_and_free_slots(client, admin_headers, branch_setup):
    room_id = branch_setup["room_ids"][0]
    g1 = create_group(client, admin_headers, branch_setup, "G1", ["MON"], "10:00:00")

    busy = client.post(
        "/api/rooms/check-availability",
        json={"roomId": room_id, "days": ["MON"], "startTime": "10:00:00"},
        headers=admin_headers,
    )
    assert busy.status_code == 200
    body = busy.json()
    assert body["roomId"] == room_id
    assert body["roomName"] == "Room 1"
    assert body["isAvailable"] is False
    assert body["conflictingGroups"] == [{"id": g1["id"], "name": "G1", "days": ["MON"], "time": "10:00:00"}]
    assert body["availableTimeSlots"] == [
        {
            "day": "MON",
            "slots": [
                "08:00:00",
                "09:00:00",
                "11:00:00",
                "12:00:00",
                "13:00:00",
                "14:00:00",
                "15:00:00",
                "16:00:00",
                "17:00:00",
                "18:00:00",
            ],
        }
    ]

    free = client.post(
        "/api/rooms/check-availability",
        json={"roomId": room_id, "days": ["MON"], "startTime": "11:00:00"},
        headers=admin_headers,
    )
    assert free.json()["isAvailable"] is True
    assert free.json()["conflictingGroups"] == []

    excluded = client.post(
        "/api/rooms/check-availability",
        json={"roomId": room_id, "days": ["MON"], "startTime": "10:00:00", "excludeGroupId": g1["id"]},
        headers=admin_headers,
    )
    assert excluded.json()["isAvailable"] is True


def test_completed_groups_do_not_occupy_a_room(client, admin_headers, branch_setup):
    create_group(client, admin_headers, branch_setup, "Old", ["TUE"], "12:00:00", status="COMPLETED")

    response = client.post(
        "/api/rooms/check-availability",
        json={"roomId": branch_setup["room_ids"][0], "days": ["TUE"], "startTime": "12:00:00"},
        headers=admin_headers,
    )
    assert response.json()["isAvailable"] is True


def test_availability_for_unknown_room_is_not_found(client, admin_headers):
    response = client.post(
        "/api/rooms/check-availability",
        json={"roomId": "missing", "days": ["MON"], "startTime": "10:00:00"},
        headers=admin_headers,
    )
    assert response.status_code == 404


def test_room_with_active_groups_cannot_be_deleted(client, admin_headers, branch_setup):
    room_id = branch_setup["room_ids"][0]
    group = create_group(client, admin_headers, branch_setup, "G1", ["MON"], "10:00:00")

    blocked = client.delete(f"/api/rooms/{room_id}", headers=admin_headers)
    assert blocked.status_code == 409

    client.patch(f"/api/groups/{group['id']}", json={"status": "COMPLETED"}, headers=admin_headers)
    allowed = client.delete(f"/api/rooms/{room_id}", headers=admin_headers)
    assert allowed.status_code == 200

    detail = client.get(f"/api/groups/{group['id']}", headers=admin_headers)
    assert detail.json()["roomId"] is None


def test_room_name_is_unique_within_branch(client, admin_headers, branch_setup):
    response = client.post(
        "/api/rooms",
        json={"name": "Room 1", "capacity": 12, "branchId": branch_setup["branch_id"]},
        headers=admin_headers,
    )
    assert response.status_code == 409


def test_room_detail_list_and_statistics(client, admin_headers, branch_setup):
    room_id = branch_setup["room_ids"][0]
    create_group(client, admin_headers, branch_setup, "G1", ["MON", "WED"], "10:00:00")

    detail = client.get(f"/api/rooms/{room_id}", headers=admin_headers)
    assert detail.status_code == 200
    metrics = detail.json()["utilizationMetrics"]
    assert metrics["totalGroups"] == 1
    assert metrics["activeGroups"] == 1
    assert metrics["peakDaysUsage"]["MON"] == 1
    assert detail.json()["isAvailable"] is False

    available = client.get("/api/rooms", params={"available": "true"}, headers=admin_headers)
    assert [item["name"] for item in available.json()["data"]] == ["Room 2"]

    stats = client.get("/api/rooms/statistics", headers=admin_headers).json()
    assert stats["total"] == 2
    assert stats["totalCapacity"] == 40
    assert stats["averageCapacity"] == 20
    assert stats["capacityDistribution"] == {"small": 2, "medium": 0, "large": 0}
    assert stats["availabilityStats"] == {"available": 1, "occupied": 1}
