def test_teacher_with_ongoing_group_cannot_be_deactivated_or_deleted(client, admin_headers, branch_setup):
    teacher_id = branch_setup["teacher_ids"][0]
    group = client.post(
        "/api/groups",
        json={
            "name": "G1",
            "courseId": branch_setup["course_id"],
            "branchId": branch_setup["branch_id"],
            "teacherId": teacher_id,
            "days": ["MON"],
            "start_time": "09:00:00",
            "status": "ONGOING",
        },
        headers=admin_headers,
    ).json()

    status_change = client.patch(
        f"/api/teachers/{teacher_id}/status", json={"status": "INACTIVE"}, headers=admin_headers
    )
    assert status_change.status_code == 409
    assert client.delete(f"/api/teachers/{teacher_id}", headers=admin_headers).status_code == 409

    groups = client.get(f"/api/teachers/{teacher_id}/groups", headers=admin_headers).json()
    assert [item["name"] for item in groups] == ["G1"]

    client.patch(f"/api/groups/{group['id']}", json={"status": "COMPLETED"}, headers=admin_headers)
    deleted = client.delete(f"/api/teachers/{teacher_id}", headers=admin_headers)
    assert deleted.status_code == 200
    assert "Teacher One" in deleted.json()["message"]
    assert client.get(f"/api/groups/{group['id']}", headers=admin_headers).json()["teacherId"] is None


def test_inactive_teacher_cannot_be_assigned(client, admin_headers, branch_setup):
    teacher_id = branch_setup["teacher_ids"][1]
    client.patch(f"/api/teachers/{teacher_id}/status", json={"status": "INACTIVE"}, headers=admin_headers)

    response = client.post(
        "/api/groups",
        json={
            "name": "G1",
            "courseId": branch_setup["course_id"],
            "branchId": branch_setup["branch_id"],
            "teacherId": teacher_id,
            "days": ["MON"],
        },
        headers=admin_headers,
    )
    assert response.status_code == 400
    assert response.json()["message"] == "Teacher is not active"


def test_teacher_stats(client, admin_headers, branch_setup):
    stats = client.get("/api/teachers/stats", headers=admin_headers).json()
    assert stats["totalTeachers"] == 2
    assert stats["femaleTeachers"] == 2
    assert stats["teachersWithGroups"] == 0
    assert stats["teachersByBranch"][0]["teacherCount"] == 2


def test_student_crud_and_statistics(client, admin_headers, branch_setup):
    created = client.post(
        "/api/students",
        json={
            "fullname": "Malika Qodirova",
            "email": "Malika@Example.com",
            "gender": "FEMALE",
            "branchId": branch_setup["branch_id"],
            "otherDetails": {"parentPhone": "+998900000002"},
        },
        headers=admin_headers,
    )
    assert created.status_code == 201
    student = created.json()
    assert student["email"] == "malika@example.com"
    assert student["groupCount"] == 0

    duplicate = client.post(
        "/api/students",
        json={"fullname": "Someone Else", "email": "malika@example.com", "branchId": branch_setup["branch_id"]},
        headers=admin_headers,
    )
    assert duplicate.status_code == 409

    found = client.get("/api/students", params={"search": "malika"}, headers=admin_headers).json()
    assert found["meta"]["total"] == 1

    updated = client.patch(f"/api/students/{student['id']}", json={"status": "INACTIVE"}, headers=admin_headers)
    assert updated.json()["status"] == "INACTIVE"

    stats = client.get("/api/students/statistics", headers=admin_headers).json()
    assert stats["total"] == 1
    assert stats["byStatus"] == {"active": 0, "inactive": 1}
    assert stats["enrollmentStats"]["notEnrolled"] == 1

    assert client.delete(f"/api/students/{student['id']}", headers=admin_headers).status_code == 200
    assert client.get(f"/api/students/{student['id']}", headers=admin_headers).status_code == 404
