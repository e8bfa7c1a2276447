import pytest


@pytest.fixture()
def group_and_student(client, admin_headers, branch_setup):
    group = client.post(
        "/api/groups",
        json={
            "name": "G1",
            "courseId": branch_setup["course_id"],
            "branchId": branch_setup["branch_id"],
            "teacherId": branch_setup["teacher_ids"][0],
            "roomId": branch_setup["room_ids"][0],
            "days": ["MON", "WED"],
            "start_time": "10:00:00",
        },
        headers=admin_headers,
    )
    assert group.status_code == 201
    student = client.post(
        "/api/students",
        json={"fullname": "Ali Valiyev", "phone": "+998900000001", "branchId": branch_setup["branch_id"]},
        headers=admin_headers,
    )
    assert student.status_code == 201
    return group.json(), student.json()


def enroll(client, headers, branch_id, student_id, group_id):
    return client.post(
        "/api/student-groups",
        json={"studentId": student_id, "groupId": group_id, "branchId": branch_id},
        headers=headers,
    )


def test_enroll_student_and_reject_duplicates(client, admin_headers, branch_setup, group_and_student):
    group, student = group_and_student

    response = enroll(client, admin_headers, branch_setup["branch_id"], student["id"], group["id"])
    assert response.status_code == 201
    body = response.json()
    assert body["studentName"] == "Ali Valiyev"
    assert body["groupName"] == "G1"

    duplicate = enroll(client, admin_headers, branch_setup["branch_id"], student["id"], group["id"])
    assert duplicate.status_code == 409

    detail = client.get(f"/api/groups/{group['id']}", headers=admin_headers).json()
    assert detail["studentCount"] == 1
    assert [item["fullname"] for item in detail["students"]] == ["Ali Valiyev"]

    groups = client.get(f"/api/students/{student['id']}/groups", headers=admin_headers).json()
    assert groups[0]["name"] == "G1"
    assert groups[0]["days"] == ["MON", "WED"]


def test_enrollment_requires_matching_branch(client, admin_headers, group_and_student):
    group, student = group_and_student
    other = client.post("/api/branches", json={"name": "Uptown"}, headers=admin_headers).json()

    response = enroll(client, admin_headers, other["id"], student["id"], group["id"])
    assert response.status_code == 400


def test_enrollment_with_unknown_student_is_not_found(client, admin_headers, branch_setup, group_and_student):
    group, _ = group_and_student
    response = enroll(client, admin_headers, branch_setup["branch_id"], "missing", group["id"])
    assert response.status_code == 404


def test_enrolled_group_and_student_cannot_be_deleted(client, admin_headers, branch_setup, group_and_student):
    group, student = group_and_student
    enroll(client, admin_headers, branch_setup["branch_id"], student["id"], group["id"])

    assert client.delete(f"/api/groups/{group['id']}", headers=admin_headers).status_code == 409
    assert client.delete(f"/api/students/{student['id']}", headers=admin_headers).status_code == 409

    removed = client.delete(f"/api/students/{student['id']}/groups/{group['id']}", headers=admin_headers)
    assert removed.status_code == 200

    assert client.delete(f"/api/groups/{group['id']}", headers=admin_headers).status_code == 200
    assert client.delete(f"/api/students/{student['id']}", headers=admin_headers).status_code == 200


def test_student_in_completed_group_can_be_deleted(client, admin_headers, branch_setup, group_and_student):
    group, student = group_and_student
    enroll(client, admin_headers, branch_setup["branch_id"], student["id"], group["id"])
    client.patch(f"/api/groups/{group['id']}", json={"status": "COMPLETED"}, headers=admin_headers)

    response = client.delete(f"/api/students/{student['id']}", headers=admin_headers)
    assert response.status_code == 200

    listing = client.get("/api/student-groups", params={"groupId": group["id"]}, headers=admin_headers)
    assert listing.json()["meta"]["total"] == 0


def test_unenroll_missing_enrollment_is_not_found(client, admin_headers, group_and_student):
    group, student = group_and_student
    response = client.delete(f"/api/students/{student['id']}/groups/{group['id']}", headers=admin_headers)
    assert response.status_code == 404
