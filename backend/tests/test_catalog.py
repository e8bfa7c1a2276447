def test_branch_crud_and_delete_guard(client, admin_headers, branch_setup):
    created = client.post(
        "/api/branches", json={"name": "  Chilonzor ", "region": "Tashkent"}, headers=admin_headers
    )
    assert created.status_code == 201
    branch = created.json()
    assert branch["name"] == "Chilonzor"
    assert branch["status"] == "ACTIVE"

    listing = client.get("/api/branches", params={"search": "chil"}, headers=admin_headers)
    assert [item["id"] for item in listing.json()["data"]] == [branch["id"]]

    updated = client.patch(f"/api/branches/{branch['id']}", json={"district": "Yunusobod"}, headers=admin_headers)
    assert updated.json()["district"] == "Yunusobod"

    assert client.delete(f"/api/branches/{branch['id']}", headers=admin_headers).status_code == 200
    assert client.get(f"/api/branches/{branch['id']}", headers=admin_headers).status_code == 404

    blocked = client.delete(f"/api/branches/{branch_setup['branch_id']}", headers=admin_headers)
    assert blocked.status_code == 409


def test_branch_name_cannot_be_cleared(client, admin_headers, branch_setup):
    response = client.patch(
        f"/api/branches/{branch_setup['branch_id']}", json={"name": None}, headers=admin_headers
    )
    assert response.status_code == 400


def test_categories_count_courses_and_guard_delete(client, admin_headers, branch_setup):
    categories = client.get(
        "/api/course-categories", params={"branchId": branch_setup["branch_id"]}, headers=admin_headers
    ).json()
    assert categories[0]["courseCount"] == 1

    blocked = client.delete(f"/api/course-categories/{branch_setup['category_id']}", headers=admin_headers)
    assert blocked.status_code == 409

    empty = client.post(
        "/api/course-categories", json={"name": "Math", "branchId": branch_setup["branch_id"]}, headers=admin_headers
    ).json()
    assert empty["courseCount"] == 0
    assert client.delete(f"/api/course-categories/{empty['id']}", headers=admin_headers).status_code == 200


def test_course_category_must_share_branch(client, admin_headers, branch_setup):
    other = client.post("/api/branches", json={"name": "Uptown"}, headers=admin_headers).json()

    response = client.post(
        "/api/courses",
        json={"name": "IELTS", "branchId": other["id"], "categoryId": branch_setup["category_id"]},
        headers=admin_headers,
    )
    assert response.status_code == 400
    assert response.json()["message"] == "Course category does not belong to the specified branch"


def test_course_listing_filters_and_statistics(client, admin_headers, branch_setup):
    client.post(
        "/api/courses",
        json={
            "name": "Python Basics",
            "branchId": branch_setup["branch_id"],
            "categoryId": branch_setup["category_id"],
            "price": 300,
            "status": "DRAFT",
        },
        headers=admin_headers,
    )

    cheap = client.get("/api/courses", params={"maxPrice": 150}, headers=admin_headers).json()
    assert [item["name"] for item in cheap["data"]] == ["English A1"]

    drafts = client.get("/api/courses", params={"status": "DRAFT"}, headers=admin_headers).json()
    assert [item["name"] for item in drafts["data"]] == ["Python Basics"]

    stats = client.get(
        "/api/courses/statistics", params={"branchId": branch_setup["branch_id"]}, headers=admin_headers
    ).json()
    assert stats["total"] == 2
    assert stats["byStatus"] == {"active": 1, "draft": 1, "archived": 0}
    assert stats["averagePrice"] == 200


def test_course_with_groups_cannot_be_deleted(client, admin_headers, branch_setup):
    client.post(
        "/api/groups",
        json={
            "name": "G1",
            "courseId": branch_setup["course_id"],
            "branchId": branch_setup["branch_id"],
            "days": ["MON"],
        },
        headers=admin_headers,
    )
    response = client.delete(f"/api/courses/{branch_setup['course_id']}", headers=admin_headers)
    assert response.status_code == 409
    assert response.json()["details"] == {"groups": 1}


def test_missing_course_is_not_found(client, admin_headers):
    response = client.get("/api/courses/nope", headers=admin_headers)
    assert response.status_code == 404
    assert response.json()["message"] == "Course with ID nope not found"
