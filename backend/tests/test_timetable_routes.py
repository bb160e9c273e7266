GRID = {
    "columnCount": 3,
    "columnDurations": {"1": 30},
    "defaultSlotDuration": 60,
    "cellContents": {
        "0-0": {"text": "Maths", "isVertical": True, "alignment": "right"},
        "0-1": {"text": "Short break", "backgroundColor": "#eee"},
    },
    "mergedCells": {"2-0": {"rowSpan": 2, "colSpan": 1}},
    "hiddenCells": ["3-0"],
}


def _create_template(client, headers, name="Week A"):
    response = client.post(
        "/api/v1/timetable/templates",
        json={"name": f"  {name}  ", "description": "Standard week", "grid": GRID},
        headers=headers,
    )
    assert response.status_code == 201
    return response.json()


def test_workspace_defaults_for_new_user(client, auth_headers):
    response = client.get("/api/v1/timetable/workspace", headers=auth_headers)
    assert response.status_code == 200
    data = response.json()
    assert data["tutors"] == []
    assert data["templates"] == []
    assert "morning devotion" in data["blockedTexts"]
    assert len(data["blockedTexts"]) == 11


def test_workspace_requires_authentication(client):
    assert client.get("/api/v1/timetable/workspace").status_code in {401, 403}


def test_workspace_put_replaces_reference_data_and_keeps_templates(client, auth_headers):
    template = _create_template(client, auth_headers)

    payload = {
        "tutors": [{"id": "t1", "name": "Mrs Bello", "maxPeriodsPerDay": 4}],
        "courses": [
            {"id": "math", "name": "Mathematics", "teacherId": "t1", "periodsPerWeek": 5, "priority": "HIGH"}
        ],
        "sessions": [{"id": "jss1", "name": "JSS 1", "subjects": ["math"]}],
        "blockedSlots": ["0-1"],
        "blockedTexts": ["break"],
        "templates": [],
    }
    response = client.put("/api/v1/timetable/workspace", json=payload, headers=auth_headers)
    assert response.status_code == 200

    stored = client.get("/api/v1/timetable/workspace", headers=auth_headers).json()
    assert stored["tutors"][0]["maxPeriodsPerDay"] == 4
    assert stored["courses"][0]["priority"] == "HIGH"
    assert stored["blockedSlots"] == ["0-1"]
    assert stored["blockedTexts"] == ["break"]
    assert [item["id"] for item in stored["templates"]] == [template["id"]]


def test_workspace_is_per_user(client, auth_headers):
    client.put("/api/v1/timetable/workspace", json={"blockedSlots": ["1-1"]}, headers=auth_headers)

    client.post(
        "/api/v1/auth/register",
        json={"username": "other", "email": "other@example.com", "password": "password123", "app_source": "timetablely"},
    )
    token = client.post(
        "/api/v1/auth/login", json={"identifier": "other", "password": "password123"}
    ).json()["access_token"]

    other = client.get("/api/v1/timetable/workspace", headers={"Authorization": f"Bearer {token}"}).json()
    assert other["blockedSlots"] == []


def test_workspace_rejects_bad_cell_keys(client, auth_headers):
    response = client.put("/api/v1/timetable/workspace", json={"blockedSlots": ["monday-1"]}, headers=auth_headers)
    assert response.status_code == 422


def test_extract_endpoint(client):
    response = client.post("/api/v1/timetable/grid/extract", json=GRID)
    assert response.status_code == 200
    data = response.json()
    assert data["count"] == 14
    assert data["entries"][0]["cellKey"] == "0-0"
    assert data["entries"][0]["customText"] == "Maths"
    assert data["entries"][1]["timeSlot"] == "9:00 AM - 9:30 AM"


def test_template_crud_and_apply(client, auth_headers):
    created = _create_template(client, auth_headers)
    assert created["name"] == "Week A"
    assert created["description"] == "Standard week"
    assert created["hiddenCellsArray"] == ["3-0"]
    assert created["mergedCellsData"] == {"2-0": {"rowSpan": 2, "colSpan": 1}}
    assert len(created["entries"]) == 14

    listed = client.get("/api/v1/timetable/templates", headers=auth_headers).json()
    assert [item["id"] for item in listed] == [created["id"]]

    fetched = client.get(f"/api/v1/timetable/templates/{created['id']}", headers=auth_headers)
    assert fetched.status_code == 200
    assert fetched.json()["name"] == "Week A"

    renamed = {key: value for key, value in created.items() if key != "id"}
    renamed["name"] = "Week A (v2)"
    updated = client.put(f"/api/v1/timetable/templates/{created['id']}", json=renamed, headers=auth_headers)
    assert updated.status_code == 200
    assert updated.json()["id"] == created["id"]
    assert updated.json()["name"] == "Week A (v2)"

    applied = client.post(f"/api/v1/timetable/templates/{created['id']}/apply", headers=auth_headers)
    assert applied.status_code == 200
    grid = applied.json()["grid"]
    assert applied.json()["templateId"] == created["id"]
    assert grid["columnCount"] == 3
    assert grid["columnDurations"] == {"1": 30}
    assert grid["mergedCells"] == {"2-0": {"rowSpan": 2, "colSpan": 1}}
    assert grid["hiddenCells"] == ["3-0"]
    assert grid["cellContents"]["0-0"]["isVertical"] is True
    assert grid["cellContents"]["0-0"]["alignment"] == "right"
    assert grid["cellContents"]["0-1"]["backgroundColor"] is None

    deleted = client.delete(f"/api/v1/timetable/templates/{created['id']}", headers=auth_headers)
    assert deleted.status_code == 204
    assert client.get("/api/v1/timetable/templates", headers=auth_headers).json() == []


def test_missing_template_returns_not_found(client, auth_headers):
    for method, url in [
        ("get", "/api/v1/timetable/templates/nope"),
        ("delete", "/api/v1/timetable/templates/nope"),
        ("post", "/api/v1/timetable/templates/nope/apply"),
    ]:
        response = getattr(client, method)(url, headers=auth_headers)
        assert response.status_code == 404
        assert response.json()["message"] == "Template with id nope not found"


def test_template_name_cannot_be_blank(client, auth_headers):
    response = client.post(
        "/api/v1/timetable/templates",
        json={"name": "   ", "grid": GRID},
        headers=auth_headers,
    )
    assert response.status_code == 422


def test_template_update_rejects_layouts_that_cannot_be_applied(client, auth_headers):
    created = _create_template(client, auth_headers)
    body = {key: value for key, value in created.items() if key != "id"}
    url = f"/api/v1/timetable/templates/{created['id']}"

    invalid_overrides = [
        {"columnCount": 60},
        {"columnDurations": {"0": 0}},
        {"hiddenCellsArray": ["monday"]},
        {"mergedCellsData": {"x": {"rowSpan": 1, "colSpan": 2}}},
    ]
    for override in invalid_overrides:
        response = client.put(url, json={**body, **override}, headers=auth_headers)
        assert response.status_code == 422, override

    applied = client.post(f"{url}/apply", headers=auth_headers)
    assert applied.status_code == 200
    assert applied.json()["grid"]["columnCount"] == 3
