def test_health_endpoints(client):
    check = client.get("/api/v1/health-check")
    assert check.status_code == 200
    assert check.json() == {"status": 200, "success": True, "message": "geosoft service is up and running..."}

    ready = client.get("/api/v1/health/ready")
    assert ready.status_code in {200, 503}
    payload = ready.json()
    assert "database" in payload
    assert payload["integrations"]["gemini_configured"] is True


def test_security_headers_and_size_limit(client):
    response = client.get("/api/v1/health-check")
    assert response.headers["X-Content-Type-Options"] == "nosniff"

    oversized = client.post(
        "/api/v1/analytics/visit",
        content=b"x" * 2_600_000,
        headers={"Content-Type": "application/json"},
    )
    assert oversized.status_code == 413


def test_app_errors_render_message_and_details(client):
    response = client.post(
        "/api/v1/timetable/grid/merge",
        json={"selectedCells": ["0-0", "0-1"], "grid": {"columnCount": 2, "hiddenCells": ["0-1"]}},
    )
    assert response.status_code == 400
    assert set(response.json()) == {"message", "details"}
