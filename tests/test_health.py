def test_health_endpoint(client):
    """Test health endpoint"""
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"
    assert response.json()["database"] is True


def test_unknown_record_uses_error_envelope(client):
    response = client.get("/api/v1/ingredients/999")

    assert response.status_code == 404
    body = response.json()
    assert body["success"] is False
    assert body["error"]["code"] == "http_error"
    assert body["request_id"]
