def test_health_is_open_and_unwrapped(client):
    response = client.get("/health")
    assert response.json() == {"status": "healthy"}
    assert "Content-Security-Policy" not in response.headers


def test_api_responses_carry_security_headers(client):
    response = client.get("/")

    assert response.status_code == 200
    assert response.headers["X-Frame-Options"] == "DENY"
    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["Content-Security-Policy"].startswith("default-src 'none'")
    assert response.headers["Cache-Control"] == "no-store"
    assert "Strict-Transport-Security" not in response.headers


def test_validation_errors_are_422_with_detail(client):
    response = client.post("/auth/login", json={"email": "someone@example.com"})
    assert response.status_code == 422
    assert response.json()["detail"][0]["loc"][-1] == "password"
