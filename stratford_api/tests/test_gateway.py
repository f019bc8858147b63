import pytest

from stratford_api.config import Settings, load_settings
from stratford_api.gateway.server import create_app


def test_health(client):
    response = client.get("/api/health")

    assert response.status_code == 200
    body = response.get_json()
    assert body["status"] == "OK"
    assert body["environment"] == "development"
    assert body["version"] == "1.0.0"
    assert "timestamp" in body


def test_unknown_route(client):
    response = client.get("/api/nowhere")
    assert response.status_code == 404
    assert response.get_json() == {"success": False, "error": "Route not found"}


def test_method_not_allowed_uses_envelope(client):
    response = client.patch("/api/health")
    assert response.status_code == 405
    assert response.get_json()["success"] is False


def test_cors_headers(client):
    response = client.get("/api/health", headers={"Origin": "http://localhost:3000"})
    assert response.headers["Access-Control-Allow-Origin"] == "http://localhost:3000"


def test_missing_secret_is_fatal(monkeypatch):
    monkeypatch.setattr("stratford_api.config.load_dotenv", lambda: None)
    monkeypatch.delenv("JWT_SECRET", raising=False)

    with pytest.raises(RuntimeError, match="JWT_SECRET"):
        load_settings()
    with pytest.raises(RuntimeError):
        create_app()


def test_load_settings_from_environment(monkeypatch):
    monkeypatch.setattr("stratford_api.config.load_dotenv", lambda: None)
    monkeypatch.setenv("JWT_SECRET", "from-env")
    monkeypatch.setenv("TOKEN_EXPIRATION_MINUTES", "60")
    monkeypatch.setenv("DATABASE_URL", "sqlite://")
    monkeypatch.setenv("PORT", "8080")

    settings = load_settings()

    assert settings.jwt_secret == "from-env"
    assert settings.token_expiration_minutes == 60
    assert settings.database_url == "sqlite://"
    assert settings.port == 8080


def test_requests_are_rate_limited_per_client(db):
    settings = Settings(jwt_secret="test_secret", database_url="sqlite://")
    client = create_app(settings=settings, database=db).test_client()

    for _ in range(100):
        assert client.get("/api/health").status_code == 200

    response = client.get("/api/health")
    assert response.status_code == 429
    assert response.get_json() == {
        "success": False,
        "error": "Too many requests from this IP, please try again later.",
    }


def test_rate_limit_is_configurable(db):
    settings = Settings(
        jwt_secret="test_secret", database_url="sqlite://", rate_limit="2 per minute"
    )
    client = create_app(settings=settings, database=db).test_client()

    assert client.get("/api/events").status_code == 200
    assert client.get("/api/events").status_code == 200
    assert client.get("/api/events").status_code == 429

