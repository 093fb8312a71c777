"""
Test the main FastAPI application.
"""
from app.main import create_app


def test_root_endpoint(client):
    """Test the root endpoint."""
    response = client.get("/")
    assert response.status_code == 200
    data = response.json()
    assert data["message"] == "Content Studio API"
    assert data["version"] == "1.0.0"


def test_health_check(client):
    """Test the basic health check endpoint."""
    response = client.get("/health/")
    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["data"]["status"] == "healthy"
    assert "timestamp" in data["data"]
    assert data["data"]["version"] == "1.0.0"


def test_detailed_health_check_reports_integrations(client):
    """Integrations without credentials are reported as not configured."""
    response = client.get("/health/detailed")
    assert response.status_code == 200
    services = response.json()["data"]["services"]
    assert services["database"]["status"] == "healthy"
    assert services["rate_limiter"]["backend"] == "memory"
    assert services["external_apis"]["openai"] is False
    assert services["external_apis"]["pixabay"] is False


def test_detailed_health_check_unhealthy_database(client, supabase):
    supabase.set_table("content_packages", error=Exception("connection refused"))

    response = client.get("/health/detailed")
    assert response.status_code == 503
    data = response.json()
    assert data["success"] is False
    assert data["code"] == "service_unavailable"


def test_liveness_and_readiness(client):
    assert client.get("/health/liveness").json()["status"] == "alive"
    assert client.get("/health/readiness").json()["status"] == "ready"


def test_api_v1_info(client):
    """Test the API v1 info endpoint."""
    response = client.get("/v1/")
    assert response.status_code == 200
    data = response.json()
    assert data["message"] == "Content Studio API v1"
    assert data["version"] == "1.0.0"
    assert data["endpoints"]["content_package"] == "/v1/content-package"


def test_unknown_route_uses_error_envelope(client):
    response = client.get("/v1/does-not-exist")
    assert response.status_code == 404
    assert response.json() == {"success": False, "error": "Not Found", "code": "not_found"}


def test_request_id_header(client):
    response = client.get("/", headers={"X-Request-ID": "req-123"})
    assert response.headers["X-Request-ID"] == "req-123"
    assert "X-Process-Time" in response.headers


def test_create_app_mounts_every_router():
    paths = {route.path for route in create_app().routes}
    assert {"/", "/health/", "/v1/", "/v1/content-package", "/v1/posts", "/v1/media-files"} <= paths
    assert "/v1/posts/{post_id}/status" in paths
