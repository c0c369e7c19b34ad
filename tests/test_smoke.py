import os


def test_health_endpoint(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    data = resp.json()
    assert "status" in data
    assert data["status"] in ("healthy", "ok")
    assert data["storage_ok"] is True


def test_openapi_json(client):
    resp = client.get("/openapi.json")
    assert resp.status_code == 200
    data = resp.json()
    assert "openapi" in data
    assert "/upload" in data["paths"]
    assert "/api/album/{album_id}" in data["paths"]
    assert "/generate" in data["paths"]


def test_docs_page(client):
    resp = client.get("/docs")
    assert resp.status_code == 200
    assert "text/html" in resp.headers.get("content-type", "")


def test_metrics_disabled_by_default(client):
    resp = client.get("/metrics")
    assert resp.status_code == 200
    assert "text" in resp.headers.get("content-type", "").lower()


def test_routes_listing(client):
    resp = client.get("/ops/routes")
    assert resp.status_code == 200
    routes = resp.json()["routes"]
    paths = {r["path"] for r in routes}
    assert {"/upload", "/generate", "/health", "/ops/routes", "/api/album/{album_id}"} <= paths
    # Included routers are flattened into their leaf routes
    assert "" not in paths
    assert resp.json()["count"] == len(routes)
    upload = next(r for r in routes if r["path"] == "/upload")
    assert upload["methods"] == ["POST"]


def test_module_level_app_imports():
    from albumshare.config import settings
    from albumshare.main import app
    assert app.title == "Album Share API"
    # Directories are created on startup, not at import
    assert not os.path.exists(os.path.join(settings.STORAGE_DIR, ".staging"))
