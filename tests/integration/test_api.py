"""Integration tests for API endpoints."""
import httpx
import pytest
from httpx import AsyncClient, ASGITransport

from app.main import app
from app.api.v1.endpoints.audit import get_audit_runner
from app.services.audit_runner import AuditRunner
from app.services.collectors.manifest_collector import ManifestCollector
from app.services.page_fetcher import PageFetcher


@pytest.fixture
def site(sample_html, valid_manifest_json):
    routes = {
        "https://example.com/": sample_html,
        "https://example.com/manifest.json": valid_manifest_json,
    }

    def handler(request):
        body = routes.get(str(request.url))
        if body is None:
            return httpx.Response(404)
        return httpx.Response(200, text=body)

    transport = httpx.MockTransport(handler)
    app.dependency_overrides[get_audit_runner] = lambda: AuditRunner(
        page_fetcher=PageFetcher(transport=transport, check_ssrf=False),
        manifest_collector=ManifestCollector(transport=transport, check_ssrf=False),
    )
    yield routes
    app.dependency_overrides.clear()


@pytest.fixture
async def client():
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.mark.asyncio
async def test_health_check(client):
    response = await client.get("/api/v1/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


@pytest.mark.asyncio
async def test_root(client):
    response = await client.get("/")
    assert response.status_code == 200
    assert response.json()["docs"] == "/docs"


@pytest.mark.asyncio
async def test_audit_job(client, site):
    response = await client.post("/api/v1/audit", json={"url": "https://example.com/"})
    assert response.status_code == 200
    job_id = response.json()["job_id"]

    # Background tasks finish before the ASGI call returns
    response = await client.get(f"/api/v1/audit/{job_id}")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "completed"
    assert data["report"]["rawValue"] is True
    assert data["report"]["details"]["items"][0]["hasShortName"] is True


@pytest.mark.asyncio
async def test_audit_job_page_error(client, site):
    site.clear()
    response = await client.post("/api/v1/audit", json={"url": "https://example.com/"})
    job_id = response.json()["job_id"]

    data = (await client.get(f"/api/v1/audit/{job_id}")).json()
    assert data["status"] == "failed"
    assert data["error"] == "HTTP 404"
    assert data["report"] is None


@pytest.mark.asyncio
async def test_unknown_job(client):
    response = await client.get("/api/v1/audit/does-not-exist")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_audit_manifest_body(client):
    response = await client.post("/api/v1/audit/manifest", json={
        "manifest": "not json",
        "manifest_url": "https://example.com/manifest.json",
        "document_url": "https://example.com/",
    })
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "completed"
    assert data["title"] == "Web app manifest does not meet the installability requirements"
    assert data["report"] == {
        "rawValue": False,
        "explanation": "Failures: Manifest failed to parse as valid JSON.",
        "details": {"items": [{"failures": ["Manifest failed to parse as valid JSON"]}]},
    }


@pytest.mark.asyncio
async def test_audit_manifest_malformed_icon_src(client):
    response = await client.post("/api/v1/audit/manifest", json={
        "manifest": '{"name": "A", "icons": [{"src": "http://[bad/icon.png"}]}',
        "manifest_url": "https://example.com/manifest.json",
        "document_url": "https://example.com/",
    })
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "completed"
    assert data["report"]["rawValue"] is False
    assert data["report"]["details"]["items"][0]["hasName"] is True
