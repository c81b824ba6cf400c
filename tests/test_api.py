"""
Tests for the catalog, engagement, admin and automation API routes.
"""

import pytest
from fastapi.testclient import TestClient

import src.cron
from src.curator.discovery import DiscoveryResult
from src.database import EmptyCatalog
from src.errors import SearchError
from web.api import deps
from web.api.main import app

CRON_HEADERS = {"Authorization": "Bearer cron-secret"}


@pytest.fixture
def empty_client():
    """Client with the store disabled."""
    app.dependency_overrides[deps.get_db] = lambda: EmptyCatalog()
    app.dependency_overrides[deps.get_config] = lambda: {"database": {"enabled": False}}
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def user_headers(client, admin_headers):
    """Authorization header for a second, non-admin user."""
    client.post("/api/auth/register", json={
        "username": "visitor",
        "email": "visitor@example.com",
        "password": "password123",
    })
    response = client.post("/api/auth/login", json={"username": "visitor", "password": "password123"})
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


class TestHealth:
    """Tests for the health endpoint."""

    def test_health(self, client):
        """Test the service reports ok."""
        assert client.get("/api/health").json()["status"] == "ok"


class TestCatalogReads:
    """Tests for public tool, category and sponsor reads."""

    def test_list_tools_approved_only(self, client, temp_db, approved_tool, category_id):
        """Test pending tools are hidden from listings."""
        temp_db.add_tool("Pending", "pending", "t", "l", category_id)

        slugs = [t["slug"] for t in client.get("/api/tools").json()]
        assert slugs == ["example"]

    def test_highlight_lists(self, client, temp_db, category_id):
        """Test trending, fastest-rising and new orderings."""
        temp_db.add_tool("Popular", "popular", "t", "l", category_id, status="approved", upvotes=50)
        temp_db.add_tool("Rising", "rising", "t", "l", category_id, status="approved", trend_percentage=90)

        assert client.get("/api/tools/trending").json()[0]["slug"] == "popular"
        assert client.get("/api/tools/fastest-rising").json()[0]["slug"] == "rising"
        assert client.get("/api/tools/new").json()[0]["slug"] == "rising"

    def test_tools_by_category(self, client, approved_tool, category_id):
        """Test filtering by category."""
        assert len(client.get(f"/api/tools/category/{category_id}").json()) == 1
        assert client.get(f"/api/tools/category/{category_id + 1}").json() == []

    def test_tool_detail(self, client, temp_db, approved_tool):
        """Test detail includes category, features, tags and similar tools."""
        temp_db.set_tool_features(approved_tool["id"], ["Autocomplete"])
        temp_db.set_tool_tags(approved_tool["id"], ["ai"])

        data = client.get("/api/tools/example").json()

        assert data["category"]["name"] == "Coding AI"
        assert data["features"] == ["Autocomplete"]
        assert data["tags"] == ["ai"]
        assert data["similar_tools"] == []

    def test_tool_detail_not_found(self, client, temp_db, category_id):
        """Test unknown and unapproved slugs are 404."""
        temp_db.add_tool("Pending", "pending", "t", "l", category_id)

        assert client.get("/api/tools/nope").status_code == 404
        assert client.get("/api/tools/pending").status_code == 404

    def test_tool_analytics(self, client, temp_db, approved_tool):
        """Test daily views for the last week."""
        temp_db.record_view(approved_tool["id"])

        data = client.get("/api/tools/example/analytics").json()
        assert data[0]["views"] == 1

    def test_categories(self, client, approved_tool):
        """Test categories carry their approved tool count."""
        data = client.get("/api/categories").json()
        assert data[0]["tool_count"] == 1

    def test_sponsors(self, client, temp_db):
        """Test active sponsors are listed."""
        temp_db.add_sponsor("Acme", "l", "d", "https://acme.ai", "premium")
        assert client.get("/api/sponsors").json()[0]["name"] == "Acme"

    def test_search(self, client, temp_db, approved_tool, category_id):
        """Test text and category search."""
        temp_db.add_tool("Painter", "painter", "Make images", "l", category_id, status="approved")

        assert [t["slug"] for t in client.get("/api/search", params={"q": "code"}).json()] == ["example"]
        assert len(client.get("/api/search", params={"category": category_id}).json()) == 2


class TestDisabledStore:
    """Tests for the API without a configured store."""

    @pytest.mark.parametrize("path", [
        "/api/tools",
        "/api/tools/trending",
        "/api/categories",
        "/api/sponsors",
        "/api/search?q=x",
        "/api/automation-logs",
        "/api/discovered-tools",
    ])
    def test_collections_are_empty(self, empty_client, path):
        """Test collection reads return empty lists."""
        response = empty_client.get(path)

        assert response.status_code == 200
        assert response.json() == []

    def test_detail_not_found(self, empty_client):
        """Test single-tool reads are 404."""
        assert empty_client.get("/api/tools/example").status_code == 404

    def test_writes_unavailable(self, empty_client):
        """Test writes report the store as unavailable."""
        response = empty_client.post("/api/upvotes", json={"tool_id": 1})
        assert response.status_code == 503

    def test_setup_status(self, empty_client):
        """Test setup is not requested without a store."""
        assert empty_client.get("/api/auth/setup-status").json() == {"needs_setup": False, "user_count": 0}


class TestEngagement:
    """Tests for upvotes and analytics events."""

    def test_upvote_once_per_ip(self, client, temp_db, approved_tool):
        """Test a second anonymous upvote from the same IP is rejected."""
        body = {"tool_id": approved_tool["id"], "ip_address": "1.2.3.4"}

        assert client.post("/api/upvotes", json=body).json() == {"success": True}
        second = client.post("/api/upvotes", json=body)

        assert second.status_code == 400
        assert second.json()["detail"] == "Already upvoted"
        assert temp_db.get_tool(approved_tool["id"])["upvotes"] == 1

    def test_upvote_per_user(self, client, temp_db, approved_tool, user_headers):
        """Test authenticated upvotes are tracked by user, not IP."""
        body = {"tool_id": approved_tool["id"], "ip_address": "1.2.3.4"}

        assert client.post("/api/upvotes", json=body).status_code == 200
        assert client.post("/api/upvotes", json=body, headers=user_headers).status_code == 200
        assert client.post("/api/upvotes", json=body, headers=user_headers).status_code == 400

    def test_upvote_unknown_tool(self, client):
        """Test upvoting a missing tool is 404."""
        assert client.post("/api/upvotes", json={"tool_id": 999}).status_code == 404

    def test_track_view_and_click(self, client, temp_db, approved_tool):
        """Test views bump counters and clicks are logged."""
        tool_id = approved_tool["id"]

        assert client.post("/api/analytics/view", json={"tool_id": tool_id}).status_code == 200
        assert client.post("/api/analytics/click", json={"tool_id": tool_id, "referrer": "https://news.ai"}).status_code == 200

        assert temp_db.get_tool(tool_id)["views"] == 1
        assert temp_db.count_events(tool_id, "click", 1) == 1


class TestBadge:
    """Tests for the embeddable badge."""

    def test_badge(self, client, approved_tool):
        """Test the badge links to the tool page and shows upvotes."""
        response = client.get("/api/badge/example")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/html")
        assert 'href="https://aitrends.example/tools/example"' in response.text
        assert "⬆ 0 upvotes on AITRENDSDATA" in response.text

    def test_badge_escapes_name(self, client, temp_db, category_id):
        """Test tool names are HTML-escaped."""
        temp_db.add_tool("<b>X</b>", "x", "t", "l", category_id, status="approved")
        assert "&lt;b&gt;X&lt;/b&gt;" in client.get("/api/badge/x").text

    def test_badge_not_found(self, client):
        """Test unknown slugs are 404."""
        assert client.get("/api/badge/nope").status_code == 404


class TestSubmissions:
    """Tests for submissions and their review."""

    def submit(self, client, category_id, name="Example"):
        return client.post("/api/submissions", json={
            "name": name,
            "tagline": "An example AI tool",
            "logo": "https://example.ai/logo.png",
            "category_id": category_id,
            "submitter_email": "maker@example.ai",
            "website": "https://example.ai",
            "pricing": {"model": "free"},
        })

    def test_submit(self, client, category_id):
        """Test a submission is stored pending."""
        response = self.submit(client, category_id)

        assert response.status_code == 200
        assert response.json()["status"] == "pending"

    def test_submit_validation(self, client, category_id):
        """Test missing fields and unknown categories are rejected."""
        assert client.post("/api/submissions", json={"name": "X"}).status_code == 422
        assert self.submit(client, category_id + 100).status_code == 400

    def test_list_requires_admin(self, client, category_id, user_headers):
        """Test only admins can list submissions."""
        self.submit(client, category_id)

        assert client.get("/api/submissions").status_code == 401
        assert client.get("/api/submissions", headers=user_headers).status_code == 403

    def test_approve_creates_tool(self, client, temp_db, category_id, admin_headers):
        """Test approval promotes the submission to an approved tool."""
        submission_id = self.submit(client, category_id).json()["id"]

        response = client.patch(f"/api/submissions/{submission_id}/approve", headers=admin_headers)

        assert response.status_code == 200
        tool = response.json()
        assert tool["slug"] == "example"
        assert tool["status"] == "approved"
        assert tool["pricing"] == {"model": "free"}
        assert temp_db.get_submission(submission_id)["status"] == "approved"
        assert client.get("/api/submissions", params={"status": "pending"}, headers=admin_headers).json() == []

    def test_approve_slug_clash(self, client, approved_tool, category_id, admin_headers):
        """Test approving a name whose slug is taken fails."""
        submission_id = self.submit(client, category_id).json()["id"]

        response = client.patch(f"/api/submissions/{submission_id}/approve", headers=admin_headers)

        assert response.status_code == 400
        assert "already exists" in response.json()["detail"]

    def test_reject(self, client, category_id, admin_headers):
        """Test rejection and double review."""
        submission_id = self.submit(client, category_id).json()["id"]

        response = client.patch(f"/api/submissions/{submission_id}/reject", headers=admin_headers)
        assert response.json()["status"] == "rejected"

        again = client.patch(f"/api/submissions/{submission_id}/approve", headers=admin_headers)
        assert again.status_code == 400

    def test_reject_after_approve(self, client, temp_db, category_id, admin_headers):
        """Test an approved submission cannot be rejected and its tool stays approved."""
        submission_id = self.submit(client, category_id).json()["id"]
        client.patch(f"/api/submissions/{submission_id}/approve", headers=admin_headers)

        response = client.patch(f"/api/submissions/{submission_id}/reject", headers=admin_headers)

        assert response.status_code == 400
        assert temp_db.get_submission(submission_id)["status"] == "approved"
        assert temp_db.get_tool_by_slug("example")["status"] == "approved"

    def test_approve_name_without_slug(self, client, temp_db, category_id, admin_headers):
        """Test a name with no letters or digits cannot be promoted."""
        submission_id = self.submit(client, category_id, name="!!!").json()["id"]

        response = client.patch(f"/api/submissions/{submission_id}/approve", headers=admin_headers)

        assert response.status_code == 400
        assert temp_db.get_tool_by_slug("") is None
        assert temp_db.get_submission(submission_id)["status"] == "pending"

    def test_review_missing(self, client, admin_headers):
        """Test reviewing an unknown submission is 404."""
        assert client.patch("/api/submissions/999/reject", headers=admin_headers).status_code == 404


class TestAdmin:
    """Tests for admin catalog management."""

    def test_requires_admin(self, client, user_headers):
        """Test anonymous and non-admin users are refused."""
        assert client.get("/api/admin/tools").status_code == 401
        assert client.get("/api/admin/tools", headers=user_headers).status_code == 403

    def test_tool_crud(self, client, temp_db, category_id, admin_headers):
        """Test create, update and delete of a tool."""
        created = client.post("/api/admin/tools", headers=admin_headers, json={
            "name": "New Tool",
            "tagline": "Does things",
            "logo": "https://new.ai/logo.png",
            "category_id": category_id,
            "features": ["One", "Two"],
        })
        assert created.status_code == 201
        tool_id = created.json()["id"]
        assert created.json()["slug"] == "new-tool"
        assert temp_db.get_tool_features(tool_id) == ["One", "Two"]

        updated = client.put(f"/api/admin/tools/{tool_id}", headers=admin_headers,
                             json={"tagline": "Does more", "tags": ["ai"]})
        assert updated.json()["tagline"] == "Does more"
        assert updated.json()["name"] == "New Tool"
        assert temp_db.get_tool_tags(tool_id) == ["ai"]

        assert client.delete(f"/api/admin/tools/{tool_id}", headers=admin_headers).status_code == 200
        assert temp_db.get_tool(tool_id) is None
        assert client.delete(f"/api/admin/tools/{tool_id}", headers=admin_headers).status_code == 404

    def test_tool_validation(self, client, approved_tool, category_id, admin_headers):
        """Test bad status, unknown category and duplicate slug."""
        base = {"name": "X", "tagline": "t", "logo": "l", "category_id": category_id}

        assert client.post("/api/admin/tools", headers=admin_headers,
                           json={**base, "status": "bogus"}).status_code == 400
        assert client.post("/api/admin/tools", headers=admin_headers,
                           json={**base, "category_id": 999}).status_code == 400
        assert client.post("/api/admin/tools", headers=admin_headers,
                           json={**base, "slug": "example"}).status_code == 400

    def test_empty_slug_rejected(self, client, temp_db, category_id, admin_headers):
        """Test tools and categories need a non-empty slug."""
        base = {"tagline": "t", "logo": "l", "category_id": category_id}

        assert client.post("/api/admin/tools", headers=admin_headers,
                           json={**base, "name": "???"}).status_code == 400
        assert temp_db.get_tool_by_slug("") is None

        tool_id = client.post("/api/admin/tools", headers=admin_headers,
                              json={**base, "name": "Valid"}).json()["id"]
        assert client.put(f"/api/admin/tools/{tool_id}", headers=admin_headers,
                          json={"slug": ""}).status_code == 400
        assert temp_db.get_tool(tool_id)["slug"] == "valid"

        assert client.post("/api/admin/categories", headers=admin_headers,
                           json={"name": "***"}).status_code == 400

    def test_list_all_statuses(self, client, temp_db, approved_tool, category_id, admin_headers):
        """Test the admin list includes pending tools."""
        temp_db.add_tool("Pending", "pending", "t", "l", category_id)

        assert len(client.get("/api/admin/tools", headers=admin_headers).json()) == 2
        pending = client.get("/api/admin/tools", params={"status": "pending"}, headers=admin_headers).json()
        assert [t["slug"] for t in pending] == ["pending"]

    def test_category_crud(self, client, admin_headers):
        """Test create, update and delete of a category."""
        created = client.post("/api/admin/categories", headers=admin_headers, json={"name": "Music AI"})
        assert created.status_code == 201
        category = created.json()
        assert category["slug"] == "music-ai"
        assert category["icon"] == "Box"

        updated = client.put(f"/api/admin/categories/{category['id']}", headers=admin_headers,
                             json={"icon": "Music"})
        assert updated.json()["icon"] == "Music"

        assert client.post("/api/admin/categories", headers=admin_headers,
                           json={"name": "Music AI"}).status_code == 400
        assert client.delete(f"/api/admin/categories/{category['id']}", headers=admin_headers).status_code == 200
        assert client.delete(f"/api/admin/categories/{category['id']}", headers=admin_headers).status_code == 404

    def test_delete_category_with_tools(self, client, approved_tool, category_id, admin_headers):
        """Test categories that still hold tools cannot be deleted."""
        response = client.delete(f"/api/admin/categories/{category_id}", headers=admin_headers)
        assert response.status_code == 400


class TestAutomation:
    """Tests for the cron trigger and automation feeds."""

    def test_cron_requires_secret(self, client):
        """Test missing or wrong secrets are 401."""
        assert client.post("/api/cron/discover-tools").status_code == 401
        assert client.post("/api/cron/discover-tools",
                           headers={"Authorization": "Bearer wrong"}).status_code == 401
        assert client.post("/api/cron/discover-tools",
                           headers={"Authorization": "cron-secret"}).status_code == 401

    def test_cron_runs_job(self, client, monkeypatch):
        """Test a valid secret runs the job and returns its counters."""
        monkeypatch.setitem(
            src.cron.CRON_JOBS, "discover-tools",
            lambda db, config: DiscoveryResult(tools_queued=2, tools_created=1, status="success", log_id=7),
        )

        response = client.post("/api/cron/discover-tools", headers=CRON_HEADERS)

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["result"]["tools_queued"] == 2
        assert data["result"]["log_id"] == 7

    def test_cron_unknown_job(self, client):
        """Test unknown job types are 404."""
        assert client.post("/api/cron/nope", headers=CRON_HEADERS).status_code == 404

    def test_cron_job_error(self, client, monkeypatch):
        """Test pipeline errors are reported as 500."""
        def failing(db, config):
            raise SearchError("search offline")

        monkeypatch.setitem(src.cron.CRON_JOBS, "update-metrics", failing)

        response = client.post("/api/cron/update-metrics", headers=CRON_HEADERS)

        assert response.status_code == 500
        assert response.json()["detail"] == "search offline"

    def test_cron_without_configured_secret(self, temp_db):
        """Test the trigger is closed when no secret is configured."""
        app.dependency_overrides[deps.get_db] = lambda: temp_db
        app.dependency_overrides[deps.get_config] = lambda: {"cron": {"secret": None}}
        try:
            response = TestClient(app).post("/api/cron/discover-tools", headers={"Authorization": "Bearer x"})
        finally:
            app.dependency_overrides.clear()

        assert response.status_code == 401

    def test_automation_logs(self, client, temp_db):
        """Test the logs feed with a type filter."""
        temp_db.create_automation_log("discovery")
        temp_db.create_automation_log("tool-refresh")

        assert len(client.get("/api/automation-logs").json()) == 2
        logs = client.get("/api/automation-logs", params={"type": "discovery"}).json()
        assert [log["type"] for log in logs] == ["discovery"]

    def test_discovered_tools(self, client, temp_db):
        """Test the discovery queue feed."""
        temp_db.add_discovered_url("https://a.ai", "jina-search")
        failed = temp_db.add_discovered_url("https://b.ai", "jina-search")
        temp_db.mark_discovered_failed(failed, "boom")

        assert len(client.get("/api/discovered-tools").json()) == 2
        rows = client.get("/api/discovered-tools", params={"status": "failed"}).json()
        assert [row["url"] for row in rows] == ["https://b.ai"]
