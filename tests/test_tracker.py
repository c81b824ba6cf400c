"""
Tests for the metrics updater, scoring functions and tool refresher.
"""

import httpx
import pytest

from conftest import FakeScraper, StubProvider, make_jina_client
from src.analyzers.base import ClassifiedTool
from src.analyzers.classifier import ToolClassifier
from src.scraper.scraper import ScrapedTool
from src.throttle import Throttle, no_sleep
from src.tracker.metrics import (
    GitHubClient,
    MetricsUpdater,
    find_serp_position,
    parse_github_repo,
    run_metrics_update,
)
from src.tracker.refresher import ToolRefresher, diff_tool, run_refresh
from src.tracker.scoring import (
    ViewCounts,
    clamp_score,
    popularity_score,
    traffic_score,
    trend_score,
)


def github_client(stars=None, status_code=200):
    """GitHubClient backed by a mock transport."""
    def handler(request):
        if status_code != 200:
            return httpx.Response(status_code)
        return httpx.Response(200, json={"stargazers_count": stars})

    return GitHubClient(token="gh-token", client=httpx.Client(transport=httpx.MockTransport(handler)))


def keyword_classifier():
    return ToolClassifier([StubProvider(name="claude", error="not configured")])


class TestScoring:
    """Tests for the pure scoring functions."""

    def test_clamp(self):
        """Test values are floored and clamped."""
        assert clamp_score(-3) == 0
        assert clamp_score(42.9) == 42
        assert clamp_score(250) == 100

    def test_traffic_score(self):
        """Test the weighted view formula."""
        assert traffic_score(ViewCounts()) == 0
        # 2*10 + 10*2 + 40*0.5 = 60 -> 6
        assert traffic_score(ViewCounts(daily=2, weekly=10, monthly=40)) == 6
        assert traffic_score(ViewCounts(daily=1000)) == 100

    def test_trend_neutral_without_history(self):
        """Test no previous snapshot gives 50."""
        assert trend_score(10, None) == 50

    def test_trend_doubling(self):
        """Test doubling weekly views gives 75."""
        assert trend_score(20, 10) == 75

    def test_trend_flat_and_drop(self):
        """Test unchanged views stay at 50 and a full drop loses 25."""
        assert trend_score(10, 10) == 50
        assert trend_score(0, 10) == 25

    def test_trend_capped(self):
        """Test growth beyond 200% is capped at 100."""
        assert trend_score(1000, 10) == 100

    def test_trend_zero_previous(self):
        """Test a zero previous count is treated as one."""
        assert trend_score(3, 0) == 100
        assert trend_score(0, 0) == 25

    def test_popularity_score(self):
        """Test the weighted popularity formula."""
        # 100*0.3 + 10*2 + 500*0.1 + 40*0.5 + 50*0.3 = 135 -> 27
        assert popularity_score(views=100, upvotes=10, github_stars=500, traffic=40, trend=50) == 27
        assert popularity_score(views=10**6, upvotes=0, github_stars=0, traffic=0, trend=0) == 100


class TestGitHubClient:
    """Tests for GitHub star lookups."""

    def test_parse_repo(self):
        """Test owner and repo are parsed from different URL shapes."""
        assert parse_github_repo("https://github.com/example/example") == ("example", "example")
        assert parse_github_repo("https://github.com/a/b.git") == ("a", "b")
        assert parse_github_repo("https://github.com/a/b/tree/main") == ("a", "b")
        assert parse_github_repo("https://github.com/onlyowner") is None
        assert parse_github_repo(None) is None

    def test_get_stars(self):
        """Test the star count is read with the token sent."""
        seen = {}

        def handler(request):
            seen["url"] = str(request.url)
            seen["auth"] = request.headers.get("authorization")
            return httpx.Response(200, json={"stargazers_count": 1234})

        client = GitHubClient(token="gh-token", client=httpx.Client(transport=httpx.MockTransport(handler)))

        assert client.get_stars("https://github.com/example/example") == 1234
        assert seen["url"] == "https://api.github.com/repos/example/example"
        assert seen["auth"] == "token gh-token"

    def test_errors_count_as_zero(self):
        """Test API errors and bad URLs give 0 stars."""
        assert github_client(status_code=404).get_stars("https://github.com/a/b") == 0
        assert github_client(stars=None).get_stars("https://github.com/a/b") == 0
        assert github_client(stars=5).get_stars("https://example.ai") == 0

    @pytest.mark.parametrize("payload", [[], None, "starred"])
    def test_non_object_payload_counts_as_zero(self, payload):
        """Test a JSON body that is not an object gives 0 stars."""
        client = GitHubClient(client=httpx.Client(transport=httpx.MockTransport(
            lambda request: httpx.Response(200, json=payload)
        )))

        assert client.get_stars("https://github.com/a/b") == 0


class TestSerpPosition:
    """Tests for find_serp_position."""

    def test_position_is_one_indexed(self):
        """Test the rank of the tool's hostname."""
        client = make_jina_client(lambda request: httpx.Response(200, json={"data": [
            {"url": "https://review.site/example"},
            {"url": "https://www.example.ai/"},
        ]}))
        assert find_serp_position(client, "Example", "https://example.ai") == 2

    def test_not_found(self):
        """Test no matching result gives None."""
        client = make_jina_client(lambda request: httpx.Response(200, json={"data": [{"url": "https://other.ai"}]}))
        assert find_serp_position(client, "Example", "https://example.ai") is None

    def test_search_error(self):
        """Test search failures give None."""
        client = make_jina_client(lambda request: httpx.Response(500))
        assert find_serp_position(client, "Example", "https://example.ai") is None

    def test_no_website(self):
        """Test tools without a website are not searched."""
        assert find_serp_position(None, "Example", None) is None


class TestMetricsUpdater:
    """Tests for MetricsUpdater and run_metrics_update."""

    def test_first_snapshot(self, temp_db, approved_tool):
        """Test the first snapshot has a neutral trend and copies fields onto the tool."""
        for _ in range(3):
            temp_db.record_view(approved_tool["id"])

        updater = MetricsUpdater(temp_db, github_client(stars=10), check_serp=False)
        metrics = updater.update_tool(temp_db.get_tool(approved_tool["id"]))

        assert metrics.views == ViewCounts(daily=3, weekly=3, monthly=3)
        assert metrics.trend_score == 50
        assert metrics.serp_position is None

        snapshot = temp_db.get_latest_tool_metrics(approved_tool["id"])
        assert snapshot["weekly_views"] == 3
        assert snapshot["trend_score"] == 50

        tool = temp_db.get_tool(approved_tool["id"])
        assert tool["trend_percentage"] == 50
        assert tool["views_week"] == 3

    def test_trend_against_previous_snapshot(self, temp_db, approved_tool):
        """Test doubling weekly views since the last snapshot gives 75."""
        tool_id = approved_tool["id"]
        temp_db.add_tool_metrics(tool_id, 0, 2, 2, 0, 0, 50, 0)
        for _ in range(4):
            temp_db.add_analytics_event(tool_id, "view")

        metrics = MetricsUpdater(temp_db, github_client(stars=0)).update_tool(temp_db.get_tool(tool_id))

        assert metrics.trend_score == 75

    def test_github_stars_used(self, temp_db, approved_tool):
        """Test stars are fetched only for tools with a github link."""
        temp_db.update_tool(approved_tool["id"], {"github": "https://github.com/example/example"})
        updater = MetricsUpdater(temp_db, github_client(stars=321))

        metrics = updater.update_tool(temp_db.get_tool(approved_tool["id"]))

        assert metrics.github_stars == 321

    def test_run_records_log(self, temp_db, approved_tool):
        """Test a run updates every approved tool and logs success."""
        search = make_jina_client(lambda request: httpx.Response(200, json={"data": [{"url": "https://example.ai"}]}))

        result = run_metrics_update(
            temp_db, {}, github=github_client(stars=1), search_client=search,
            throttle=Throttle(0, sleep=no_sleep),
        )

        assert result.tools_updated == 1
        assert result.status == "success"
        assert temp_db.get_latest_tool_metrics(approved_tool["id"])["serp_position"] == 1
        log = temp_db.get_automation_log(result.log_id)
        assert log["type"] == "metrics-update"
        assert log["metadata"]["tools_updated"] == 1

    def test_run_isolates_failures(self, temp_db, approved_tool, category_id):
        """Test one failing tool marks the run partial."""
        temp_db.add_tool("Other", "other", "t", "l", category_id, status="approved")

        class FlakyGitHub:
            def get_stars(self, url):
                raise RuntimeError("rate limited")

        temp_db.update_tool(approved_tool["id"], {"github": "https://github.com/example/example"})

        result = run_metrics_update(
            temp_db, {"metrics": {"check_serp": False}}, github=FlakyGitHub(),
            throttle=Throttle(0, sleep=no_sleep),
        )

        assert result.tools_updated == 1
        assert result.tools_failed == 1
        assert result.status == "partial"
        assert "Example" in result.errors[0]


class TestRefresher:
    """Tests for ToolRefresher and run_refresh."""

    def test_diff_tool(self):
        """Test only non-empty, changed values are returned."""
        tool = {
            "tagline": "Old",
            "description": "Same",
            "logo": "https://x.ai/logo.png",
            "pricing": {"plans": [], "model": "free"},
            "screenshots": None,
            "twitter": None,
            "github": "https://github.com/x/x",
        }
        classified = ClassifiedTool(
            name="X", tagline="New", description="Same", website="https://x.ai",
            pricing={"model": "free", "plans": []}, logo="https://x.ai/logo.png",
            screenshots=[], twitter=None, github="https://github.com/x/x",
        )

        assert diff_tool(tool, classified) == {"tagline": "New"}

    def test_refresh_tool_without_website(self, temp_db, category_id):
        """Test tools without a website cannot be refreshed."""
        tool_id = temp_db.add_tool("Nowhere", "nowhere", "t", "l", category_id, status="approved")
        refresher = ToolRefresher(temp_db, FakeScraper({}), keyword_classifier())

        with pytest.raises(ValueError):
            refresher.refresh_tool(temp_db.get_tool(tool_id))

    def test_refresh_applies_changes(self, temp_db, approved_tool):
        """Test changed fields are written and reported."""
        scraped = ScrapedTool(
            name="Example",
            website="https://example.ai",
            tagline="Brand new tagline",
            description="Example helps you write code faster.",
            logo="https://example.ai/logo.png",
            twitter="https://x.com/example",
        )
        refresher = ToolRefresher(temp_db, FakeScraper({"https://example.ai": scraped}), keyword_classifier())

        changed = refresher.refresh_tool(approved_tool)

        assert set(changed) == {"tagline", "pricing", "twitter"}
        tool = temp_db.get_tool(approved_tool["id"])
        assert tool["tagline"] == "Brand new tagline"
        assert tool["twitter"] == "https://x.com/example"
        assert tool["pricing"] == {"model": "freemium"}

    def test_refresh_is_idempotent(self, temp_db, approved_tool, scraped_example):
        """Test refreshing twice from the same page changes nothing the second time."""
        scraper = FakeScraper({"https://example.ai": scraped_example})
        refresher = ToolRefresher(temp_db, scraper, keyword_classifier())

        refresher.refresh_tool(temp_db.get_tool(approved_tool["id"]))
        second = refresher.refresh_tool(temp_db.get_tool(approved_tool["id"]))

        assert second == []

    def test_run_refresh(self, temp_db, approved_tool, scraped_example, category_id):
        """Test a run counts refreshed, updated and failed tools."""
        temp_db.add_tool("Broken", "broken", "t", "l", category_id, status="approved",
                         website="https://broken.ai")
        scraper = FakeScraper({"https://example.ai": scraped_example})

        result = run_refresh(
            temp_db, {"refresh": {"batch_size": 10}}, scraper=scraper,
            classifier=keyword_classifier(), throttle=Throttle(0, sleep=no_sleep),
        )

        assert result.tools_refreshed == 1
        assert result.tools_updated == 1
        assert result.tools_failed == 1
        assert result.status == "partial"
        assert "Example" in result.changes

        log = temp_db.get_automation_log(result.log_id)
        assert log["type"] == "tool-refresh"
        assert log["metadata"]["changes"][0].startswith("Example: ")

    def test_run_refresh_batch_size(self, temp_db, approved_tool, scraped_example):
        """Test the batch size limits how many tools are refreshed."""
        scraper = FakeScraper({"https://example.ai": scraped_example})

        result = run_refresh(
            temp_db, {"refresh": {"batch_size": 0}}, scraper=scraper,
            classifier=keyword_classifier(), throttle=Throttle(0, sleep=no_sleep),
        )

        assert result.tools_refreshed == 0
        assert scraper.calls == []
        assert result.status == "success"
