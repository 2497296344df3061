import pytest

from scrapeless_kit.crawl import (
    BrowserOptions,
    Crawl,
    CrawlJobError,
    CrawlParams,
    ScrapeOptions,
    ScrapeParams,
    Status,
)


class FakeBackend:
    def __init__(self, statuses=("completed",)):
        self.calls = []
        self.statuses = list(statuses)

    def scrape_url(self, payload):
        self.calls.append(("scrape_url", payload))
        return "scrape-1"

    def check_scrape_status(self, id):
        self.calls.append(("check_scrape_status", id))
        return {
            "status": self.statuses.pop(0),
            "data": {
                "markdown": "# Hi",
                "links": ["https://example.com/a"],
                "metadata": {
                    "title": "Hi",
                    "description": "plain",
                    "dcDescription": "dc",
                    "statusCode": 200,
                    "ogLocaleAlternate": ["fr"],
                    "custom": 1,
                },
            },
        }

    def batch_scrape_urls(self, payload):
        self.calls.append(("batch_scrape_urls", payload))
        return {"id": "batch-1", "invalidURLs": ["bad"]}

    def check_batch_scrape_status(self, id):
        return {"total": 2, "completed": 1, "status": "scraping", "data": [{"html": "<p>"}]}

    def crawl_url(self, payload):
        self.calls.append(("crawl_url", payload))
        return "crawl-1"

    def check_crawl_status(self, id):
        self.calls.append(("check_crawl_status", id))
        return {"status": self.statuses.pop(0), "data": [{"markdown": "a"}, {"markdown": "b"}]}

    def check_crawl_errors(self, id):
        return {
            "errors": [{"id": "e1", "url": "https://example.com/x", "error": "boom"}],
            "robotsBlocked": ["https://example.com/private"],
        }

    def cancel_crawl(self, id):
        self.calls.append(("cancel_crawl", id))
        return {"status": "cancelled"}


def test_crawl_url_from_source_case():
    backend = FakeBackend(statuses=["pending", "scraping", "completed"])
    crawl = Crawl(backend, poll_interval=0)
    result = crawl.crawl_url(
        "https://redditinc.com/blog",
        CrawlParams(
            limit=10,
            scrape_options=ScrapeOptions(formats=["links", "markdown", "html", "screenshot"]),
            browser_options=BrowserOptions(
                session_name="Crawl",
                session_ttl="900",
                session_recording="true",
                proxy_country="ANY",
            ),
        ),
    )
    assert result.status is Status.COMPLETED
    assert [d.markdown for d in result.data] == ["a", "b"]
    payload = backend.calls[0][1]
    assert payload["url"] == "https://redditinc.com/blog"
    assert payload["limit"] == 10
    assert payload["scrapeOptions"] == {"formats": ["links", "markdown", "html", "screenshot"]}
    assert payload["browserOptions"] == {
        "session_name": "Crawl",
        "session_ttl": "900",
        "session_recording": "true",
        "proxy_country": "ANY",
    }
    assert sum(1 for name, _ in backend.calls if name == "check_crawl_status") == 3


def test_async_scrape_url_from_source_case():
    backend = FakeBackend()
    crawl = Crawl(backend, poll_interval=0)
    job_id = crawl.async_scrape_url(
        "https://docs.scrapeless.com/en/overview/",
        ScrapeOptions(
            browser_options=BrowserOptions(
                session_name="Crawl", session_ttl="900", session_recording="true", proxy_country="ANY"
            )
        ),
    )
    assert job_id == "scrape-1"
    payload = backend.calls[0][1]
    assert payload["url"] == "https://docs.scrapeless.com/en/overview/"
    assert payload["browserOptions"]["session_ttl"] == "900"
    assert "formats" not in payload


def test_scrape_url_polls_until_completed_and_maps_metadata():
    backend = FakeBackend(statuses=["queued", "completed"])
    result = Crawl(backend, poll_interval=0).scrape_url("https://example.com")
    assert result.status is Status.COMPLETED
    meta = result.data.metadata
    assert meta.title == "Hi"
    assert meta.description == "dc"
    assert meta.dc_description == "plain"
    assert meta.status_code == 200
    assert meta.og_locale_alternate == ["fr"]
    assert meta.extra_fields == {"custom": 1}
    assert result.data.links == ["https://example.com/a"]


@pytest.mark.parametrize("status", ["failed", "cancelled", "weird", ""])
def test_scrape_url_raises_on_terminal_status(status):
    backend = FakeBackend(statuses=[status])
    with pytest.raises(CrawlJobError) as info:
        Crawl(backend, poll_interval=0).scrape_url("https://example.com")
    assert str(info.value) == f"Crawl job failed or was stopped. Status: {status}"


def test_crawl_url_raises_on_failed():
    backend = FakeBackend(statuses=["active", "failed"])
    with pytest.raises(CrawlJobError) as info:
        Crawl(backend, poll_interval=0).crawl_url("https://example.com")
    assert info.value.status is Status.FAILED


def test_batch_scrape_sends_only_session_name():
    backend = FakeBackend()
    resp = Crawl(backend, poll_interval=0).batch_scrape_urls(
        ["https://example.com/1", "https://example.com/2"],
        ScrapeParams(
            formats=["html"],
            browser_options=BrowserOptions(session_name="s", proxy_country="US"),
        ),
    )
    assert resp.id == "batch-1"
    assert resp.invalid_urls == ["bad"]
    payload = backend.calls[0][1]
    assert payload["url"] == ["https://example.com/1", "https://example.com/2"]
    assert payload["formats"] == ["html"]
    assert payload["browserOptions"] == {"session_name": "s"}


def test_batch_scrape_without_browser_options():
    backend = FakeBackend()
    Crawl(backend, poll_interval=0).batch_scrape_urls(["https://example.com"])
    assert backend.calls[0][1]["browserOptions"] == {}


def test_check_batch_scrape_status():
    resp = Crawl(FakeBackend(), poll_interval=0).check_batch_scrape_status("batch-1")
    assert (resp.total, resp.completed, resp.status) == (2, 1, Status.SCRAPING)
    assert [d.html for d in resp.data] == ["<p>"]


def test_check_crawl_errors():
    resp = Crawl(FakeBackend(), poll_interval=0).check_crawl_errors("crawl-1")
    assert resp.errors[0].id == "e1"
    assert resp.errors[0].error == "boom"
    assert resp.errors[0].timestamp == ""
    assert resp.robots_blocked == ["https://example.com/private"]


def test_cancel_crawl():
    backend = FakeBackend()
    assert Crawl(backend, poll_interval=0).cancel_crawl("crawl-1") is True
    assert backend.calls == [("cancel_crawl", "crawl-1")]


def test_cancel_crawl_propagates_error():
    class Failing(FakeBackend):
        def cancel_crawl(self, id):
            raise ConnectionError("down")

    with pytest.raises(ConnectionError):
        Crawl(Failing(), poll_interval=0).cancel_crawl("crawl-1")


def test_status_check_error_propagates_from_scrape():
    class Failing(FakeBackend):
        def check_scrape_status(self, id):
            raise TimeoutError("slow")

    with pytest.raises(TimeoutError):
        Crawl(Failing(), poll_interval=0).scrape_url("https://example.com")