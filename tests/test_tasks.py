import json

import pytest

from scrapeless_kit.tasks import (
    SCRAPER_UNIVERSAL,
    DeepSerp,
    Scraping,
    TaskRequest,
    Universal,
)


class FakeBackend:
    def __init__(self, task=b'{"taskId": "t-1"}', failures=0, result=b'{"ok": true}'):
        self.task = task
        self.failures = failures
        self.result = result
        self.created = []
        self.polls = 0
        self.closed = False

    def create_task(self, actor, input, country):
        self.created.append((actor, input, country))
        return self.task

    def get_task_result(self, task_id):
        self.polls += 1
        if self.polls <= self.failures:
            raise RuntimeError("not ready")
        return self.result

    def close(self):
        self.closed = True


def test_scraping_create_task_source_case():
    backend = FakeBackend()
    service = Scraping(backend, poll_interval=0)
    task = service.create_task(
        TaskRequest(
            actor="scraper.tiktok.mobile.shop.detail",
            input={"region": "VN", "product_id": "1729443471139309751", "locale": ""},
            proxy_country="US",
        )
    )
    assert task == b'{"taskId": "t-1"}'
    actor, payload, country = backend.created[0]
    assert actor == "scraper.tiktok.mobile.shop.detail"
    assert payload["product_id"] == "1729443471139309751"
    assert country == "US"


def test_empty_country_uses_default_upper_cased():
    backend = FakeBackend()
    Scraping(backend, default_country="de", poll_interval=0).create_task(TaskRequest(actor="scraper.amazon"))
    assert backend.created[0][2] == "DE"


def test_scrape_polls_until_result():
    backend = FakeBackend(failures=2)
    result = Scraping(backend, poll_interval=0).scrape(TaskRequest(actor="scraper.amazon"))
    assert result == b'{"ok": true}'
    assert backend.polls == 3


def test_scrape_without_task_id_returns_task():
    body = json.dumps({"data": 1}).encode()
    backend = FakeBackend(task=body)
    assert DeepSerp(backend, poll_interval=0).scrape(TaskRequest(actor="a")) == body
    assert backend.polls == 0


def test_scrape_invalid_json_returns_task():
    backend = FakeBackend(task=b"not json")
    assert Scraping(backend, poll_interval=0).scrape(TaskRequest(actor="a")) == b"not json"


def test_universal_source_case():
    backend = FakeBackend()
    Universal(backend, poll_interval=0).create_task(
        TaskRequest(
            actor=SCRAPER_UNIVERSAL,
            input={"url": "https://www.google.com/", "js_render": True},
            proxy_country="US",
        )
    )
    assert backend.created[0] == (
        "unlocker.webunlocker",
        {"url": "https://www.google.com/", "js_render": True},
        "US",
    )


def test_universal_requires_actor():
    backend = FakeBackend()
    with pytest.raises(ValueError, match="actor do not be empty"):
        Universal(backend).create_task(TaskRequest(proxy_country="US"))
    assert backend.created == []


def test_get_task_result_error_propagates():
    backend = FakeBackend(failures=1)
    with pytest.raises(RuntimeError):
        DeepSerp(backend).get_task_result("t-1")


def test_close_closes_backend():
    backend = FakeBackend()
    Universal(backend).close()
    assert backend.closed is True