"""Crawl service: scrape single pages, batches of pages, or whole sites."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Optional, Protocol, Union

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 0.4


class Status(str, Enum):
    SCRAPING = "scraping"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"
    ACTIVE = "active"
    PAUSED = "paused"
    PENDING = "pending"
    QUEUED = "queued"
    WAITING = "waiting"


_IN_PROGRESS = frozenset(
    {
        Status.ACTIVE,
        Status.PAUSED,
        Status.PENDING,
        Status.QUEUED,
        Status.WAITING,
        Status.SCRAPING,
    }
)

StatusValue = Union[Status, str]


def _status(value: Any) -> StatusValue:
    text = "" if value is None else str(value)
    try:
        return Status(text)
    except ValueError:
        return text


def _status_text(status: StatusValue) -> str:
    return status.value if isinstance(status, Status) else str(status)


class CrawlJobError(RuntimeError):
    """Raised when a polled job ends in a state other than completed."""

    def __init__(self, status: StatusValue):
        self.status = status
        super().__init__(
            f"Crawl job failed or was stopped. Status: {_status_text(status)}"
        )


def _drop_empty(data: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in data.items() if value not in (None, "", 0, False, [], {})}


@dataclass
class BrowserOptions:
    """Options for the browser session a scrape or crawl runs in."""

    session_name: str = ""
    session_ttl: str = ""
    session_recording: str = ""
    proxy_country: str = ""
    proxy_url: str = ""
    fingerprint: str = ""

    def to_dict(self) -> dict[str, Any]:
        return _drop_empty(
            {
                "session_name": self.session_name,
                "session_ttl": self.session_ttl,
                "session_recording": self.session_recording,
                "proxy_country": self.proxy_country,
                "proxy_url": self.proxy_url,
                "fingerprint": self.fingerprint,
            }
        )


@dataclass
class ScrapeOptions:
    formats: list[str] = field(default_factory=list)
    headers: dict[str, str] = field(default_factory=dict)
    include_tags: list[str] = field(default_factory=list)
    exclude_tags: list[str] = field(default_factory=list)
    only_main_content: bool = False
    wait_for: int = 0
    timeout: int = 0
    browser_options: Optional[BrowserOptions] = field(default_factory=BrowserOptions)

    def content_dict(self) -> dict[str, Any]:
        """The page-content options, without browser options."""
        return _drop_empty(
            {
                "formats": list(self.formats),
                "headers": dict(self.headers),
                "includeTags": list(self.include_tags),
                "excludeTags": list(self.exclude_tags),
                "onlyMainContent": self.only_main_content,
                "waitFor": self.wait_for,
                "timeout": self.timeout,
            }
        )


@dataclass
class ScrapeParams(ScrapeOptions):
    """Options for a batch scrape; only the session name of the browser options is sent."""

    browser_options: Optional[BrowserOptions] = None


@dataclass
class CrawlParams:
    include_paths: list[str] = field(default_factory=list)
    exclude_paths: list[str] = field(default_factory=list)
    max_depth: int = 0
    max_discovery_depth: int = 0
    limit: int = 0
    allow_backward_links: bool = False
    allow_external_links: bool = False
    ignore_sitemap: bool = False
    deduplicate_similar_urls: bool = False
    ignore_query_parameters: bool = False
    regex_on_full_url: bool = False
    delay: int = 0
    scrape_options: ScrapeOptions = field(default_factory=ScrapeOptions)
    browser_options: BrowserOptions = field(default_factory=BrowserOptions)


_METADATA_KEYS = {
    "title": "title",
    # The service reports these two under each other's names.
    "dcDescription": "description",
    "description": "dc_description",
    "language": "language",
    "keywords": "keywords",
    "robots": "robots",
    "ogTitle": "og_title",
    "ogDescription": "og_description",
    "ogUrl": "og_url",
    "ogImage": "og_image",
    "ogAudio": "og_audio",
    "ogDeterminer": "og_determiner",
    "ogLocale": "og_locale",
    "ogSiteName": "og_site_name",
    "ogVideo": "og_video",
    "dctermsCreated": "dc_terms_created",
    "dcDateCreated": "dc_date_created",
    "dcDate": "dc_date",
    "dctermsType": "dc_terms_type",
    "dcType": "dc_type",
    "dctermsAudience": "dc_terms_audience",
    "dctermsSubject": "dc_terms_subject",
    "dcSubject": "dc_subject",
    "dctermsKeywords": "dc_terms_keywords",
    "modifiedTime": "modified_time",
    "publishedTime": "published_time",
    "articleTag": "article_tag",
    "articleSection": "article_section",
    "sourceURL": "source_url",
    "error": "error",
}


@dataclass
class ScrapingCrawlDocumentMetadata:
    title: str = ""
    description: str = ""
    language: str = ""
    keywords: str = ""
    robots: str = ""
    og_title: str = ""
    og_description: str = ""
    og_url: str = ""
    og_image: str = ""
    og_audio: str = ""
    og_determiner: str = ""
    og_locale: str = ""
    og_locale_alternate: list[str] = field(default_factory=list)
    og_site_name: str = ""
    og_video: str = ""
    dc_terms_created: str = ""
    dc_date_created: str = ""
    dc_date: str = ""
    dc_terms_type: str = ""
    dc_type: str = ""
    dc_terms_audience: str = ""
    dc_terms_subject: str = ""
    dc_subject: str = ""
    dc_description: str = ""
    dc_terms_keywords: str = ""
    modified_time: str = ""
    published_time: str = ""
    article_tag: str = ""
    article_section: str = ""
    source_url: str = ""
    status_code: int = 0
    error: str = ""
    extra_fields: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "ScrapingCrawlDocumentMetadata":
        data = data or {}
        values: dict[str, Any] = {}
        extra: dict[str, Any] = {}
        for key, value in data.items():
            if key in _METADATA_KEYS:
                values[_METADATA_KEYS[key]] = "" if value is None else str(value)
            elif key == "ogLocaleAlternate":
                values["og_locale_alternate"] = [str(v) for v in value or []]
            elif key == "statusCode":
                values["status_code"] = int(value or 0)
            else:
                extra[key] = value
        return cls(**values, extra_fields=extra)


@dataclass
class ScrapingCrawlDocument:
    markdown: str = ""
    html: str = ""
    raw_html: str = ""
    links: list[str] = field(default_factory=list)
    extract: Any = None
    screenshot: str = ""
    metadata: ScrapingCrawlDocumentMetadata = field(default_factory=ScrapingCrawlDocumentMetadata)

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "ScrapingCrawlDocument":
        data = data or {}
        return cls(
            markdown=str(data.get("markdown") or ""),
            html=str(data.get("html") or ""),
            raw_html=str(data.get("rawHtml") or ""),
            links=[str(link) for link in data.get("links") or []],
            extract=data.get("extract"),
            screenshot=str(data.get("screenshot") or ""),
            metadata=ScrapingCrawlDocumentMetadata.from_dict(data.get("metadata")),
        )


@dataclass
class ScrapeResponse:
    id: str = ""
    invalid_urls: list[str] = field(default_factory=list)


@dataclass
class ScrapeStatusResponse:
    status: StatusValue = ""
    data: ScrapingCrawlDocument = field(default_factory=ScrapingCrawlDocument)


@dataclass
class ScrapeStatusResponseMultiple:
    total: int = 0
    completed: int = 0
    status: StatusValue = ""
    data: list[ScrapingCrawlDocument] = field(default_factory=list)


@dataclass
class CrawlStatusResponse:
    status: StatusValue = ""
    completed: int = 0
    total: int = 0
    data: list[ScrapingCrawlDocument] = field(default_factory=list)


@dataclass
class CrawlErrorDetail:
    id: str = ""
    timestamp: str = ""
    url: str = ""
    error: str = ""


@dataclass
class CrawlErrorsResponse:
    errors: list[CrawlErrorDetail] = field(default_factory=list)
    robots_blocked: list[str] = field(default_factory=list)


class CrawlBackend(Protocol):
    """Remote crawl API; mappings are decoded JSON objects."""

    def scrape_url(self, payload: dict[str, Any]) -> str: ...

    def check_scrape_status(self, id: str) -> Mapping[str, Any]: ...

    def batch_scrape_urls(self, payload: dict[str, Any]) -> Mapping[str, Any]: ...

    def check_batch_scrape_status(self, id: str) -> Mapping[str, Any]: ...

    def crawl_url(self, payload: dict[str, Any]) -> str: ...

    def check_crawl_status(self, id: str) -> Mapping[str, Any]: ...

    def check_crawl_errors(self, id: str) -> Mapping[str, Any]: ...

    def cancel_crawl(self, id: str) -> Any: ...


class Crawl:
    """Start scrape and crawl jobs and wait for or inspect their results."""

    def __init__(self, backend: CrawlBackend, poll_interval=DEFAULT_POLL_INTERVAL):
        logger.info("Internal Crawl init")
        self._backend = backend
        self.poll_interval = poll_interval

    def _wait(self, check, id: str):
        while True:
            response = check(id)
            if response.status is Status.COMPLETED:
                return response
            if response.status in _IN_PROGRESS:
                logger.info("Scraping status: %s", _status_text(response.status))
                time.sleep(self.poll_interval)
                continue
            raise CrawlJobError(response.status)

    def scrape_url(self, url, options: Optional[ScrapeOptions] = None) -> ScrapeStatusResponse:
        """Scrape one page and block until the job completes."""
        id = self.async_scrape_url(url, options)
        return self._wait(self.check_scrape_status, id)

    def async_scrape_url(self, url, options: Optional[ScrapeOptions] = None) -> str:
        """Start scraping one page; returns the job id."""
        options = options or ScrapeOptions()
        browser = options.browser_options or BrowserOptions()
        payload = {"url": url, **options.content_dict(), "browserOptions": browser.to_dict()}
        return self._backend.scrape_url(payload)

    def check_scrape_status(self, id) -> ScrapeStatusResponse:
        resp = self._backend.check_scrape_status(id)
        return ScrapeStatusResponse(
            status=_status(resp.get("status")),
            data=ScrapingCrawlDocument.from_dict(resp.get("data")),
        )

    def batch_scrape_urls(self, urls, params: Optional[ScrapeParams] = None) -> ScrapeResponse:
        """Start scraping several pages at once."""
        params = params or ScrapeParams()
        browser = BrowserOptions(
            session_name=params.browser_options.session_name if params.browser_options else ""
        )
        payload = {"url": list(urls), **params.content_dict(), "browserOptions": browser.to_dict()}
        resp = self._backend.batch_scrape_urls(payload)
        return ScrapeResponse(
            id=str(resp.get("id") or ""),
            invalid_urls=[str(u) for u in resp.get("invalidURLs") or []],
        )

    def check_batch_scrape_status(self, id) -> ScrapeStatusResponseMultiple:
        resp = self._backend.check_batch_scrape_status(id)
        return ScrapeStatusResponseMultiple(
            total=int(resp.get("total") or 0),
            completed=int(resp.get("completed") or 0),
            status=_status(resp.get("status")),
            data=[ScrapingCrawlDocument.from_dict(d) for d in resp.get("data") or []],
        )

    def async_crawl_url(self, url, params: Optional[CrawlParams] = None) -> str:
        """Start crawling a site; returns the job id."""
        params = params or CrawlParams()
        payload = {
            "url": url,
            **_drop_empty(
                {
                    "includePaths": list(params.include_paths),
                    "excludePaths": list(params.exclude_paths),
                    "maxDepth": params.max_depth,
                    "maxDiscoveryDepth": params.max_discovery_depth,
                    "limit": params.limit,
                    "allowBackwardLinks": params.allow_backward_links,
                    "allowExternalLinks": params.allow_external_links,
                    "ignoreSitemap": params.ignore_sitemap,
                    "deduplicateSimilarURLs": params.deduplicate_similar_urls,
                    "ignoreQueryParameters": params.ignore_query_parameters,
                    "regexOnFullURL": params.regex_on_full_url,
                    "delay": params.delay,
                }
            ),
            "scrapeOptions": params.scrape_options.content_dict(),
            "browserOptions": params.browser_options.to_dict(),
        }
        return self._backend.crawl_url(payload)

    def crawl_url(self, url, params: Optional[CrawlParams] = None) -> CrawlStatusResponse:
        """Crawl a site and block until the job completes."""
        id = self.async_crawl_url(url, params)
        return self._wait(self.check_crawl_status, id)

    def check_crawl_status(self, id) -> CrawlStatusResponse:
        resp = self._backend.check_crawl_status(id)
        return CrawlStatusResponse(
            status=_status(resp.get("status")),
            completed=int(resp.get("completed") or 0),
            total=int(resp.get("total") or 0),
            data=[ScrapingCrawlDocument.from_dict(d) for d in resp.get("data") or []],
        )

    def check_crawl_errors(self, id) -> CrawlErrorsResponse:
        resp = self._backend.check_crawl_errors(id)
        return CrawlErrorsResponse(
            errors=[
                CrawlErrorDetail(
                    id=str(e.get("id") or ""),
                    timestamp=str(e.get("timestamp") or ""),
                    url=str(e.get("url") or ""),
                    error=str(e.get("error") or ""),
                )
                for e in resp.get("errors") or []
            ],
            robots_blocked=[str(r) for r in resp.get("robotsBlocked") or []],
        )

    def cancel_crawl(self, id) -> bool:
        """Cancel a crawl job; errors from the service propagate."""
        self._backend.cancel_crawl(id)
        return True

    def close(self) -> None:
        """Nothing to release."""