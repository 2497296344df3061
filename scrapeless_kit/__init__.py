"""Client toolkit for scraping, crawling, proxy, profile and storage services, plus a small JSON HTTP server."""

__version__ = "0.1.0"