"""Proxy lookup service."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

logger = logging.getLogger(__name__)


@dataclass
class ProxyActor:
    """Proxy request parameters."""

    country: str = ""
    session_duration: int = 0
    session_id: str = ""
    gateway: str = ""


class ProxyBackend(Protocol):
    """Remote proxy API."""

    def get_proxy(
        self,
        api_key: str,
        country: str,
        session_duration: int,
        session_id: str,
        gateway: str,
        task_id: str,
    ) -> str: ...


class Proxy:
    """Fetch proxy URLs for the current run."""

    def __init__(self, backend: ProxyBackend, api_key="", run_id=""):
        logger.info("proxies init")
        self._backend = backend
        self.api_key = api_key
        self.run_id = run_id

    def proxy(self, proxy: ProxyActor) -> str:
        """Return a proxy URL matching the requested parameters."""
        try:
            return self._backend.get_proxy(
                self.api_key,
                proxy.country,
                proxy.session_duration,
                proxy.session_id,
                proxy.gateway,
                self.run_id,
            )
        except Exception as exc:
            logger.error("get proxies err:%s", exc)
            raise

    def close(self) -> None:
        """Close the backend if it holds resources."""
        closer = getattr(self._backend, "close", None)
        if callable(closer):
            closer()