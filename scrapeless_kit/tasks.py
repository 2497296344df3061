"""Task-based scraping services: scraping, deep SERP and universal unlocker."""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Protocol

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 0.2

SCRAPER_AMAZON = "scraper.amazon"
SCRAPER_UNIVERSAL = "unlocker.webunlocker"
SCRAPER_AKAMAIWEB_UNIVERSAL = "unlocker.akamaiweb"


@dataclass
class TaskRequest:
    """A task: the actor to run, its input and the proxy country."""

    actor: str = ""
    input: dict[str, Any] = field(default_factory=dict)
    proxy_country: str = ""


@dataclass
class ScrapingTaskResponse:
    message: str = ""
    task_id: str = ""


class TaskBackend(Protocol):
    """Remote task API; responses are raw JSON bytes."""

    def create_task(self, actor: str, input: dict[str, Any], country: str) -> bytes: ...

    def get_task_result(self, task_id: str) -> bytes: ...


def _task_id(task: bytes) -> str:
    try:
        data = json.loads(task)
    except (ValueError, TypeError):
        return ""
    if not isinstance(data, dict):
        return ""
    value = data.get("taskId")
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return json.dumps(value)


class _TaskService:
    _create_error = "scraping create err:%s"

    def __init__(self, backend: TaskBackend, default_country="", poll_interval=DEFAULT_POLL_INTERVAL):
        self._backend = backend
        self.default_country = default_country
        self.poll_interval = poll_interval

    def _submit(self, req: TaskRequest, require_actor: bool = False) -> bytes:
        country = req.proxy_country or self.default_country
        if require_actor and not req.actor:
            raise ValueError("actor do not be empty")
        try:
            return self._backend.create_task(str(req.actor), dict(req.input), country.upper())
        except Exception as exc:
            logger.error(self._create_error, exc)
            raise

    def _fetch_result(self, task_id) -> bytes:
        try:
            return self._backend.get_task_result(task_id)
        except Exception as exc:
            logger.error("get task result err:%s", exc)
            raise

    def _poll(self, task: bytes, get_result) -> bytes:
        task_id = _task_id(task)
        if not task_id:
            return task
        while True:
            try:
                return get_result(task_id)
            except Exception:
                time.sleep(self.poll_interval)

    def _release(self) -> None:
        closer = getattr(self._backend, "close", None)
        if callable(closer):
            closer()


class Scraping(_TaskService):
    """Scraper tasks such as ``scraper.amazon``."""

    def __init__(self, backend: TaskBackend, default_country="", poll_interval=DEFAULT_POLL_INTERVAL):
        logger.info("Internal Scraping init")
        super().__init__(backend, default_country, poll_interval)

    def create_task(self, req: TaskRequest) -> bytes:
        """Submit a task; an empty country falls back to the default, upper-cased."""
        return self._submit(req)

    def get_task_result(self, task_id) -> bytes:
        return self._fetch_result(task_id)

    def scrape(self, req: TaskRequest) -> bytes:
        """Submit a task and poll until its result is ready.

        When the submission carries no task id the submission response is returned.
        """
        return self._poll(self.create_task(req), self.get_task_result)

    def close(self) -> None:
        """Close the backend if it holds resources."""
        self._release()


class DeepSerp(_TaskService):
    """Deep search-engine result tasks."""

    _create_error = "deepserp create err:%s"

    def __init__(self, backend: TaskBackend, default_country="", poll_interval=DEFAULT_POLL_INTERVAL):
        logger.info("Internal DeepSerp init")
        super().__init__(backend, default_country, poll_interval)

    def create_task(self, req: TaskRequest) -> bytes:
        """Submit a task; an empty country falls back to the default, upper-cased."""
        return self._submit(req)

    def get_task_result(self, task_id) -> bytes:
        return self._fetch_result(task_id)

    def scrape(self, req: TaskRequest) -> bytes:
        """Submit a task and poll until its result is ready.

        When the submission carries no task id the submission response is returned.
        """
        return self._poll(self.create_task(req), self.get_task_result)

    def close(self) -> None:
        """Close the backend if it holds resources."""
        self._release()


class Universal(_TaskService):
    """Universal unlocker tasks; an actor is required."""

    def __init__(self, backend: TaskBackend, default_country="", poll_interval=DEFAULT_POLL_INTERVAL):
        logger.info("Internal Universal init")
        super().__init__(backend, default_country, poll_interval)

    def create_task(self, req: TaskRequest) -> bytes:
        """Submit a task; the actor must be set and the country is upper-cased."""
        return self._submit(req, require_actor=True)

    def get_task_result(self, task_id) -> bytes:
        return self._fetch_result(task_id)

    def scrape(self, req: TaskRequest) -> bytes:
        """Submit a task and poll until its result is ready.

        When the submission carries no task id the submission response is returned.
        """
        return self._poll(self.create_task(req), self.get_task_result)

    def close(self) -> None:
        """Close the backend if it holds resources."""
        self._release()