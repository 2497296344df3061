"""Message queue service: queues, pushing, pulling and acknowledging messages."""

from __future__ import annotations

import logging
import time
from typing import Any, Mapping, Optional, Protocol, Sequence

from .models import (
    CreateQueueReq,
    Item,
    ListQueuesResponse,
    Msg,
    PushQueue,
    clamp_page,
    suffixed_name,
)

logger = logging.getLogger(__name__)

MIN_TIMEOUT = 60
MAX_TIMEOUT = 300
MIN_DEADLINE = 300
DEFAULT_SHORT_DEADLINE = 400
MAX_DEADLINE = 86400
MIN_PULL = 1
MAX_PULL = 100


class QueueBackend(Protocol):
    """Remote queue API; mappings are decoded JSON objects."""

    def get_queues(self, page: int, page_size: int, desc: bool) -> Mapping[str, Any]: ...

    def create_queue(
        self, actor_id: str, run_id: str, name: str, description: str
    ) -> Mapping[str, Any]: ...

    def get_queue(self, queue_id: str, name: str) -> Mapping[str, Any]: ...

    def update_queue(self, queue_id: str, name: str, description: str) -> None: ...

    def del_queue(self, queue_id: str) -> None: ...

    def create_msg(
        self,
        queue_id: str,
        name: str,
        payload: str,
        retry: int,
        timeout: int,
        deadline: int,
    ) -> Mapping[str, Any]: ...

    def get_msg(self, queue_id: str, limit: int) -> Optional[Sequence[Mapping[str, Any]]]: ...

    def ack_msg(self, queue_id: str, msg_id: str) -> None: ...


def _clamp_timeout(timeout: int) -> int:
    return min(max(int(timeout), MIN_TIMEOUT), MAX_TIMEOUT)


def _clamp_deadline(deadline: int) -> int:
    deadline = int(deadline)
    if deadline < MIN_DEADLINE:
        return DEFAULT_SHORT_DEADLINE
    return min(deadline, MAX_DEADLINE)


class Queue:
    """Message queues tied to one actor run."""

    def __init__(self, backend: QueueBackend, actor_id="", run_id=""):
        self._backend = backend
        self.actor_id = actor_id
        self.run_id = run_id

    def _call(self, what: str, fn, *args):
        try:
            return fn(*args)
        except Exception as exc:
            logger.error("failed to %s: %s", what, exc)
            raise

    def list_queues(self, page=1, page_size=10, desc=False) -> ListQueuesResponse:
        """List queues; page is at least 1 and page size at least 10."""
        page, page_size = clamp_page(page, page_size)
        resp = self._call("list queues", self._backend.get_queues, page, page_size, desc)
        return ListQueuesResponse(
            items=[Item.from_dict(item) for item in resp.get("items") or []],
            total=int(resp.get("total") or 0),
            total_page=int(resp.get("totalPage") or 0),
            page=int(resp.get("page") or 0),
            page_size=int(resp.get("pageSize") or 0),
        )

    def create_queue(self, req: CreateQueueReq) -> tuple[str, str]:
        """Create a queue named ``name-<run id>``; returns its id and full name."""
        full_name = suffixed_name(req.name, self.run_id)
        resp = self._call(
            "create queue",
            self._backend.create_queue,
            self.actor_id,
            self.run_id,
            full_name,
            req.description,
        )
        return str(resp.get("id") or ""), full_name

    def get_queue(self, queue_id, name) -> Item:
        """Fetch a queue by id and its name (suffixed with the run id)."""
        full_name = suffixed_name(name, self.run_id)
        resp = self._call("get queue", self._backend.get_queue, queue_id, full_name)
        return Item.from_dict(resp)

    def update_queue(self, queue_id, name, description="") -> None:
        """Rename a queue to ``name-<run id>`` and set its description."""
        full_name = suffixed_name(name, self.run_id)
        self._call("update queue", self._backend.update_queue, queue_id, full_name, description)

    def delete_queue(self, queue_id) -> None:
        self._call("delete queue", self._backend.del_queue, queue_id)

    def push(self, queue_id, req: PushQueue) -> str:
        """Push a message and return its id.

        The timeout is kept within [60, 300] seconds; a deadline under 300 seconds
        becomes 400 and one over 86400 becomes 86400. The deadline sent is an
        absolute Unix time.
        """
        timeout = _clamp_timeout(req.timeout)
        deadline = _clamp_deadline(req.deadline)
        deadline_at = int(time.time()) + deadline
        payload = req.payload
        if isinstance(payload, (bytes, bytearray)):
            payload = bytes(payload).decode("utf-8", errors="replace")
        resp = self._call(
            "push to queue",
            self._backend.create_msg,
            queue_id,
            req.name,
            payload,
            req.retry,
            timeout,
            deadline_at,
        )
        return str(resp.get("msgId") or "")

    def pull(self, queue_id, size=1) -> list[Msg]:
        """Pull up to ``size`` messages; size is kept within [1, 100]."""
        limit = min(max(int(size), MIN_PULL), MAX_PULL)
        msgs = self._call("pull from queue", self._backend.get_msg, queue_id, limit)
        return [Msg.from_dict(msg) for msg in msgs or []]

    def ack(self, queue_id, msg_id) -> None:
        """Mark a message as processed."""
        self._call("ack msg", self._backend.ack_msg, queue_id, msg_id)

    def close(self) -> None:
        """Close the backend if it holds resources."""
        closer = getattr(self._backend, "close", None)
        if callable(closer):
            closer()