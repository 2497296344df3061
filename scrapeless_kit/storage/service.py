"""One entry point to all storage services of an actor run."""

from __future__ import annotations

from typing import Any

from .dataset import Dataset
from .kv import KV
from .objects import Object
from .queues import Queue
from .vector import Vector


class Storage:
    """Datasets, key-value store, objects, queues and vectors over one backend."""

    def __init__(self, backend: Any, actor_id="", run_id=""):
        self.actor_id = actor_id
        self.run_id = run_id
        self.dataset = Dataset(backend, actor_id, run_id)
        self.kv = KV(backend, actor_id, run_id)
        self.object = Object(backend, actor_id, run_id)
        self.queue = Queue(backend, actor_id, run_id)
        self.vector = Vector(backend, actor_id, run_id)

    def close(self) -> None:
        """Close every service."""
        for service in (self.dataset, self.kv, self.object, self.queue, self.vector):
            service.close()

    def __enter__(self) -> "Storage":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()