"""Dataset storage service: datasets and the items they hold."""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping, Protocol

from .models import (
    DatasetInfo,
    ItemsResponse,
    ListDatasetsResponse,
    clamp_page,
    suffixed_name,
)

logger = logging.getLogger(__name__)


class DatasetBackend(Protocol):
    """Remote dataset API; mappings are decoded JSON objects."""

    def list_datasets(
        self, actor_id: str, run_id: str, page: int, page_size: int, desc: bool
    ) -> Mapping[str, Any]: ...

    def create_dataset(self, name: str, actor_id: str, run_id: str) -> Mapping[str, Any]: ...

    def update_dataset(self, dataset_id: str, name: str) -> bool: ...

    def del_dataset(self, dataset_id: str) -> bool: ...

    def add_dataset_items(self, dataset_id: str, items: list[dict[str, Any]]) -> bool: ...

    def get_dataset(
        self, dataset_id: str, page: int, page_size: int, desc: bool
    ) -> Mapping[str, Any]: ...


class Dataset:
    """Datasets tied to one actor run."""

    def __init__(self, backend: DatasetBackend, actor_id="", run_id=""):
        self._backend = backend
        self.actor_id = actor_id
        self.run_id = run_id

    def _call(self, what: str, fn, *args):
        try:
            return fn(*args)
        except Exception as exc:
            logger.error("failed to %s: %s", what, exc)
            raise

    def list_datasets(self, page=1, page_size=10, desc=False) -> ListDatasetsResponse:
        """List datasets; page is at least 1 and page size at least 10."""
        page, page_size = clamp_page(page, page_size)
        resp = self._call(
            "list datasets",
            self._backend.list_datasets,
            self.actor_id,
            self.run_id,
            page,
            page_size,
            desc,
        )
        return ListDatasetsResponse(
            items=[DatasetInfo.from_dict(item) for item in resp.get("items") or []],
            total=int(resp.get("total") or 0),
        )

    def create_dataset(self, name) -> tuple[str, str]:
        """Create a dataset named ``name-<run id>``; returns its id and full name."""
        full_name = suffixed_name(name, self.run_id)
        resp = self._call(
            "create dataset",
            self._backend.create_dataset,
            full_name,
            self.actor_id,
            self.run_id,
        )
        return str(resp.get("id") or ""), full_name

    def update_dataset(self, dataset_id, name) -> tuple[bool, str]:
        """Rename to ``name-<run id>``; returns success and the new name."""
        full_name = suffixed_name(name, self.run_id)
        ok = self._call("update dataset", self._backend.update_dataset, dataset_id, full_name)
        return bool(ok), full_name

    def del_dataset(self, dataset_id) -> bool:
        return bool(self._call("delete dataset", self._backend.del_dataset, dataset_id))

    def add_items(self, dataset_id, items: Iterable[Mapping[str, Any]]) -> bool:
        """Append items, each a mapping of field names to values."""
        payload = [dict(item) for item in items]
        return bool(
            self._call("add items", self._backend.add_dataset_items, dataset_id, payload)
        )

    def get_items(self, dataset_id, page=1, page_size=10, desc=False) -> ItemsResponse:
        """Fetch one page of items; page is at least 1 and page size at least 10."""
        page, page_size = clamp_page(page, page_size)
        resp = self._call(
            "get items", self._backend.get_dataset, dataset_id, page, page_size, desc
        )
        return ItemsResponse(
            items=[dict(item) for item in resp.get("items") or []],
            total=int(resp.get("total") or 0),
        )

    def close(self) -> None:
        """Nothing to release."""