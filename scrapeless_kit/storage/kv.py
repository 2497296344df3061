"""Key-value storage service: namespaces, keys and values."""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping, Optional, Protocol

from .models import (
    BulkItem,
    KvKeys,
    KvNamespaceItem,
    NamespacesResponse,
    clamp_page,
    suffixed_name,
)

logger = logging.getLogger(__name__)


class KVBackend(Protocol):
    """Remote KV API; mappings are decoded JSON objects."""

    def list_namespaces(self, page: int, page_size: int, desc: bool) -> Mapping[str, Any]: ...

    def create_namespace(self, name: str, actor_id: str, run_id: str) -> str: ...

    def get_namespace(self, namespace_name: str) -> Mapping[str, Any]: ...

    def del_namespace(self, namespace_id: str) -> bool: ...

    def rename_namespace(self, namespace_id: str, name: str) -> bool: ...

    def list_keys(self, namespace_id: str, page: int, size: int) -> Optional[Mapping[str, Any]]: ...

    def del_value(self, namespace_id: str, key: str) -> bool: ...

    def bulk_set_value(self, namespace_id: str, items: list[dict[str, Any]]) -> int: ...

    def bulk_del_value(self, namespace_id: str, keys: list[str]) -> bool: ...

    def set_value(self, namespace_id: str, key: str, value: str, expiration: int) -> bool: ...

    def get_value(self, namespace_id: str, key: str) -> str: ...


class KV:
    """Namespaced key-value store tied to one actor run."""

    def __init__(self, backend: KVBackend, actor_id="", run_id=""):
        self._backend = backend
        self.actor_id = actor_id
        self.run_id = run_id

    def _call(self, what: str, fn, *args):
        try:
            return fn(*args)
        except Exception as exc:
            logger.error("failed to %s: %s", what, exc)
            raise

    def list_namespaces(self, page=1, page_size=10, desc=False) -> NamespacesResponse:
        """List namespaces; page is at least 1 and page size at least 10."""
        page, page_size = clamp_page(page, page_size)
        resp = self._call(
            "list kv namespaces", self._backend.list_namespaces, page, page_size, desc
        )
        return NamespacesResponse(
            items=[KvNamespaceItem.from_dict(item) for item in resp.get("items") or []],
            total=int(resp.get("total") or 0),
        )

    def create_namespace(self, name) -> tuple[str, str]:
        """Create a namespace named ``name-<run id>``; returns its id and full name."""
        full_name = suffixed_name(name, self.run_id)
        namespace_id = self._call(
            "create kv namespace",
            self._backend.create_namespace,
            full_name,
            self.actor_id,
            self.run_id,
        )
        return namespace_id, full_name

    def get_namespace(self, namespace_name) -> KvNamespaceItem:
        resp = self._call("get kv namespace", self._backend.get_namespace, namespace_name)
        return KvNamespaceItem.from_dict(resp)

    def del_namespace(self, namespace_id) -> bool:
        return bool(self._call("delete kv namespace", self._backend.del_namespace, namespace_id))

    def rename_namespace(self, namespace_id, name) -> tuple[bool, str]:
        """Rename to ``name-<run id>``; returns success and the new name."""
        full_name = suffixed_name(name, self.run_id)
        ok = self._call(
            "rename kv namespace", self._backend.rename_namespace, namespace_id, full_name
        )
        return bool(ok), full_name

    def list_keys(self, namespace_id, page=1, page_size=10) -> Optional[KvKeys]:
        """List keys in a namespace, or None when the service returns nothing."""
        page, page_size = clamp_page(page, page_size)
        resp = self._call("list kv keys", self._backend.list_keys, namespace_id, page, page_size)
        if resp is None:
            return None
        return KvKeys.from_dict(resp)

    def del_value(self, namespace_id, key) -> bool:
        return bool(self._call("delete kv value", self._backend.del_value, namespace_id, key))

    def bulk_set_value(self, namespace_id, data: Iterable[BulkItem]) -> int:
        """Set many pairs at once; returns how many were stored."""
        items = [item.to_dict() for item in data]
        count = self._call(
            "bulk set kv value", self._backend.bulk_set_value, namespace_id, items
        )
        return int(count)

    def bulk_del_value(self, namespace_id, keys) -> bool:
        return bool(
            self._call("bulk delete kv value", self._backend.bulk_del_value, namespace_id, list(keys))
        )

    def set_value(self, namespace_id, key, value, expiration=0) -> bool:
        """Store a value; expiration is a time-to-live in seconds."""
        return bool(
            self._call(
                "set kv value", self._backend.set_value, namespace_id, key, value, expiration
            )
        )

    def get_value(self, namespace_id, key) -> str:
        return self._call("get kv value", self._backend.get_value, namespace_id, key)

    def close(self) -> None:
        """Close the backend if it holds resources."""
        closer = getattr(self._backend, "close", None)
        if callable(closer):
            closer()