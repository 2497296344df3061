"""Object storage service: buckets and the files stored in them."""

from __future__ import annotations

import logging
from typing import Any, Mapping, Protocol

from .models import (
    Bucket,
    ListBucketsResponse,
    ListObjectsResponse,
    ObjectInfo,
    clamp_page,
    suffixed_name,
)

logger = logging.getLogger(__name__)

OBJECT_TYPES = frozenset({"json", "html", "png"})


class UnsupportedObjectType(ValueError):
    """Raised when a file's extension is not an accepted object type."""


def get_object_type(filename) -> tuple[str, bool]:
    """Return the file's extension without dots and whether it is supported."""
    base = str(filename).rsplit("/", 1)[-1]
    dot = base.rfind(".")
    ext = base[dot:] if dot >= 0 else ""
    ext = ext.replace(".", "")
    return ext, ext in OBJECT_TYPES


class ObjectBackend(Protocol):
    """Remote object storage API; mappings are decoded JSON objects."""

    def list_buckets(self, page: int, page_size: int) -> Mapping[str, Any]: ...

    def create_bucket(self, name: str, description: str, actor_id: str, run_id: str) -> str: ...

    def delete_bucket(self, bucket_id: str) -> bool: ...

    def get_bucket(self, bucket_id: str) -> Mapping[str, Any]: ...

    def list_objects(
        self, bucket_id: str, search: str, page: int, page_size: int
    ) -> Mapping[str, Any]: ...

    def get_object(self, bucket_id: str, object_id: str) -> bytes: ...

    def put_object(
        self, bucket_id: str, filename: str, data: bytes, actor_id: str, run_id: str
    ) -> str: ...

    def delete_object(self, bucket_id: str, object_id: str) -> bool: ...


class Object:
    """Buckets and objects tied to one actor run."""

    def __init__(self, backend: ObjectBackend, actor_id="", run_id=""):
        self._backend = backend
        self.actor_id = actor_id
        self.run_id = run_id

    def _call(self, what: str, fn, *args):
        try:
            return fn(*args)
        except Exception as exc:
            logger.error("failed to %s: %s", what, exc)
            raise

    def list_buckets(self, page=1, page_size=10) -> ListBucketsResponse:
        """List buckets; page is at least 1 and page size at least 10."""
        page, page_size = clamp_page(page, page_size)
        resp = self._call("list buckets", self._backend.list_buckets, page, page_size)
        return ListBucketsResponse(
            buckets=[Bucket.from_dict(b) for b in resp.get("buckets") or []],
            total=int(resp.get("total") or 0),
        )

    def create_bucket(self, name, description="") -> tuple[str, str]:
        """Create a bucket named ``name-<run id>``; returns its id and full name."""
        full_name = suffixed_name(name, self.run_id)
        bucket_id = self._call(
            "create bucket",
            self._backend.create_bucket,
            full_name,
            description,
            self.actor_id,
            self.run_id,
        )
        return bucket_id, full_name

    def delete_bucket(self, bucket_id) -> bool:
        return bool(self._call("delete bucket", self._backend.delete_bucket, bucket_id))

    def get_bucket(self, bucket_id) -> Bucket:
        return Bucket.from_dict(self._call("get bucket", self._backend.get_bucket, bucket_id))

    def list_objects(self, bucket_id, fuzzy_file_name="", page=1, page_size=10) -> ListObjectsResponse:
        """List objects whose filename matches the search; paging is clamped."""
        page, page_size = clamp_page(page, page_size)
        resp = self._call(
            "list objects",
            self._backend.list_objects,
            bucket_id,
            fuzzy_file_name,
            page,
            page_size,
        )
        return ListObjectsResponse(
            objects=[ObjectInfo.from_dict(o) for o in resp.get("objects") or []],
            total=int(resp.get("total") or 0),
        )

    def get_object(self, bucket_id, object_id) -> bytes:
        return bytes(self._call("get object", self._backend.get_object, bucket_id, object_id))

    def put_object(self, bucket_id, filename, data) -> str:
        """Upload a json, html or png file; returns the new object's id."""
        _, supported = get_object_type(filename)
        if not supported:
            raise UnsupportedObjectType("object type not supported")
        return self._call(
            "put object",
            self._backend.put_object,
            bucket_id,
            filename,
            bytes(data),
            self.actor_id,
            self.run_id,
        )

    def delete_object(self, bucket_id, object_id) -> bool:
        return bool(
            self._call("delete object", self._backend.delete_object, bucket_id, object_id)
        )

    def close(self) -> None:
        """Close the backend if it holds resources."""
        closer = getattr(self._backend, "close", None)
        if callable(closer):
            closer()