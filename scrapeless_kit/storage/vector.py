"""Vector storage service: collections and the documents they hold."""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping, Optional, Protocol, Sequence

from .models import (
    BaseDoc,
    Collection,
    CreateCollectionRequest,
    CreateCollectionResponse,
    Doc,
    DocOpResponse,
    ListCollectionsResponse,
    QueryVectorParam,
    clamp_page,
    suffixed_name,
)

logger = logging.getLogger(__name__)

MIN_TOPK = 1
MAX_TOPK = 1024


class VectorBackend(Protocol):
    """Remote vector API; mappings are decoded JSON objects."""

    def list_collections(
        self, actor_id: str, run_id: str, page: int, page_size: int, desc: bool
    ) -> Mapping[str, Any]: ...

    def create_collection(
        self, actor_id: str, run_id: str, name: str, description: str, dimension: int
    ) -> Mapping[str, Any]: ...

    def update_collection(self, coll_id: str, name: str, description: str) -> None: ...

    def del_collection(self, coll_id: str) -> None: ...

    def get_collection(self, coll_id: str) -> Mapping[str, Any]: ...

    def create_docs(self, coll_id: str, docs: list[dict[str, Any]]) -> Mapping[str, Any]: ...

    def update_docs(self, coll_id: str, docs: list[dict[str, Any]]) -> Mapping[str, Any]: ...

    def upsert_docs(self, coll_id: str, docs: list[dict[str, Any]]) -> Mapping[str, Any]: ...

    def del_docs(self, coll_id: str, ids: list[str]) -> Mapping[str, Any]: ...

    def query_docs(
        self,
        coll_id: str,
        vector: list[float],
        sparse_vector: dict[str, float],
        topk: int,
        include_vector: bool,
        include_content: bool,
    ) -> Optional[Sequence[Mapping[str, Any]]]: ...

    def query_docs_by_ids(
        self, coll_id: str, ids: list[str]
    ) -> Optional[Mapping[str, Mapping[str, Any]]]: ...


class Vector:
    """Vector collections tied to one actor run."""

    def __init__(self, backend: VectorBackend, actor_id="", run_id=""):
        self._backend = backend
        self.actor_id = actor_id
        self.run_id = run_id

    def _call(self, what: str, fn, *args):
        try:
            return fn(*args)
        except Exception as exc:
            logger.error("failed to %s: %s", what, exc)
            raise

    def list_collections(self, page=1, page_size=10, desc=False) -> ListCollectionsResponse:
        """List collections; page is at least 1 and page size at least 10."""
        page, page_size = clamp_page(page, page_size)
        resp = self._call(
            "list collections",
            self._backend.list_collections,
            self.actor_id,
            self.run_id,
            page,
            page_size,
            desc,
        )
        return ListCollectionsResponse(
            items=[Collection.from_dict(item) for item in resp.get("items") or []],
            total=int(resp.get("total") or 0),
            page=int(resp.get("page") or 0),
            page_size=int(resp.get("pageSize") or 0),
            total_page=int(resp.get("totalPage") or 0),
        )

    def create_collections(self, req: CreateCollectionRequest) -> CreateCollectionResponse:
        """Create a collection named ``name-<run id>`` for the current run."""
        full_name = suffixed_name(req.name, self.run_id)
        resp = self._call(
            "create collection",
            self._backend.create_collection,
            self.actor_id,
            self.run_id,
            full_name,
            req.description,
            req.dimension,
        )
        return CreateCollectionResponse(coll=Collection.from_dict(resp.get("coll") or {}))

    def update_collection(self, coll_id, name, description="") -> None:
        self._call(
            "update collection", self._backend.update_collection, coll_id, name, description
        )

    def del_collection(self, coll_id) -> None:
        self._call("delete collection", self._backend.del_collection, coll_id)

    def get_collection(self, coll_id) -> Collection:
        return Collection.from_dict(
            self._call("get collection", self._backend.get_collection, coll_id)
        )

    def create_docs(self, coll_id, docs: Iterable[BaseDoc]) -> DocOpResponse:
        """Insert new documents."""
        payload = [doc.to_dict() for doc in docs]
        resp = self._call("create docs", self._backend.create_docs, coll_id, payload)
        return DocOpResponse.from_dict(resp)

    def update_docs(self, coll_id, docs: Iterable[Doc]) -> DocOpResponse:
        """Update existing documents."""
        payload = [doc.to_dict() for doc in docs]
        resp = self._call("update docs", self._backend.update_docs, coll_id, payload)
        return DocOpResponse.from_dict(resp)

    def upsert_docs(self, coll_id, docs: Iterable[Doc]) -> DocOpResponse:
        """Insert or update documents."""
        payload = [doc.to_dict() for doc in docs]
        resp = self._call("upsert docs", self._backend.upsert_docs, coll_id, payload)
        return DocOpResponse.from_dict(resp)

    def del_docs(self, coll_id, ids) -> DocOpResponse:
        resp = self._call("delete docs", self._backend.del_docs, coll_id, list(ids))
        return DocOpResponse.from_dict(resp)

    def query_docs(self, coll_id, query: QueryVectorParam) -> list[Doc]:
        """Find the nearest documents; a topk outside [1, 1024] is reset to 1."""
        topk = query.topk if MIN_TOPK <= query.topk <= MAX_TOPK else MIN_TOPK
        resp = self._call(
            "query docs",
            self._backend.query_docs,
            coll_id,
            list(query.vector),
            dict(query.sparse_vector),
            topk,
            query.include_vector,
            query.include_content,
        )
        return [Doc.from_dict(doc) for doc in resp or []]

    def query_docs_by_ids(self, coll_id, ids) -> dict[str, Doc]:
        """Fetch documents by id, keyed by id."""
        resp = self._call(
            "query docs by ids", self._backend.query_docs_by_ids, coll_id, list(ids)
        )
        return {key: Doc.from_dict(value) for key, value in (resp or {}).items()}

    def close(self) -> None:
        """Nothing to release."""