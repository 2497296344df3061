"""Data types shared by the storage services: datasets, KV, objects, queues and vectors."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Mapping, Optional

MIN_PAGE = 1
MIN_PAGE_SIZE = 10

_FRACTION = re.compile(r"(\.\d{6})\d+")


def clamp_page(page, page_size) -> tuple[int, int]:
    """Raise the page to at least 1 and the page size to at least 10."""
    return max(int(page), MIN_PAGE), max(int(page_size), MIN_PAGE_SIZE)


def suffixed_name(name, run_id) -> str:
    """Append the run id to a resource name so it is unique per run."""
    return f"{name}-{run_id}"


def _parse_time(value: Any) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    text = str(value)
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(_FRACTION.sub(r"\1", text))


def _int(data: Mapping[str, Any], key: str) -> int:
    return int(data.get(key) or 0)


def _str(data: Mapping[str, Any], key: str) -> str:
    value = data.get(key)
    return "" if value is None else str(value)


# Dataset


@dataclass
class ItemsResponse:
    items: list[dict[str, Any]] = field(default_factory=list)
    total: int = 0


@dataclass
class DatasetInfo:
    id: str = ""
    name: str = ""
    actor_id: str = ""
    run_id: str = ""
    fields: list[str] = field(default_factory=list)
    created_at: str = ""
    updated_at: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "DatasetInfo":
        return cls(
            id=_str(data, "id"),
            name=_str(data, "name"),
            actor_id=_str(data, "actorId"),
            run_id=_str(data, "runId"),
            fields=list(data.get("fields") or []),
            created_at=_str(data, "createdAt"),
            updated_at=_str(data, "updatedAt"),
        )


@dataclass
class ListDatasetsResponse:
    items: list[DatasetInfo] = field(default_factory=list)
    total: int = 0


# KV


@dataclass
class Stats:
    count: int = 0
    size: int = 0

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "Stats":
        data = data or {}
        return cls(count=_int(data, "count"), size=_int(data, "size"))


@dataclass
class KvNamespaceItem:
    id: str = ""
    name: str = ""
    actor_id: str = ""
    run_id: str = ""
    created_at: str = ""
    updated_at: str = ""
    stats: Stats = field(default_factory=Stats)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "KvNamespaceItem":
        return cls(
            id=_str(data, "id"),
            name=_str(data, "name"),
            actor_id=_str(data, "actorId"),
            run_id=_str(data, "runId"),
            created_at=_str(data, "createdAt"),
            updated_at=_str(data, "updatedAt"),
            stats=Stats.from_dict(data.get("stats")),
        )


@dataclass
class KvKeys:
    items: list[dict[str, Any]] = field(default_factory=list)
    total: int = 0
    page: int = 0
    page_size: int = 0
    total_page: int = 0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "KvKeys":
        return cls(
            items=[dict(item) for item in data.get("items") or []],
            total=_int(data, "total"),
            page=_int(data, "page"),
            page_size=_int(data, "pageSize"),
            total_page=_int(data, "totalPage"),
        )


@dataclass
class BulkItem:
    key: str
    value: str
    expiration: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {"key": self.key, "value": self.value, "expiration": self.expiration}


@dataclass
class NamespacesResponse:
    items: list[KvNamespaceItem] = field(default_factory=list)
    total: int = 0


# Object


@dataclass
class Bucket:
    id: str = ""
    name: str = ""
    description: str = ""
    created_at: str = ""
    updated_at: str = ""
    actor_id: str = ""
    run_id: str = ""
    size: int = 0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Bucket":
        return cls(
            id=_str(data, "id"),
            name=_str(data, "name"),
            description=_str(data, "description"),
            created_at=_str(data, "createdAt"),
            updated_at=_str(data, "updatedAt"),
            actor_id=_str(data, "actorId"),
            run_id=_str(data, "runId"),
            size=_int(data, "size"),
        )


@dataclass
class ListBucketsResponse:
    buckets: list[Bucket] = field(default_factory=list)
    total: int = 0


@dataclass
class ObjectInfo:
    id: str = ""
    path: str = ""
    size: int = 0
    filename: str = ""
    bucket_id: str = ""
    actor_id: str = ""
    run_id: str = ""
    file_type: str = ""
    created_at: str = ""
    updated_at: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ObjectInfo":
        return cls(
            id=_str(data, "id"),
            path=_str(data, "path"),
            size=_int(data, "size"),
            filename=_str(data, "filename"),
            bucket_id=_str(data, "bucketId"),
            actor_id=_str(data, "actorId"),
            run_id=_str(data, "runId"),
            file_type=_str(data, "fileType"),
            created_at=_str(data, "createdAt"),
            updated_at=_str(data, "updatedAt"),
        )


@dataclass
class ListObjectsResponse:
    objects: list[ObjectInfo] = field(default_factory=list)
    total: int = 0


# Queue


@dataclass
class Item:
    id: str = ""
    name: str = ""
    team_id: str = ""
    actor_id: str = ""
    run_id: str = ""
    description: str = ""
    created_at: str = ""
    updated_at: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Item":
        return cls(
            id=_str(data, "id"),
            name=_str(data, "name"),
            team_id=_str(data, "teamId"),
            actor_id=_str(data, "actorId"),
            run_id=_str(data, "runId"),
            description=_str(data, "description"),
            created_at=_str(data, "createdAt"),
            updated_at=_str(data, "updatedAt"),
        )


@dataclass
class ListQueuesResponse:
    items: list[Item] = field(default_factory=list)
    total: int = 0
    total_page: int = 0
    page: int = 0
    page_size: int = 0


@dataclass
class CreateQueueReq:
    name: str
    description: str = ""


@dataclass
class PushQueue:
    """A message to push; timeout is kept in [60, 300], deadline in [300, 86400] seconds."""

    name: str
    payload: bytes = b""
    retry: int = 0
    timeout: int = 0
    deadline: int = 0


@dataclass
class Msg:
    id: str = ""
    queue_id: str = ""
    name: str = ""
    payload: str = ""
    timeout: int = 0
    deadline: int = 0
    retry: int = 0
    retried: int = 0
    success_at: int = 0
    failed_at: int = 0
    desc: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Msg":
        return cls(
            id=_str(data, "id"),
            queue_id=_str(data, "queueId"),
            name=_str(data, "name"),
            payload=_str(data, "payload"),
            timeout=_int(data, "timeout"),
            deadline=_int(data, "deadline"),
            retry=_int(data, "retry"),
            retried=_int(data, "retried"),
            success_at=_int(data, "successAt"),
            failed_at=_int(data, "failedAt"),
            desc=_str(data, "desc"),
        )


# Vector


@dataclass
class Collection:
    id: str = ""
    name: str = ""
    team_id: str = ""
    actor_id: str = ""
    run_id: str = ""
    description: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    dimension: int = 0
    metric: str = ""
    stats: Stats = field(default_factory=Stats)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Collection":
        return cls(
            id=_str(data, "id"),
            name=_str(data, "name"),
            team_id=_str(data, "teamId"),
            actor_id=_str(data, "actorId"),
            run_id=_str(data, "runId"),
            description=_str(data, "description"),
            created_at=_parse_time(data.get("createdAt")),
            updated_at=_parse_time(data.get("updatedAt")),
            dimension=_int(data, "dimension"),
            metric=_str(data, "metric"),
            stats=Stats.from_dict(data.get("stats")),
        )


@dataclass
class Doc:
    id: str = ""
    vector: list[float] = field(default_factory=list)
    content: str = ""
    sparse_vector: dict[str, float] = field(default_factory=dict)
    score: float = 0.0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Doc":
        return cls(
            id=_str(data, "id"),
            vector=[float(v) for v in data.get("vector") or []],
            content=_str(data, "content"),
            sparse_vector={k: float(v) for k, v in (data.get("sparseVector") or {}).items()},
            score=float(data.get("score") or 0.0),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "vector": list(self.vector),
            "content": self.content,
            "sparseVector": dict(self.sparse_vector),
            "score": self.score,
        }


@dataclass
class BaseDoc:
    vector: list[float] = field(default_factory=list)
    content: str = ""
    sparse_vector: dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "vector": list(self.vector),
            "content": self.content,
            "sparseVector": dict(self.sparse_vector),
        }


@dataclass
class ListCollectionsResponse:
    items: list[Collection] = field(default_factory=list)
    total: int = 0
    page: int = 0
    page_size: int = 0
    total_page: int = 0


@dataclass
class CreateCollectionRequest:
    name: str
    description: str = ""
    dimension: int = 0
    actor_id: str = ""
    run_id: str = ""


@dataclass
class CreateCollectionResponse:
    coll: Collection = field(default_factory=Collection)


@dataclass
class DocOpResult:
    doc_op: str = ""
    id: str = ""
    code: int = 0
    message: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "DocOpResult":
        return cls(
            doc_op=_str(data, "docOp"),
            id=_str(data, "id"),
            code=_int(data, "code"),
            message=_str(data, "message"),
        )


@dataclass
class DocOpResponse:
    output: list[DocOpResult] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "DocOpResponse":
        return cls(output=[DocOpResult.from_dict(r) for r in data.get("output") or []])


@dataclass
class QueryVectorParam:
    """Vector query; topk outside [1, 1024] is reset to 1."""

    vector: list[float] = field(default_factory=list)
    sparse_vector: dict[str, float] = field(default_factory=dict)
    topk: int = 1
    include_vector: bool = False
    include_content: bool = False