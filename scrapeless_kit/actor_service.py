"""Actor service: start, inspect and abort actor runs and builds."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Protocol, Sequence

logger = logging.getLogger(__name__)


def _str(data: Mapping[str, Any], key: str) -> str:
    value = data.get(key)
    return "" if value is None else str(value)


def _int(data: Mapping[str, Any], key: str) -> int:
    return int(data.get(key) or 0)


@dataclass
class RunOptions:
    """Resources and version requested for a run."""

    cpu: int = 0
    memory: int = 0
    timeout: int = 0
    version: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "cpu": self.cpu,
            "memory": self.memory,
            "timeout": self.timeout,
            "version": self.version,
        }


@dataclass
class IRunActorData:
    """What to run: the actor, its input and its run options."""

    actor_id: str
    input: Any = None
    run_options: RunOptions = field(default_factory=RunOptions)

    def to_dict(self) -> dict[str, Any]:
        """The request body; the actor id travels separately."""
        return {"input": self.input, "runOptions": self.run_options.to_dict()}


@dataclass
class ResourceOptions:
    cpu: int = 0
    memory: int = 0
    server_mode: int = 0
    survival_time: int = 0
    timeout: int = 0
    version: str = ""

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "ResourceOptions":
        data = data or {}
        return cls(
            cpu=_int(data, "cpu"),
            memory=_int(data, "memory"),
            server_mode=_int(data, "serverMode"),
            survival_time=_int(data, "survivalTime"),
            timeout=_int(data, "timeout"),
            version=_str(data, "version"),
        )


@dataclass
class StorageInfo:
    bucket_id: str = ""
    dataset_id: str = ""
    kv_namespace_id: str = ""
    queue_id: str = ""

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "StorageInfo":
        data = data or {}
        return cls(
            bucket_id=_str(data, "bucketId"),
            dataset_id=_str(data, "datasetId"),
            kv_namespace_id=_str(data, "kvNamespaceId"),
            queue_id=_str(data, "queueId"),
        )


@dataclass
class RunInfo:
    actor_id: str = ""
    actor_name: str = ""
    finished_at: str = ""
    input: dict[str, Any] = field(default_factory=dict)
    input_schema: dict[str, Any] = field(default_factory=dict)
    origin: int = 0
    run_id: str = ""
    run_options: ResourceOptions = field(default_factory=ResourceOptions)
    scheduler_id: str = ""
    started_at: str = ""
    status: str = ""
    storage: StorageInfo = field(default_factory=StorageInfo)
    team_id: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RunInfo":
        return cls(
            actor_id=_str(data, "actorId"),
            actor_name=_str(data, "actorName"),
            finished_at=_str(data, "finishedAt"),
            input=dict(data.get("input") or {}),
            input_schema=dict(data.get("inputSchema") or {}),
            origin=_int(data, "origin"),
            run_id=_str(data, "runId"),
            run_options=ResourceOptions.from_dict(data.get("runOptions")),
            scheduler_id=_str(data, "schedulerId"),
            started_at=_str(data, "startedAt"),
            status=_str(data, "status"),
            storage=StorageInfo.from_dict(data.get("storage")),
            team_id=_str(data, "teamId"),
        )


@dataclass
class IPaginationParams:
    page: int = 0
    page_size: int = 0
    desc: bool = False


@dataclass
class BuildInfo:
    actor_id: str = ""
    build_id: str = ""
    duration: int = 0
    finished_at: str = ""
    image_size: str = ""
    repo_id: str = ""
    started_at: str = ""
    status: str = ""
    team_id: str = ""
    version: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "BuildInfo":
        return cls(
            actor_id=_str(data, "actorId"),
            build_id=_str(data, "buildId"),
            duration=_int(data, "duration"),
            finished_at=_str(data, "finishedAt"),
            image_size=_str(data, "imageSize"),
            repo_id=_str(data, "repoId"),
            started_at=_str(data, "startedAt"),
            status=_str(data, "status"),
            team_id=_str(data, "teamId"),
            version=_str(data, "version"),
        )


class ActorBackend(Protocol):
    """Remote actor API; mappings are decoded JSON objects."""

    def run(self, actor_id: str, payload: dict[str, Any]) -> str: ...

    def get_run_info(self, run_id: str) -> Mapping[str, Any]: ...

    def abort_run(self, actor_id: str, run_id: str) -> bool: ...

    def build(self, actor_id: str, version: str) -> str: ...

    def get_build_status(self, actor_id: str, build_id: str) -> Mapping[str, Any]: ...

    def abort_build(self, actor_id: str, build_id: str) -> bool: ...

    def get_run_list(
        self, page: int, page_size: int, desc: bool
    ) -> Optional[Sequence[Mapping[str, Any]]]: ...


class ActorService:
    """Start actor runs and builds and follow their progress."""

    def __init__(self, backend: ActorBackend):
        logger.info("Actor init")
        self._backend = backend

    def run(self, req: IRunActorData) -> str:
        """Start a run; returns its id."""
        return self._backend.run(req.actor_id, req.to_dict())

    def get_run_info(self, run_id) -> RunInfo:
        """Describe one run; only cpu and memory of its run options are reported."""
        try:
            data = self._backend.get_run_info(run_id)
        except Exception as exc:
            logger.error("get runInfo err:%s", exc)
            raise
        info = RunInfo.from_dict(data)
        info.run_options = ResourceOptions(
            cpu=info.run_options.cpu, memory=info.run_options.memory
        )
        return info

    def abort_run(self, actor_id, run_id) -> bool:
        return bool(self._backend.abort_run(actor_id, run_id))

    def build(self, actor_id, version) -> str:
        """Start building an actor version; returns the build id."""
        return self._backend.build(actor_id, version)

    def get_build_status(self, actor_id, build_id) -> BuildInfo:
        try:
            data = self._backend.get_build_status(actor_id, build_id)
        except Exception as exc:
            logger.error("get build status err:%s", exc)
            raise
        return BuildInfo.from_dict(data)

    def abort_build(self, actor_id, build_id) -> bool:
        return bool(self._backend.abort_build(actor_id, build_id))

    def get_run_list(self, pagination_params: IPaginationParams) -> list[RunInfo]:
        """List runs page by page, as given."""
        try:
            runs = self._backend.get_run_list(
                pagination_params.page, pagination_params.page_size, pagination_params.desc
            )
        except Exception as exc:
            logger.error("get run list err:%s", exc)
            raise
        return [RunInfo.from_dict(run) for run in runs or []]

    def close(self) -> None:
        """Close the backend if it holds resources."""
        closer = getattr(self._backend, "close", None)
        if callable(closer):
            closer()