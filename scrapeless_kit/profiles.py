"""Browser profile management on top of a profile backend."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Mapping, Optional, Protocol

logger = logging.getLogger(__name__)

_FRACTION = re.compile(r"(\.\d{6})\d+")


def _parse_time(value: Any) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    text = str(value)
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    text = _FRACTION.sub(r"\1", text)
    return datetime.fromisoformat(text)


@dataclass
class ProfileInfo:
    profile_id: str = ""
    name: str = ""
    size: int = 0
    count: int = 0
    last_modify_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ProfileInfo":
        return cls(
            profile_id=data.get("profileId", ""),
            name=data.get("name", ""),
            size=int(data.get("size") or 0),
            count=int(data.get("count") or 0),
            last_modify_at=_parse_time(data.get("lastModifyAt")),
            created_at=_parse_time(data.get("createdAt")),
        )


@dataclass
class ListProfileRequest:
    page: int = 0
    page_size: int = 0
    name: Optional[str] = None


@dataclass
class ListProfileResponse:
    items: list[ProfileInfo] = field(default_factory=list)
    total: int = 0
    page: int = 0
    page_size: int = 0
    total_page: int = 0


class ProfileBackend(Protocol):
    """Remote profile API; every call returns the decoded JSON object."""

    def create(self, name: str) -> Mapping[str, Any]: ...

    def get(self, profile_id: str) -> Mapping[str, Any]: ...

    def list(self, name: Optional[str], page: int, page_size: int) -> Mapping[str, Any]: ...

    def update(self, profile_id: str, name: str) -> Mapping[str, Any]: ...

    def delete(self, profile_id: str) -> Mapping[str, Any]: ...


class Profile:
    """Create, inspect, list, rename and delete browser profiles."""

    def __init__(self, backend: ProfileBackend):
        logger.info("Internal Profile init")
        self._backend = backend

    def create_profile(self, name="") -> ProfileInfo:
        """Create a profile; an empty name becomes ``untitled``."""
        try:
            resp = self._backend.create(name or "untitled")
        except Exception as exc:
            logger.error("create profile err:%s", exc)
            raise
        return ProfileInfo.from_dict(resp)

    def get_profile(self, profile_id) -> ProfileInfo:
        try:
            resp = self._backend.get(profile_id)
        except Exception as exc:
            logger.error("get profile err:%s", exc)
            raise
        return ProfileInfo.from_dict(resp)

    def list_profiles(self, req: Optional[ListProfileRequest]) -> ListProfileResponse:
        """List profiles page by page, optionally filtered by name."""
        if req is None:
            raise ValueError("req is None")
        try:
            resp = self._backend.list(req.name, req.page, req.page_size)
        except Exception as exc:
            logger.error("list profile err:%s", exc)
            raise
        return ListProfileResponse(
            items=[ProfileInfo.from_dict(item) for item in resp.get("items") or []],
            total=int(resp.get("total") or 0),
            page=int(resp.get("page") or 0),
            page_size=int(resp.get("pageSize") or 0),
            total_page=int(resp.get("totalPage") or 0),
        )

    def update_profile(self, profile_id, name) -> bool:
        """Rename a profile; returns whether the service reported success."""
        try:
            resp = self._backend.update(profile_id, name)
        except Exception as exc:
            logger.error("update profile err:%s", exc)
            raise
        return bool(resp.get("success", False))

    def delete_profile(self, profile_id) -> bool:
        try:
            resp = self._backend.delete(profile_id)
        except Exception as exc:
            logger.error("delete profile err:%s", exc)
            raise
        return bool(resp.get("success", False))

    def close(self) -> None:
        """Close the backend if it holds resources."""
        closer = getattr(self._backend, "close", None)
        if callable(closer):
            closer()