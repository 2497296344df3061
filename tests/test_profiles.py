from datetime import datetime, timezone

import pytest

from scrapeless_kit.profiles import ListProfileRequest, Profile, ProfileInfo


class FakeBackend:
    def __init__(self):
        self.calls = []
        self.profiles = {}

    def _record(self, profile_id, name):
        return {
            "profileId": profile_id,
            "name": name,
            "size": 2048,
            "count": 3,
            "lastModifyAt": "2024-05-01T10:00:00Z",
            "createdAt": "2024-04-30T08:30:00.123456789Z",
        }

    def create(self, name):
        self.calls.append(("create", name))
        profile_id = f"p{len(self.profiles) + 1}"
        self.profiles[profile_id] = name
        return self._record(profile_id, name)

    def get(self, profile_id):
        self.calls.append(("get", profile_id))
        if profile_id not in self.profiles:
            raise KeyError(profile_id)
        return self._record(profile_id, self.profiles[profile_id])

    def list(self, name, page, page_size):
        self.calls.append(("list", name, page, page_size))
        items = [self._record(pid, n) for pid, n in self.profiles.items()]
        return {"items": items, "total": len(items), "page": page, "pageSize": page_size, "totalPage": 1}

    def update(self, profile_id, name):
        self.calls.append(("update", profile_id, name))
        found = profile_id in self.profiles
        if found:
            self.profiles[profile_id] = name
        return {"success": found}

    def delete(self, profile_id):
        self.calls.append(("delete", profile_id))
        return {"success": self.profiles.pop(profile_id, None) is not None}


@pytest.fixture
def backend():
    return FakeBackend()


def test_create_with_empty_name_uses_untitled(backend):
    info = Profile(backend).create_profile("")
    assert backend.calls == [("create", "untitled")]
    assert info.name == "untitled"


def test_create_parses_fields(backend):
    info = Profile(backend).create_profile("shop")
    assert info.profile_id == "p1"
    assert info.size == 2048
    assert info.count == 3
    assert info.last_modify_at == datetime(2024, 5, 1, 10, 0, tzinfo=timezone.utc)
    assert info.created_at.tzinfo is not None
    assert info.created_at.microsecond == 123456


def test_get_roundtrip(backend):
    profiles = Profile(backend)
    created = profiles.create_profile("shop")
    assert profiles.get_profile(created.profile_id) == created


def test_get_error_propagates(backend):
    with pytest.raises(KeyError):
        Profile(backend).get_profile("missing")


def test_list_requires_request(backend):
    with pytest.raises(ValueError):
        Profile(backend).list_profiles(None)


def test_list_passes_parameters(backend):
    profiles = Profile(backend)
    profiles.create_profile("a")
    profiles.create_profile("b")
    resp = profiles.list_profiles(ListProfileRequest(page=2, page_size=20, name="a"))
    assert backend.calls[-1] == ("list", "a", 2, 20)
    assert [item.name for item in resp.items] == ["a", "b"]
    assert resp.total == 2
    assert resp.page == 2
    assert resp.page_size == 20


def test_update_and_delete(backend):
    profiles = Profile(backend)
    created = profiles.create_profile("old")
    assert profiles.update_profile(created.profile_id, "new") is True
    assert profiles.get_profile(created.profile_id).name == "new"
    assert profiles.delete_profile(created.profile_id) is True
    assert profiles.delete_profile(created.profile_id) is False
    assert profiles.update_profile(created.profile_id, "again") is False


def test_from_dict_missing_times():
    info = ProfileInfo.from_dict({"profileId": "x", "name": "n"})
    assert info.last_modify_at is None
    assert info.created_at is None
    assert info.size == 0