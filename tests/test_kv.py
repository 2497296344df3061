import pytest

from scrapeless_kit.storage.kv import KV
from scrapeless_kit.storage.models import BulkItem, Stats


class FakeKV:
    def __init__(self):
        self.calls = []
        self.store = {}
        self.keys_response = {"items": [{"key": "a"}], "total": 1, "page": 1, "pageSize": 10}

    def list_namespaces(self, page, page_size, desc):
        self.calls.append(("list_namespaces", page, page_size, desc))
        return {
            "items": [{"id": "n1", "name": "one", "stats": {"count": 2, "size": 5}}],
            "total": 1,
        }

    def create_namespace(self, name, actor_id, run_id):
        self.calls.append(("create_namespace", name, actor_id, run_id))
        return "ns-id"

    def get_namespace(self, namespace_name):
        return {"id": "n2", "name": namespace_name}

    def del_namespace(self, namespace_id):
        return namespace_id == "n1"

    def rename_namespace(self, namespace_id, name):
        self.calls.append(("rename_namespace", namespace_id, name))
        return True

    def list_keys(self, namespace_id, page, size):
        self.calls.append(("list_keys", namespace_id, page, size))
        return self.keys_response

    def del_value(self, namespace_id, key):
        return self.store.pop((namespace_id, key), None) is not None

    def bulk_set_value(self, namespace_id, items):
        for item in items:
            self.store[(namespace_id, item["key"])] = item["value"]
        return len(items)

    def bulk_del_value(self, namespace_id, keys):
        for key in keys:
            self.store.pop((namespace_id, key), None)
        return True

    def set_value(self, namespace_id, key, value, expiration):
        self.calls.append(("set_value", expiration))
        self.store[(namespace_id, key)] = value
        return True

    def get_value(self, namespace_id, key):
        try:
            return self.store[(namespace_id, key)]
        except KeyError:
            raise LookupError(key) from None


@pytest.fixture
def backend():
    return FakeKV()


@pytest.fixture
def kv(backend):
    return KV(backend, actor_id="actor", run_id="run")


def test_list_namespaces_clamps_and_parses(kv, backend):
    resp = kv.list_namespaces(0, 3, True)
    assert backend.calls[-1] == ("list_namespaces", 1, 10, True)
    assert resp.total == 1
    assert resp.items[0].id == "n1"
    assert resp.items[0].stats == Stats(count=2, size=5)


def test_create_namespace_appends_run_id(kv, backend):
    namespace_id, name = kv.create_namespace("cache")
    assert (namespace_id, name) == ("ns-id", "cache-run")
    assert backend.calls[-1] == ("create_namespace", "cache-run", "actor", "run")


def test_rename_namespace_appends_run_id(kv, backend):
    assert kv.rename_namespace("n1", "fresh") == (True, "fresh-run")
    assert backend.calls[-1] == ("rename_namespace", "n1", "fresh-run")


def test_get_and_delete_namespace(kv):
    assert kv.get_namespace("abc").name == "abc"
    assert kv.del_namespace("n1") is True
    assert kv.del_namespace("other") is False


def test_list_keys_clamps_and_parses(kv, backend):
    keys = kv.list_keys("n1", -1, 0)
    assert backend.calls[-1] == ("list_keys", "n1", 1, 10)
    assert keys.items == [{"key": "a"}]


def test_list_keys_none_passes_through(kv, backend):
    backend.keys_response = None
    assert kv.list_keys("n1", 1, 10) is None


def test_set_get_delete_round_trip(kv, backend):
    assert kv.set_value("n1", "k", "v", 60) is True
    assert backend.calls[-1] == ("set_value", 60)
    assert kv.get_value("n1", "k") == "v"
    assert kv.del_value("n1", "k") is True
    assert kv.del_value("n1", "k") is False


def test_bulk_set_and_delete(kv):
    count = kv.bulk_set_value("n1", [BulkItem("a", "1"), BulkItem("b", "2", 5)])
    assert count == 2
    assert kv.get_value("n1", "b") == "2"
    assert kv.bulk_del_value("n1", ["a", "b"]) is True
    with pytest.raises(LookupError):
        kv.get_value("n1", "a")


def test_backend_error_propagates(kv):
    with pytest.raises(LookupError):
        kv.get_value("n1", "missing")