import json
import threading

from data.recent import (
    RECENT_KEY,
    RecentAddressStore,
    SessionRecentAddresses,
    add_recent,
    recent_store,
)

ADDRESSES = [f"0x{i:040x}" for i in range(1, 7)]


def test_add_recent_prepends():
    assert add_recent(["b"], "a") == ["a", "b"]


def test_add_same_address_twice_keeps_one_entry_at_front():
    updated = add_recent(add_recent(["x", "y"], "y"), "y")
    assert updated == ["y", "x"]


def test_add_recent_is_case_sensitive():
    assert add_recent(["0xAB"], "0xab") == ["0xab", "0xAB"]


def test_sixth_address_evicts_oldest():
    recent = []
    for address in ADDRESSES:
        recent = add_recent(recent, address)

    assert len(recent) == 5
    assert recent[0] == ADDRESSES[-1]
    assert ADDRESSES[0] not in recent


def test_store_missing_file_is_empty(tmp_path):
    assert RecentAddressStore(tmp_path / "missing.json").load() == []


def test_store_persists_json_array(tmp_path):
    path = tmp_path / "nested" / "recent.json"
    store = RecentAddressStore(path)

    store.add(ADDRESSES[0])
    store.add(ADDRESSES[1])

    assert json.loads(path.read_text()) == [ADDRESSES[1], ADDRESSES[0]]
    assert RecentAddressStore(path).load() == [ADDRESSES[1], ADDRESSES[0]]


def test_store_ignores_malformed_file(tmp_path):
    path = tmp_path / "recent.json"
    path.write_text("{not json")
    store = RecentAddressStore(path)

    assert store.load() == []
    assert store.add("0x1") == ["0x1"]


def test_store_ignores_non_list_json(tmp_path):
    path = tmp_path / "recent.json"
    path.write_text(json.dumps({"a": 1}))

    assert RecentAddressStore(path).load() == []


def test_store_save_failure_is_logged_not_raised(tmp_path, caplog):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("")
    store = RecentAddressStore(blocker / "recent.json")

    assert store.add(ADDRESSES[0]) == [ADDRESSES[0]]
    assert "Could not save recent addresses" in caplog.text
    assert store.load() == []


def test_store_concurrent_adds_keep_every_address(tmp_path):
    store = RecentAddressStore(tmp_path / "recent.json")
    threads = [threading.Thread(target=store.add, args=(a,)) for a in ADDRESSES[:5]]

    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert sorted(store.load()) == sorted(ADDRESSES[:5])


def test_session_addresses_are_kept_per_state():
    first, second = {}, {}

    SessionRecentAddresses(first).add(ADDRESSES[0])
    SessionRecentAddresses(second).add(ADDRESSES[1])

    assert SessionRecentAddresses(first).load() == [ADDRESSES[0]]
    assert SessionRecentAddresses(second).load() == [ADDRESSES[1]]
    assert json.loads(first[RECENT_KEY]) == [ADDRESSES[0]]


def test_session_addresses_ignore_malformed_value():
    state = {RECENT_KEY: "[oops"}

    assert SessionRecentAddresses(state).load() == []
    assert SessionRecentAddresses(state).add("0x1") == ["0x1"]


def test_recent_store_is_per_session_unless_file_configured(monkeypatch, tmp_path):
    monkeypatch.delenv("RECENT_ADDRESSES_FILE", raising=False)
    assert isinstance(recent_store({}), SessionRecentAddresses)

    monkeypatch.setenv("RECENT_ADDRESSES_FILE", str(tmp_path / "recent.json"))
    store = recent_store({})
    assert isinstance(store, RecentAddressStore)
    assert store.path == str(tmp_path / "recent.json")
