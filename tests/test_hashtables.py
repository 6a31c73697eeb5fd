import threading

import pytest

from kvtoolkit.hashtables import (
    LockStlHashtable,
    RandHashtable,
    ScanHashtable,
    StlHashtable,
    StringHashtable,
)

TABLE_IDS = ["stl", "lock_stl", "rand", "scan"]


def _filled(cls):
    table = cls()
    for i, key in enumerate(["a", "b", "c", "d"]):
        assert table.insert(key, i)
    return table


@pytest.mark.parametrize(
    "cls", [StlHashtable, LockStlHashtable, RandHashtable, ScanHashtable], ids=TABLE_IDS
)
def test_insert_and_get(cls):
    table = cls()
    assert table.insert("user1", "v1") is True
    assert table.get("user1") == "v1"
    assert len(table) == 1


@pytest.mark.parametrize(
    "cls", [StlHashtable, LockStlHashtable, RandHashtable, ScanHashtable], ids=TABLE_IDS
)
def test_duplicate_insert_rejected(cls):
    table = cls()
    table.insert("k", 1)
    assert table.insert("k", 2) is False
    assert table.get("k") == 1


@pytest.mark.parametrize(
    "cls", [StlHashtable, LockStlHashtable, RandHashtable, ScanHashtable], ids=TABLE_IDS
)
def test_insert_none_key_rejected(cls):
    table = cls()
    assert table.insert(None, 1) is False
    assert len(table) == 0


@pytest.mark.parametrize(
    "cls", [StlHashtable, LockStlHashtable, RandHashtable, ScanHashtable], ids=TABLE_IDS
)
def test_get_missing_returns_none(cls):
    table = cls()
    assert table.get("missing") is None


@pytest.mark.parametrize(
    "cls", [StlHashtable, LockStlHashtable, RandHashtable, ScanHashtable], ids=TABLE_IDS
)
def test_update_returns_old_value(cls):
    table = cls()
    table.insert("k", "old")
    assert table.update("k", "new") == "old"
    assert table.get("k") == "new"


@pytest.mark.parametrize(
    "cls", [StlHashtable, LockStlHashtable, RandHashtable, ScanHashtable], ids=TABLE_IDS
)
def test_update_missing_returns_none_and_does_not_insert(cls):
    table = cls()
    assert table.update("k", "v") is None
    assert len(table) == 0


@pytest.mark.parametrize(
    "cls", [StlHashtable, LockStlHashtable, RandHashtable, ScanHashtable], ids=TABLE_IDS
)
def test_remove(cls):
    table = cls()
    table.insert("k", "v")
    assert table.remove("k") == "v"
    assert table.get("k") is None
    assert len(table) == 0
    assert table.remove("k") is None


@pytest.mark.parametrize(
    "cls", [StlHashtable, LockStlHashtable, RandHashtable, ScanHashtable], ids=TABLE_IDS
)
def test_entries_all(cls):
    table = _filled(cls)
    assert sorted(table.entries()) == [("a", 0), ("b", 1), ("c", 2), ("d", 3)]


@pytest.mark.parametrize(
    "cls", [StlHashtable, LockStlHashtable, RandHashtable, ScanHashtable], ids=TABLE_IDS
)
def test_entries_limited(cls):
    table = _filled(cls)
    limited = table.entries(n=2)
    assert len(limited) == 2
    assert limited == table.entries()[:2]


@pytest.mark.parametrize(
    "cls", [StlHashtable, LockStlHashtable, RandHashtable, ScanHashtable], ids=TABLE_IDS
)
def test_entries_from_key_is_suffix(cls):
    table = _filled(cls)
    everything = table.entries()
    from_c = table.entries("c")
    assert from_c[0] == ("c", 2)
    assert everything[-len(from_c):] == from_c


@pytest.mark.parametrize(
    "cls", [StlHashtable, LockStlHashtable, RandHashtable, ScanHashtable], ids=TABLE_IDS
)
def test_entries_from_key_with_limit(cls):
    table = _filled(cls)
    assert table.entries("b", 1) == [("b", 1)]


@pytest.mark.parametrize(
    "cls", [StlHashtable, LockStlHashtable, RandHashtable, ScanHashtable], ids=TABLE_IDS
)
def test_entries_missing_key_empty(cls):
    table = _filled(cls)
    assert table.entries("zzz") == []


@pytest.mark.parametrize(
    "cls", [StlHashtable, LockStlHashtable, RandHashtable, ScanHashtable], ids=TABLE_IDS
)
def test_entries_zero_limit(cls):
    table = _filled(cls)
    assert table.entries(n=0) == []


@pytest.mark.parametrize(
    "cls", [StlHashtable, LockStlHashtable, RandHashtable, ScanHashtable], ids=TABLE_IDS
)
def test_is_string_hashtable(cls):
    table = cls()
    assert isinstance(table, StringHashtable)
    assert table.entries() == []


def test_stl_parameters_validated():
    with pytest.raises(ValueError):
        StlHashtable(11, 0.0)
    with pytest.raises(ValueError):
        StlHashtable(-1, 2.0)


def test_stl_parameters_kept():
    t = StlHashtable(64, 1.5)
    assert t.num_buckets == 64
    assert t.max_load_factor == 1.5


@pytest.mark.parametrize(
    "cls", [StlHashtable, LockStlHashtable, RandHashtable, ScanHashtable], ids=TABLE_IDS
)
def test_get_none_key_raises(cls):
    table = cls()
    with pytest.raises(TypeError):
        table.get(None)


@pytest.mark.parametrize("cls", [LockStlHashtable, RandHashtable, ScanHashtable])
def test_concurrent_inserts(cls):
    t = cls()
    per_thread = 200

    def work(tid):
        for i in range(per_thread):
            t.insert(f"t{tid}-{i}", i)
            t.insert("shared", tid)

    threads = [threading.Thread(target=work, args=(tid,)) for tid in range(8)]
    for th in threads:
        th.start()
    for th in threads:
        th.join()
    assert len(t) == 8 * per_thread + 1
    assert len(t.entries()) == len(t)


@pytest.mark.parametrize("cls", [LockStlHashtable, RandHashtable, ScanHashtable])
def test_concurrent_updates_and_scans(cls):
    t = cls()
    for i in range(50):
        t.insert(f"k{i}", 0)

    def updater():
        for _ in range(100):
            for i in range(50):
                t.update(f"k{i}", 1)

    scans = []

    def scanner():
        for _ in range(50):
            scans.append(len(t.entries()))

    threads = [threading.Thread(target=updater), threading.Thread(target=scanner)]
    for th in threads:
        th.start()
    for th in threads:
        th.join()
    assert all(count == 50 for count in scans)
    assert all(value == 1 for _, value in t.entries())