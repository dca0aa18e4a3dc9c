import os

from pipeline.artifact_store import ArtifactStore


def test_put_returns_path_inside_store(store):
    path = store.put("abc.mp3")
    assert os.path.dirname(path) == store.base_dir
    assert not os.path.exists(path)


def test_put_strips_directories(store):
    assert store.put("../../etc/passwd") == os.path.join(store.base_dir, "passwd")


def test_get_only_returns_existing_files(store):
    assert store.get("abc.mp3") is None
    path = store.put("abc.mp3")
    open(path, "wb").close()
    assert store.get("abc.mp3") == path


def test_list_is_sorted_and_prefix_filtered(store):
    for name in ["a_part_002.mp3", "a_part_000.mp3", "b_part_000.mp3", "a_part_001.mp3"]:
        open(store.put(name), "wb").close()
    assert [os.path.basename(p) for p in store.list("a_part_")] == [
        "a_part_000.mp3",
        "a_part_001.mp3",
        "a_part_002.mp3",
    ]


def test_remove_is_best_effort(store, monkeypatch):
    path = store.put("abc.mp3")
    assert store.remove(path) is False
    assert store.remove(None) is False
    open(path, "wb").close()

    def boom(p):
        raise PermissionError("denied")

    monkeypatch.setattr("pipeline.artifact_store.os.remove", boom)
    assert store.remove(path) is False
    assert os.path.exists(path)


def test_clear_empties_the_store(store):
    for name in ["one.mp3", "two.mp3"]:
        open(store.put(name), "wb").close()
    assert store.clear() == 2
    assert os.listdir(store.base_dir) == []
    assert store.clear() == 0


def test_clear_recreates_missing_directory(tmp_path):
    store = ArtifactStore(str(tmp_path / "temp"))
    os.rmdir(store.base_dir)
    assert store.clear() == 0
    assert os.path.isdir(store.base_dir)
