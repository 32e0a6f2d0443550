import os

import pytest

from errors import PersistenceError
from persistence import ModelStore


def test_save_load_roundtrip(store):
    store.save("knn.ori.model", {"k": 5})
    assert store.exists("knn.ori.model")
    assert store.load("knn.ori.model") == {"k": 5}
    assert store.created == ["knn.ori.model"]


def test_cleanup_keeps_only_the_winner(store):
    for tag in ["ori", "up", "down", "rose", "smote"]:
        store.save(f"nb.{tag}.model", tag)

    failed = store.cleanup(keep="nb.rose.model")

    assert failed == []
    assert store.list_artifacts() == ["nb.rose.model"]


def test_cleanup_leaves_files_from_earlier_runs_alone(tmp_path):
    directory = str(tmp_path / "models")
    ModelStore(directory).save("old.ori.model", 1)

    store = ModelStore(directory, attempts=1, retry_delay=0)
    store.save("new.ori.model", 2)
    store.save("new.up.model", 3)
    store.cleanup(keep="new.up.model")

    assert store.list_artifacts() == ["new.up.model", "old.ori.model"]


def test_load_missing_artifact_raises(store):
    with pytest.raises(PersistenceError, match="load"):
        store.load("missing.model")


def test_delete_missing_artifact_raises(store):
    with pytest.raises(PersistenceError, match="delete"):
        store.delete("missing.model")


def test_delete_is_retried(tmp_path, monkeypatch):
    store = ModelStore(str(tmp_path / "models"), attempts=3, retry_delay=0)
    store.save("a.ori.model", 1)
    real_remove = os.remove
    calls = {"n": 0}

    def remove(path):
        calls["n"] += 1
        if calls["n"] < 3:
            raise PermissionError("busy")
        real_remove(path)

    monkeypatch.setattr(os, "remove", remove)
    store.delete("a.ori.model")

    assert calls["n"] == 3
    assert store.list_artifacts() == []
