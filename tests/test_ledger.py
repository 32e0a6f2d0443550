import pytest

from errors import NoViableModelError
from ledger import ModelRegistry, ScoreLedger, ScoreRecord
from resampling import ResamplingPolicy


def _ledger(*rows):
    ledger = ScoreLedger()
    for model_id, score in rows:
        ledger.append(ScoreRecord(model_id, score, f"{model_id}.model"))
    return ledger


def test_best_returns_highest_score():
    ledger = _ledger(("knn.ori", 0.81), ("knn.smote", 0.87), ("nb.ori", 0.79))
    assert ledger.best().artifact_id == "knn.smote.model"


def test_best_prefers_earliest_record_on_tie():
    ledger = _ledger(("knn.up", 0.85), ("nb.ori", 0.85), ("nb.up", 0.80))
    assert ledger.best().model_id == "knn.up"


def test_best_is_stable_on_a_frozen_ledger():
    ledger = _ledger(("a.ori", 0.7), ("b.ori", 0.9), ("c.ori", 0.9))
    assert {ledger.best().model_id for _ in range(5)} == {"b.ori"}


def test_empty_ledger_has_no_viable_model():
    with pytest.raises(NoViableModelError):
        ScoreLedger().best()


def test_duplicate_model_id_is_rejected():
    ledger = _ledger(("knn.ori", 0.7))
    with pytest.raises(ValueError, match="already in the ledger"):
        ledger.append(ScoreRecord("knn.ori", 0.8, "knn.ori.model"))
    assert len(ledger) == 1


def test_to_frame_sorts_best_first_keeping_ties_in_order():
    frame = _ledger(("a.ori", 0.7), ("b.ori", 0.9), ("c.ori", 0.9)).to_frame()
    assert frame["model"].tolist() == ["b.ori", "c.ori", "a.ori"]
    assert frame.columns.tolist() == ["model", "score", "artifact", "persisted"]


class _Model:
    def __init__(self, algorithm, policy):
        self.algorithm = algorithm
        self.policy = policy


def test_registry_tracks_original_variants():
    registry = ModelRegistry()
    registry.add(_Model("knn", ResamplingPolicy.ORIGINAL))
    registry.add(_Model("knn", ResamplingPolicy.SMOTE))
    registry.add(_Model("nb", ResamplingPolicy.ROSE))

    assert registry.has_original("knn")
    assert not registry.has_original("nb")
    assert registry.algorithms_with_original() == ["knn"]
    assert len(registry.models_for("knn")) == 2
    assert registry.get("nb", ResamplingPolicy.ORIGINAL) is None
    assert len(registry) == 3


def test_nan_score_never_wins():
    ledger = _ledger(("knn.ori", float("nan")), ("knn.up", 0.6), ("nb.ori", 0.7))
    assert ledger.best().model_id == "nb.ori"


def test_ledger_of_only_nan_scores_has_no_viable_model():
    with pytest.raises(NoViableModelError):
        _ledger(("knn.ori", float("nan")), ("nb.ori", float("nan"))).best()
