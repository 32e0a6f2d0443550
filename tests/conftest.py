# tests/conftest.py
import matplotlib

matplotlib.use("Agg")

import numpy as np
import pandas as pd
import pytest
from loguru import logger

from config import CvControl
from errors import TrainingFailure
from estimators import TrainedModel, TrainingSpec
from persistence import ModelStore


@pytest.fixture(autouse=True)
def disable_file_logger():
    logger.remove()
    logger.add(lambda msg: None)
    yield


@pytest.fixture
def imbalanced_frame():
    """120 rows, roughly 30% positives, with signal in x1 and x2."""
    rng = np.random.default_rng(7)
    n = 120
    x1 = rng.normal(size=n)
    x2 = rng.normal(size=n)
    x3 = rng.normal(size=n)
    y = (x1 + 0.5 * x2 + rng.normal(scale=0.5, size=n) > 0.6).astype(int)
    return pd.DataFrame({"x1": x1, "x2": x2, "x3": x3, "Survived": y})


@pytest.fixture
def fast_cv():
    return CvControl(folds=3, repeats=1, parallel=False, seed=1)


@pytest.fixture
def make_spec(imbalanced_frame, fast_cv):
    def _make(algorithms, **kwargs):
        kwargs.setdefault("search_width", 2)
        return TrainingSpec(formula="Survived ~ .", data=imbalanced_frame,
                            algorithms=algorithms, cv=fast_cv, **kwargs)
    return _make


@pytest.fixture
def store(tmp_path):
    return ModelStore(str(tmp_path / "models"), attempts=1, retry_delay=0)


class FakeTrainer:
    """Returns canned scores per (algorithm, policy tag) and records every call."""

    def __init__(self, scores=None, fail=(), default=0.5):
        self.scores = scores or {}
        self.fail = set(fail)
        self.default = default
        self.calls = []

    def __call__(self, algorithm, policy, spec):
        key = f"{algorithm}.{policy.tag}"
        self.calls.append(key)
        if key in self.fail or algorithm in self.fail:
            raise TrainingFailure(algorithm, policy, ValueError("did not converge"))
        score = self.scores.get(key, self.default)
        return TrainedModel(
            algorithm=algorithm,
            policy=policy,
            estimator=None,
            score=score,
            resample_scores=np.array([score - 0.01, score, score + 0.01]),
        )


@pytest.fixture
def fake_trainer():
    return FakeTrainer


def no_importance(model, spec):
    return None


@pytest.fixture
def skip_importance():
    return no_importance
