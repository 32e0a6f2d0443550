# Score ledger and in-memory model registry for one selection run
import math
from dataclasses import dataclass

import pandas as pd

from errors import NoViableModelError
from resampling import ResamplingPolicy


@dataclass(frozen=True)
class ScoreRecord:
    model_id: str
    score: float
    artifact_id: str
    persisted: bool = True


class ScoreLedger:
    """Append-only table of scored models, kept in insertion order."""

    def __init__(self):
        self._records = []

    def append(self, record: ScoreRecord):
        if any(r.model_id == record.model_id for r in self._records):
            raise ValueError(f"Model '{record.model_id}' is already in the ledger")
        self._records.append(record)

    def extend(self, records):
        for record in records:
            self.append(record)

    def __len__(self):
        return len(self._records)

    def best(self) -> ScoreRecord:
        """Highest score wins; on equal scores the earliest record is kept.

        Records with a NaN score never win; a ledger holding only those has
        no viable model.
        """
        best = None
        for record in self._records:
            if math.isnan(record.score):
                continue
            if best is None or record.score > best.score:
                best = record
        if best is None:
            raise NoViableModelError()
        return best

    def to_frame(self):
        """Ledger as a DataFrame, best first (stable, so ties keep insertion order)."""
        frame = pd.DataFrame(
            [(r.model_id, r.score, r.artifact_id, r.persisted) for r in self._records],
            columns=["model", "score", "artifact", "persisted"],
        )
        return frame.sort_values("score", ascending=False, kind="mergesort").reset_index(drop=True)


class ModelRegistry:
    """Trained models keyed by (algorithm, policy); failed combinations are absent."""

    def __init__(self):
        self._models = {}

    def add(self, model):
        self._models[(model.algorithm, model.policy)] = model

    def get(self, algorithm, policy):
        return self._models.get((algorithm, policy))

    def has_original(self, algorithm):
        return (algorithm, ResamplingPolicy.ORIGINAL) in self._models

    def models_for(self, algorithm):
        return [m for (alg, _), m in self._models.items() if alg == algorithm]

    def algorithms_with_original(self):
        return [alg for (alg, policy) in self._models if policy is ResamplingPolicy.ORIGINAL]

    def all_models(self):
        return list(self._models.values())

    def __len__(self):
        return len(self._models)
