# Titanic Model Selection Configuration
import os
from typing import List, Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator


def project_root() -> str:
    """Return the directory holding this file (the project root)."""
    return os.path.abspath(os.path.dirname(__file__))


class CvControl(BaseModel):
    """Cross-validation control shared by every training call."""

    model_config = ConfigDict(frozen=True)

    folds: int = Field(10, ge=2)
    repeats: int = Field(3, ge=1)
    metric: str = "roc_auc"
    parallel: bool = True
    seed: int = 432


class LogConfig(BaseModel):
    dir: str = "logs"
    rotation: str = "1 day"
    retention: str = "30 days"
    level: str = "INFO"


class DataConfig(BaseModel):
    train_path: str = "train.csv"
    test_path: str = "test.csv"
    na_values: List[str] = Field(default_factory=lambda: ["NA", ""])
    submission_path: str = "submission.csv"


class SelectionConfig(BaseModel):
    formula: str = "Survived ~ ."
    algorithms: List[str] = Field(default_factory=lambda: ["knn", "nb", "glmboost"])
    preprocess: List[Literal["impute", "zv", "center", "scale"]] = Field(
        default_factory=lambda: ["impute", "center", "scale"]
    )
    search_width: int = Field(5, ge=1)
    cv: CvControl = Field(default_factory=CvControl)
    model_dir: str = "models"
    persist_attempts: int = Field(3, ge=1)

    @field_validator("algorithms")
    @classmethod
    def _algorithms_not_empty(cls, value):
        if not value:
            raise ValueError("at least one algorithm is required")
        duplicates = sorted({a for a in value if value.count(a) > 1})
        if duplicates:
            raise ValueError(f"algorithms listed more than once: {duplicates}")
        return value


class AppConfig(BaseModel):
    log: LogConfig = Field(default_factory=LogConfig)
    data: DataConfig = Field(default_factory=DataConfig)
    selection: SelectionConfig = Field(default_factory=SelectionConfig)

    @classmethod
    def load(cls, path: str | None = None) -> "AppConfig":
        """Load YAML configuration, defaulting to <project_root>/config.yml."""
        if path is None:
            path = os.path.join(project_root(), "config.yml")

        if not os.path.exists(path):
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
        return cls(**raw)
