# Trainable estimators and the training adapter used by the model selector
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional, Tuple

import numpy as np
import pandas as pd
import scipy.stats as stats  # allows you to define distributions
from imblearn.pipeline import Pipeline
from loguru import logger
from sklearn.ensemble import AdaBoostClassifier, GradientBoostingClassifier, RandomForestClassifier
from sklearn.feature_selection import VarianceThreshold
from sklearn.impute import SimpleImputer
from sklearn.inspection import permutation_importance
from sklearn.linear_model import LogisticRegression
from sklearn.model_selection import RandomizedSearchCV, RepeatedStratifiedKFold
from sklearn.naive_bayes import GaussianNB
from sklearn.neighbors import KNeighborsClassifier
from sklearn.preprocessing import StandardScaler
from sklearn.tree import DecisionTreeClassifier
from xgboost import XGBClassifier

from config import CvControl
from errors import TrainingFailure
from resampling import ResamplingPolicy, make_sampler

PREPROCESS_DIRECTIVES = ("impute", "zv", "center", "scale")

# algorithm id -> factory(seed) returning (classifier, param_distributions)
ESTIMATORS: Dict[str, Callable] = {}


def register_estimator(name):
    """Register a factory under an algorithm id, e.g. @register_estimator("knn")."""

    def decorator(factory):
        ESTIMATORS[name] = factory
        return factory

    return decorator


def get_estimator(name):
    try:
        return ESTIMATORS[name]
    except KeyError:
        raise KeyError(f"Unknown algorithm '{name}'. Available: {sorted(ESTIMATORS)}") from None


@register_estimator("knn")
def _knn(seed):
    return KNeighborsClassifier(), {
        "model__n_neighbors": stats.randint(3, 31),
        "model__weights": ["uniform", "distance"],
    }


@register_estimator("nb")
def _naive_bayes(seed):
    return GaussianNB(), {"model__var_smoothing": stats.loguniform(1e-11, 1e-6)}


@register_estimator("glmboost")
def _glmboost(seed):
    # shallow trees keep the boosted model close to an additive linear fit
    return GradientBoostingClassifier(random_state=seed), {
        "model__n_estimators": stats.randint(50, 201),
        "model__learning_rate": stats.loguniform(0.01, 0.3),
        "model__max_depth": [1, 2],
    }


@register_estimator("logreg")
def _logistic_regression(seed):
    return LogisticRegression(max_iter=1000, random_state=seed), {
        "model__C": stats.loguniform(1e-3, 1e2),
    }


@register_estimator("dt")
def _decision_tree(seed):
    return DecisionTreeClassifier(random_state=seed), {
        "model__max_depth": [3, 5, 7, None],
        "model__min_samples_split": [2, 5, 10],
        "model__min_samples_leaf": [1, 2, 4],
        "model__criterion": ["gini", "entropy"],
    }


@register_estimator("rf")
def _random_forest(seed):
    return RandomForestClassifier(random_state=seed), {
        "model__n_estimators": [100, 200],
        "model__max_depth": [None, 5, 10],
        "model__min_samples_split": [2, 5],
        "model__min_samples_leaf": [1, 2],
    }


@register_estimator("ada")
def _adaboost(seed):
    return AdaBoostClassifier(random_state=seed), {
        "model__n_estimators": [50, 100, 200],
        "model__learning_rate": [0.01, 0.1, 1],
    }


@register_estimator("xgb")
def _xgboost(seed):
    return XGBClassifier(eval_metric="logloss", random_state=seed), {
        "model__n_estimators": [100, 150, 200],
        "model__learning_rate": [0.01, 0.05, 0.1],
        "model__max_depth": [3, 4, 5],
        "model__subsample": [0.8, 0.9],
    }


def parse_formula(formula, columns):
    """Split 'target ~ a + b' (or 'target ~ .') into the target and feature list."""
    if "~" not in formula:
        raise ValueError(f"Formula must look like 'target ~ features', got '{formula}'")

    lhs, rhs = (part.strip() for part in formula.split("~", 1))
    if not lhs:
        raise ValueError(f"Formula has no target: '{formula}'")
    if lhs not in columns:
        raise ValueError(f"Target '{lhs}' is not a column of the training data")

    if rhs == ".":
        features = [c for c in columns if c != lhs]
    else:
        features = [term.strip() for term in rhs.split("+") if term.strip()]
        missing = [f for f in features if f not in columns]
        if missing:
            raise ValueError(f"Formula references unknown columns: {missing}")
    if not features:
        raise ValueError(f"Formula has no features: '{formula}'")
    return lhs, features


@dataclass(frozen=True, eq=False)
class TrainingSpec:
    """Everything a training call needs; fixed for the whole selection run."""

    formula: str
    data: pd.DataFrame
    algorithms: Tuple[str, ...]
    preprocess: Tuple[str, ...] = ("impute", "center", "scale")
    search_width: int = 5
    cv: CvControl = field(default_factory=CvControl)

    def __post_init__(self):
        object.__setattr__(self, "algorithms", tuple(self.algorithms))
        object.__setattr__(self, "preprocess", tuple(self.preprocess))
        duplicates = sorted({a for a in self.algorithms if self.algorithms.count(a) > 1})
        if duplicates:
            raise ValueError(f"Algorithms listed more than once: {duplicates}")
        unknown = [d for d in self.preprocess if d not in PREPROCESS_DIRECTIVES]
        if unknown:
            raise ValueError(f"Unknown preprocessing directives: {unknown}")
        if self.search_width < 1:
            raise ValueError("search_width must be at least 1")
        target, features = parse_formula(self.formula, list(self.data.columns))
        object.__setattr__(self, "target", target)
        object.__setattr__(self, "features", features)

    @classmethod
    def from_config(cls, selection, data):
        return cls(
            formula=selection.formula,
            data=data,
            algorithms=selection.algorithms,
            preprocess=selection.preprocess,
            search_width=selection.search_width,
            cv=selection.cv,
        )

    @property
    def X(self):
        return self.data[self.features]

    @property
    def y(self):
        return self.data[self.target]


@dataclass(eq=False)
class TrainedModel:
    algorithm: str
    policy: ResamplingPolicy
    estimator: Pipeline
    score: float
    best_params: dict = field(default_factory=dict)
    resample_scores: np.ndarray = field(default_factory=lambda: np.array([]))
    importance: Optional[pd.Series] = None

    @property
    def composite_id(self):
        return f"{self.algorithm}.{self.policy.tag}"

    @property
    def artifact_id(self):
        return f"{self.composite_id}.model"

    def predict(self, X):
        return self.estimator.predict(X)


def build_pipeline(classifier, policy, preprocess=(), random_state=None):
    """Chain preprocessing, the policy's sampler and the classifier.

    The sampler sits inside the pipeline so it only ever sees the training
    part of each cross-validation fold.
    """
    steps = []
    if "impute" in preprocess:
        steps.append(("impute", SimpleImputer(strategy="median")))
    if "zv" in preprocess:
        steps.append(("zv", VarianceThreshold(threshold=0.0)))
    if "center" in preprocess or "scale" in preprocess:
        steps.append(("scale", StandardScaler(with_mean="center" in preprocess, with_std="scale" in preprocess)))

    sampler = make_sampler(policy, random_state=random_state)
    if sampler is not None:
        steps.append(("sampler", sampler))

    steps.append(("model", classifier))
    return Pipeline(steps)


def make_cv(cv: CvControl):
    return RepeatedStratifiedKFold(n_splits=cv.folds, n_repeats=cv.repeats, random_state=cv.seed)


def train_model(algorithm, policy, spec: TrainingSpec) -> TrainedModel:
    """Tune and fit one algorithm under one resampling policy.

    Returns the refitted best candidate, scored by its mean repeated k-fold
    metric. Any error while building or fitting is raised as TrainingFailure.
    """
    try:
        classifier, param_distributions = get_estimator(algorithm)(spec.cv.seed)
        pipeline = build_pipeline(classifier, policy, spec.preprocess, random_state=spec.cv.seed)
        cv = make_cv(spec.cv)

        search = RandomizedSearchCV(
            pipeline,
            param_distributions=param_distributions,
            n_iter=spec.search_width,
            cv=cv,
            scoring=spec.cv.metric,
            n_jobs=-1 if spec.cv.parallel else None,
            random_state=spec.cv.seed,
            error_score="raise",
        )
        search.fit(spec.X, spec.y)
    except Exception as e:
        raise TrainingFailure(algorithm, policy, e) from e

    best = search.best_index_
    fold_scores = np.array(
        [search.cv_results_[f"split{i}_test_score"][best] for i in range(cv.get_n_splits())]
    )
    return TrainedModel(
        algorithm=algorithm,
        policy=policy,
        estimator=search.best_estimator_,
        score=float(search.best_score_),
        best_params=dict(search.best_params_),
        resample_scores=fold_scores,
    )


def compute_importance(model: TrainedModel, spec: TrainingSpec) -> Optional[pd.Series]:
    """Best-effort variable importance; returns None when it cannot be computed."""
    try:
        X, y = spec.X, spec.y
        fitted = model.estimator[-1]
        native = None
        if hasattr(fitted, "feature_importances_"):
            native = np.asarray(fitted.feature_importances_)
        elif hasattr(fitted, "coef_"):
            native = np.abs(np.asarray(fitted.coef_)).ravel()

        if native is not None and len(native) == X.shape[1]:
            values = native
        else:
            # knn, naive bayes and pipelines that dropped columns
            result = permutation_importance(
                model.estimator, X, y, scoring=spec.cv.metric, n_repeats=5, random_state=spec.cv.seed
            )
            values = result.importances_mean

        return pd.Series(values, index=X.columns, name=model.composite_id).sort_values(ascending=False)
    except Exception as e:
        logger.warning(f"Variable importance unavailable for {model.composite_id}: {e}")
        return None
