# Titanic Survival Model Selection
# Trains every requested algorithm under each resampling policy, keeps the
# best model by cross-validated score and removes the rest from disk.
import pandas as pd
from loguru import logger

from errors import NoViableModelError, PersistenceError, TrainingFailure
from estimators import TrainingSpec, compute_importance, train_model
from ledger import ModelRegistry, ScoreLedger, ScoreRecord
from persistence import ModelStore
from resampling import POLICY_ORDER

SUMMARY_STATS = ["mean", "std", "min", "median", "max"]


def compare_models(models):
    """Summarise the per-fold scores of models evaluated on the same folds."""
    frame = pd.DataFrame({m.composite_id: pd.Series(m.resample_scores, dtype=float) for m in models})
    summary = frame.agg(SUMMARY_STATS).T
    return summary.sort_values("mean", ascending=False, kind="mergesort")


def _report_comparison(title, models):
    summary = compare_models(models)
    table = summary.to_string(float_format="{:.4f}".format)
    logger.info(f"{title}\n{table}")
    return summary


def _train_algorithm(algorithm, spec, store, registry, staged, trainer, importance):
    """Train the five policy variants of one algorithm, staging a score record for each."""
    for policy in POLICY_ORDER:
        model_id = f"{algorithm}.{policy.tag}"
        logger.info(f"Training {model_id}")
        try:
            model = trainer(algorithm, policy, spec)
        except TrainingFailure:
            raise
        except Exception as e:
            raise TrainingFailure(algorithm, policy, e) from e
        registry.add(model)

        model.importance = importance(model, spec)
        if model.importance is not None:
            top = ", ".join(f"{name}={value:.4f}" for name, value in model.importance.head(5).items())
            logger.info(f"{model_id} top variables: {top}")

        persisted = True
        try:
            store.save(model.artifact_id, model)
        except PersistenceError as e:
            logger.error(f"{e}. {model_id} is still scored but cannot be reloaded")
            persisted = False

        staged.append(ScoreRecord(model.composite_id, model.score, model.artifact_id, persisted))
        logger.info(f"{model_id} {spec.cv.metric}: {model.score:.4f}")


def select_best_model(spec: TrainingSpec, store: ModelStore, trainer=train_model, importance=compute_importance,
                      registry=None):
    """Return the artifact id of the best model across algorithms and policies.

    An algorithm that fails under any policy is dropped as a whole: its
    remaining policies are skipped and none of its models are scored.
    Raises NoViableModelError when nothing trained, and PersistenceError
    when the winning model could not be saved. Pass a ModelRegistry to keep
    the trained models for inspection after the run.
    """
    store.begin_run()
    ledger = ScoreLedger()
    registry = ModelRegistry() if registry is None else registry

    for algorithm in spec.algorithms:
        logger.info(f"===== {algorithm} =====")
        staged = []
        try:
            _train_algorithm(algorithm, spec, store, registry, staged, trainer, importance)
        except TrainingFailure as e:
            logger.exception(f"Skipping algorithm '{algorithm}': {e}")
            store.discard([r.artifact_id for r in staged if r.persisted])
        else:
            ledger.extend(staged)

        if registry.has_original(algorithm):
            _report_comparison(f"Resampling comparison for {algorithm}", registry.models_for(algorithm))

    if len(registry.algorithms_with_original()) > 1:
        _report_comparison("Comparison across all models", registry.all_models())

    if len(ledger):
        logger.info(f"Score ledger:\n{ledger.to_frame().to_string(index=False)}")
    try:
        winner = ledger.best()
    except NoViableModelError:
        store.cleanup()
        logger.error("No viable model: every algorithm failed or scored NaN")
        raise NoViableModelError(spec.algorithms) from None

    if not winner.persisted:
        raise PersistenceError(winner.artifact_id, "save", "the winning model was never written to disk")

    failed = store.cleanup(keep=winner.artifact_id)
    if failed:
        logger.warning(f"Could not delete {len(failed)} non-winning artifact(s): {failed}")

    logger.info(f"Best model: {winner.model_id} ({spec.cv.metric}={winner.score:.4f}) -> {winner.artifact_id}")
    return winner.artifact_id
