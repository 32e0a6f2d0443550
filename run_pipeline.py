#!/usr/bin/env python
# Titanic Survival Prediction Pipeline Runner

import os
import sys
import time

from loguru import logger

from algorithm_selection import select_best_model
from config import AppConfig
from errors import ModelSelectionError
from estimators import TrainingSpec
from ledger import ModelRegistry
from log import setup_logging
from persistence import ModelStore
from predict import align_features, load_data, prepare_datasets, write_submission
from visualize import create_visualization_folder, plot_model_comparison, visualize_survival_by_feature


def print_header(message):
    """Print a formatted header message."""
    print("\n" + "=" * 80)
    print(f" {message} ".center(80, "="))
    print("=" * 80)


def check_data(data_config):
    """Check if the required data files exist."""
    required_files = [data_config.train_path, data_config.test_path]
    missing_files = [f for f in required_files if not os.path.exists(f)]

    if missing_files:
        logger.error(f"The following required files are missing: {', '.join(missing_files)}")
        return False
    return True


def create_visualizations(draw):
    """Run a plotting step; a failure is logged and the pipeline continues."""
    try:
        draw()
        return True
    except Exception as e:
        logger.warning(f"Visualization creation failed, but continuing... ({e})")
        return False


def run_pipeline(config):
    """Run the complete Titanic survival prediction pipeline; returns True on success."""
    start_time = time.time()
    print_header("Titanic Survival Prediction Pipeline")

    if not check_data(config.data):
        return False

    train, test = load_data(config.data.train_path, config.data.test_path, config.data.na_values)
    train_frame, X_test, test_ids = prepare_datasets(train, test)

    folder = create_visualization_folder()

    def draw_survival_rates():
        for feature in ["Sex", "Pclass", "Embarked"]:
            visualize_survival_by_feature(train, feature, folder)

    create_visualizations(draw_survival_rates)

    print_header("Model Selection")
    spec = TrainingSpec.from_config(config.selection, train_frame)
    store = ModelStore(config.selection.model_dir, attempts=config.selection.persist_attempts)
    registry = ModelRegistry()
    try:
        artifact_id = select_best_model(spec, store, registry=registry)
        model = store.load(artifact_id)
    except ModelSelectionError as e:
        logger.error(f"Model selection failed: {e}")
        return False

    if len(registry):
        create_visualizations(lambda: plot_model_comparison(
            registry.all_models(), os.path.join(folder, "model_comparison.png"), spec.cv.metric))

    print_header("Making Predictions")
    write_submission(model, align_features(X_test, spec.features), test_ids, config.data.submission_path)

    minutes, seconds = divmod(time.time() - start_time, 60)
    print_header("Pipeline Complete")
    print(f"Total runtime: {int(minutes)} minutes and {seconds:.2f} seconds")
    print(f"- Best model: {artifact_id} (saved in '{store.directory}')")
    print(f"- Predictions saved as '{config.data.submission_path}'")
    return True


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    config = AppConfig.load(argv[0] if argv else None)
    setup_logging(config.log.dir, config.log.level, config.log.rotation, config.log.retention)
    return 0 if run_pipeline(config) else 1


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\n\nPipeline interrupted by user. Exiting.")
        sys.exit(1)
