# Durable storage for trained models
import os

import joblib
from loguru import logger

from errors import PersistenceError
from retry import Retry

ARTIFACT_SUFFIX = ".model"


class ModelStore:
    """joblib files in one directory, one file per artifact id.

    Keeps track of the artifacts written during the current run so that
    everything but the winner can be removed at the end.
    """

    def __init__(self, directory="models", attempts=3, retry_delay=0.5):
        self.directory = directory
        self.attempts = attempts
        self.retry_delay = retry_delay
        self.created = []
        self.failed_deletes = []
        os.makedirs(self.directory, exist_ok=True)

    def begin_run(self):
        """Forget the artifacts tracked by a previous run; files on disk are kept."""
        self.created = []
        self.failed_deletes = []

    def path(self, artifact_id):
        return os.path.join(self.directory, artifact_id)

    def exists(self, artifact_id):
        return os.path.exists(self.path(artifact_id))

    def list_artifacts(self):
        return sorted(f for f in os.listdir(self.directory) if f.endswith(ARTIFACT_SUFFIX))

    def save(self, artifact_id, model):
        try:
            Retry.run(joblib.dump, model, self.path(artifact_id),
                      exceptions=(OSError,), max_attempts=self.attempts, delay=self.retry_delay)
        except Exception as e:
            raise PersistenceError(artifact_id, "save", e) from e

        if artifact_id not in self.created:
            self.created.append(artifact_id)
        logger.info(f"Model saved as '{self.path(artifact_id)}'")

    def load(self, artifact_id):
        try:
            model = joblib.load(self.path(artifact_id))
        except Exception as e:
            raise PersistenceError(artifact_id, "load", e) from e
        logger.info(f"Model loaded successfully from {self.path(artifact_id)}")
        return model

    def delete(self, artifact_id):
        try:
            Retry.run(os.remove, self.path(artifact_id),
                      exceptions=(PermissionError,), max_attempts=self.attempts, delay=self.retry_delay)
        except Exception as e:
            raise PersistenceError(artifact_id, "delete", e) from e

        if artifact_id in self.created:
            self.created.remove(artifact_id)
        logger.info(f"Deleted model '{artifact_id}'")

    def discard(self, artifact_ids):
        """Delete the given artifacts, logging instead of raising on failure."""
        for artifact_id in list(artifact_ids):
            try:
                self.delete(artifact_id)
            except PersistenceError as e:
                logger.error(str(e))
                self.failed_deletes.append(artifact_id)

    def cleanup(self, keep=None):
        """Remove every artifact created in this run except `keep`."""
        self.discard([a for a in self.created if a != keep])
        return list(self.failed_deletes)
