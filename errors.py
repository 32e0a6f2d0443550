# Titanic Model Selection Errors


class ModelSelectionError(RuntimeError):
    """Base class for every error raised while selecting a model."""


class TrainingFailure(ModelSelectionError):
    """Fitting a model for an algorithm/policy combination failed."""

    def __init__(self, algorithm, policy, cause=None):
        self.algorithm = algorithm
        self.policy = policy
        self.cause = cause
        super().__init__(f"Training failed for {algorithm}.{policy.tag}: {cause}")


class PersistenceError(ModelSelectionError):
    """Saving, loading or deleting a model artifact failed."""

    def __init__(self, artifact_id, action, cause=None):
        self.artifact_id = artifact_id
        self.action = action
        self.cause = cause
        super().__init__(f"Could not {action} artifact '{artifact_id}': {cause}")


class NoViableModelError(ModelSelectionError):
    """Raised when no model trained successfully, so nothing can be selected."""

    def __init__(self, algorithms=()):
        self.algorithms = tuple(algorithms)
        super().__init__(f"No viable model: every algorithm failed ({', '.join(self.algorithms) or 'none requested'})")
