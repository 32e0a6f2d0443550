# Class rebalancing policies applied inside the training pipeline
from enum import Enum

from imblearn.over_sampling import SMOTE, RandomOverSampler
from imblearn.under_sampling import RandomUnderSampler


class ResamplingPolicy(Enum):
    """Training-time class rebalancing, in the order models are trained."""

    ORIGINAL = "ori"
    OVERSAMPLE = "up"
    UNDERSAMPLE = "down"
    ROSE = "rose"    # smoothed bootstrap of the minority class
    SMOTE = "smote"  # interpolation between minority neighbours

    @property
    def tag(self):
        return self.value


POLICY_ORDER = tuple(ResamplingPolicy)


def make_sampler(policy, random_state=None):
    """Return the imblearn sampler for a policy, or None for the original data."""
    if policy is ResamplingPolicy.ORIGINAL:
        return None
    if policy is ResamplingPolicy.OVERSAMPLE:
        return RandomOverSampler(random_state=random_state)
    if policy is ResamplingPolicy.UNDERSAMPLE:
        return RandomUnderSampler(random_state=random_state)
    if policy is ResamplingPolicy.ROSE:
        # shrinkage turns plain duplication into a smoothed bootstrap
        return RandomOverSampler(shrinkage=1.0, random_state=random_state)
    if policy is ResamplingPolicy.SMOTE:
        return SMOTE(random_state=random_state)
    raise ValueError(f"Unknown resampling policy: {policy!r}")
