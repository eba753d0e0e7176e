"""
Records produced by one trigger evaluation pass.

Each pass builds a fresh EvaluationResult; nothing here outlives the pass
except through the caller's own history list.
"""
from dataclasses import dataclass, field
from typing import List, Optional

from .constants import EIGENVALUE_NAME
from .statistics import select_uncertainty, uncertainty_ratio
from .tallies import Trigger


@dataclass
class TriggerObservation:
    """Largest uncertainties seen over one trigger's bin population.

    The observed fields only ever rise during a pass.
    """
    trigger: Trigger
    tally_id: Optional[int] = None       # None for the eigenvalue trigger
    std_dev: float = 0.0
    rel_err: float = 0.0
    variance: float = 0.0
    uncertainty: float = 0.0
    ratio: float = 0.0
    n_bins: int = 0                      # bin estimates folded in

    @property
    def name(self):
        return self.trigger.score_name

    @property
    def satisfied(self):
        return not self.uncertainty > self.trigger.threshold

    def raise_to(self, std_dev, rel_err, count=1):
        """Fold bin estimates into the running maxima.

        `count` is the number of bins already maximized into the arguments.
        """
        self.n_bins += count
        if self.std_dev < std_dev:
            self.std_dev = std_dev
        if self.rel_err < rel_err:
            self.rel_err = rel_err
        if self.variance < std_dev**2:
            self.variance = std_dev**2

    def to_dict(self):
        return {
            'tally_id': self.tally_id,
            'name': self.name,
            'metric': self.trigger.metric.value,
            'threshold': float(self.trigger.threshold),
            'std_dev': float(self.std_dev),
            'rel_err': float(self.rel_err),
            'variance': float(self.variance),
            'uncertainty': float(self.uncertainty),
            'ratio': float(self.ratio),
            'satisfied': self.satisfied,
        }


@dataclass
class EvaluationResult:
    """Verdict of one trigger check over the whole problem."""
    batch: Optional[int] = None
    satisfied: bool = True
    worst_ratio: float = 0.0
    tally_id: Optional[int] = None
    name: Optional[str] = None
    observations: List[TriggerObservation] = field(default_factory=list)
    predicted_batches: Optional[int] = None

    @property
    def is_eigenvalue(self):
        return self.name == EIGENVALUE_NAME

    def record(self, obs):
        """Judge a finished observation and fold it into the verdict.

        The worst record only moves on a strictly larger ratio, so the first
        trigger reaching a given ratio keeps it.
        """
        trigger = obs.trigger
        obs.uncertainty = select_uncertainty(trigger.metric, obs.std_dev, obs.rel_err, obs.variance)
        obs.ratio = uncertainty_ratio(trigger.metric, obs.uncertainty, trigger.threshold)
        self.observations.append(obs)

        if obs.uncertainty > trigger.threshold:
            self.satisfied = False
            if self.worst_ratio < obs.ratio:
                self.worst_ratio = obs.ratio
                self.name = obs.name
                self.tally_id = obs.tally_id
        return obs

    def to_dict(self):
        """Convert to JSON-serializable dict."""
        return {
            'batch': self.batch,
            'satisfied': self.satisfied,
            'worst_ratio': float(self.worst_ratio),
            'tally_id': self.tally_id,
            'name': self.name,
            'predicted_batches': self.predicted_batches,
            'triggers': [obs.to_dict() for obs in self.observations],
        }
