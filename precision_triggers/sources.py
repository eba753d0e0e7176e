"""
Batch sources: whatever produces one batch of tally scores.

The transport loop that actually simulates particles lives outside this
package; a BatchSource wraps it so the triggered batch loop can drive it.
SyntheticSource draws Gaussian scores around fixed means and stands in for
transport in demos and tests.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, Optional

import numpy as np


@dataclass
class BatchScores:
    """Scores from one batch, already reduced across processes."""
    tallies: Dict[int, np.ndarray] = field(default_factory=dict)   # shaped like TallyResults
    k_batch: Optional[float] = None


class BatchSource(ABC):
    """Abstract interface for batch producers.

    The triggered run calls run_batch() once per batch.
    """

    @abstractmethod
    def run_batch(self, batch: int, rng: np.random.Generator) -> BatchScores:
        """Simulate one batch and return its tally scores.

        Args:
            batch: 1-based batch number
            rng: numpy random Generator for reproducibility

        Returns:
            BatchScores with one array per tally id
        """
        pass

    @abstractmethod
    def get_name(self) -> str:
        """Human-readable source name."""
        pass


class SyntheticSource(BatchSource):
    """Independent Gaussian batch scores.

    score = mean * (1 + rel_sigma * N(0, 1)), per bin and batch, so a bin's
    relative error after n realizations is about rel_sigma / sqrt(n).
    """

    def __init__(self, problem, means=None, rel_sigma=0.1, keff=(1.0, 0.01)):
        self.problem = problem
        self.means = means or {}
        self.rel_sigma = rel_sigma
        self.keff = keff

    def _rel_sigma(self, tally_id):
        if isinstance(self.rel_sigma, dict):
            return self.rel_sigma.get(tally_id, 0.1)
        return self.rel_sigma

    def run_batch(self, batch, rng):
        scores = BatchScores()
        for tally_id, tally in self.problem.tallies.items():
            shape = tally.results.shape
            mean = np.broadcast_to(np.asarray(self.means.get(tally_id, 1.0), dtype=np.float64), shape)
            noise = rng.standard_normal(shape)
            scores.tallies[tally_id] = mean * (1.0 + self._rel_sigma(tally_id) * noise)
        if self.keff is not None:
            k_mean, k_sigma = self.keff
            scores.k_batch = k_mean + k_sigma * rng.standard_normal()
        return scores

    def get_name(self):
        return "Synthetic (Gaussian)"

    @classmethod
    def from_dict(cls, problem, data):
        """Build from the JSON "source" section.

        {"keff": [1.0, 0.01],
         "tallies": {"1": {"mean": 1.0, "rel_sigma": 0.2}}}
        """
        data = data or {}
        means = {}
        sigmas = {}
        for key, entry in data.get('tallies', {}).items():
            means[int(key)] = entry.get('mean', 1.0)
            sigmas[int(key)] = entry.get('rel_sigma', 0.1)
        keff = data.get('keff', (1.0, 0.01))
        return cls(problem, means=means, rel_sigma=sigmas,
                   keff=tuple(keff) if keff is not None else None)
