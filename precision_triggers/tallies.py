"""
Tally definitions and batch-wise result accumulators.

A tally's results are two arrays shaped [n_columns, n_filter_bins]:
  sum[c, f]    += x          once per realization
  sum_sq[c, f] += x**2
with columns ordered nuclide-major:
  column = nuclide * n_score_bins + score_bin

Moment-expansion scores occupy consecutive score bins:
  scatter-pN / nu-scatter-pN                       N+1 bins (P0..PN)
  scatter-yN / nu-scatter-yN / flux-yN / total-yN  (N+1)^2 bins (Y00..YNN)

Filter bins are linearized with a stride vector whose last entry is 1:
  filter_index = sum(bin_i * stride_i)
"""
import re
from dataclasses import dataclass, field
from typing import List, Optional

import numpy as np

from .constants import (
    CURRENT_SCORE, LEGENDRE_SCORES, SPHERICAL_HARMONIC_SCORES,
    FilterKind, Metric, ScoreKind,
)
from .statistics import uncertainty_arrays

_LEGENDRE_RE = re.compile(r"^(nu-scatter|scatter)-p(\d+)$")
_SPHERICAL_RE = re.compile(r"^(nu-scatter|scatter|flux|total)-y(\d+)$")


@dataclass
class Score:
    """One tally score, possibly expanded into moment bins."""
    name: str                  # canonical name, e.g. 'scatter-pn'
    kind: ScoreKind = ScoreKind.SCALAR
    order: int = 0
    label: str = ""            # as written in the input, e.g. 'scatter-p3'

    def __post_init__(self):
        if not self.label:
            self.label = self.name

    @property
    def n_bins(self):
        if self.kind is ScoreKind.LEGENDRE:
            return self.order + 1
        elif self.kind is ScoreKind.SPHERICAL_HARMONIC:
            return (self.order + 1) ** 2
        return 1


def parse_score(text):
    """Build a Score from its input name ('flux', 'scatter-p3', 'flux-y2', ...)."""
    label = text.strip().lower()
    m = _LEGENDRE_RE.match(label)
    if m:
        name = f"{m.group(1)}-pn"
        return Score(name, ScoreKind.LEGENDRE, int(m.group(2)), label)
    m = _SPHERICAL_RE.match(label)
    if m:
        name = f"{m.group(1)}-yn"
        return Score(name, ScoreKind.SPHERICAL_HARMONIC, int(m.group(2)), label)
    if label in LEGENDRE_SCORES or label in SPHERICAL_HARMONIC_SCORES:
        raise ValueError(f"Score {text!r} needs an explicit order, e.g. 'scatter-p3'")
    return Score(label)


@dataclass
class Filter:
    kind: FilterKind
    n_bins: int
    mesh_id: Optional[int] = None

    def __post_init__(self):
        if self.n_bins < 1:
            raise ValueError(f"{self.kind.value} filter needs at least one bin")


@dataclass
class Trigger:
    """Convergence criterion on one score of a tally (or on k-effective)."""
    metric: Metric
    threshold: float
    score_name: str
    score_index: Optional[int] = None    # first score bin watched; None for k-eff

    def __post_init__(self):
        if not self.threshold > 0:
            raise ValueError(f"Trigger threshold must be positive, got {self.threshold}")


class TallyResults:
    """Running sums over realizations for every (column, filter bin)."""

    def __init__(self, n_columns, n_filter_bins):
        self.sum = np.zeros((n_columns, n_filter_bins))
        self.sum_sq = np.zeros((n_columns, n_filter_bins))
        self.n_realizations = 0

    @property
    def shape(self):
        return self.sum.shape

    def accumulate(self, values):
        """Add one realization of scores shaped like the sums."""
        values = np.asarray(values, dtype=np.float64)
        if values.shape != self.sum.shape:
            raise ValueError(f"Batch scores shaped {values.shape}, expected {self.sum.shape}")
        self.n_realizations += 1
        self.sum += values
        self.sum_sq += values**2

    def reset(self):
        self.sum[:] = 0.0
        self.sum_sq[:] = 0.0
        self.n_realizations = 0

    @property
    def mean(self):
        if self.n_realizations == 0:
            return np.zeros_like(self.sum)
        return self.sum / self.n_realizations

    @property
    def std_dev(self):
        if self.n_realizations < 2:
            return np.zeros_like(self.sum)
        std_dev, _ = uncertainty_arrays(self.sum, self.sum_sq, self.n_realizations)
        return std_dev


@dataclass
class Tally:
    id: int
    scores: List[Score]
    filters: List[Filter] = field(default_factory=list)
    nuclides: List[str] = field(default_factory=lambda: ["total"])
    triggers: List[Trigger] = field(default_factory=list)
    results: TallyResults = field(init=False, repr=False)

    def __post_init__(self):
        if not self.scores:
            raise ValueError(f"Tally {self.id} has no scores")
        if not self.nuclides:
            raise ValueError(f"Tally {self.id} has no nuclide bins")
        self._offsets = {}
        offset = 0
        for score in self.scores:
            self._offsets[score.label] = offset
            offset += score.n_bins
        self._score_at = {self._offsets[s.label]: s for s in self.scores}
        self.results = TallyResults(self.n_columns, self.n_filter_bins)

    # -- bin layout ---------------------------------------------------------

    @property
    def n_score_bins(self):
        return sum(s.n_bins for s in self.scores)

    @property
    def n_nuclide_bins(self):
        return len(self.nuclides)

    @property
    def n_columns(self):
        return self.n_nuclide_bins * self.n_score_bins

    @property
    def n_filter_bins(self):
        return int(np.prod([f.n_bins for f in self.filters])) if self.filters else 1

    @property
    def stride(self):
        strides = [1] * len(self.filters)
        for i in range(len(self.filters) - 2, -1, -1):
            strides[i] = strides[i + 1] * self.filters[i + 1].n_bins
        return strides

    def filter_index(self, bins):
        """Linear filter bin for one bin per filter, in filter order."""
        return int(sum(b * s for b, s in zip(bins, self.stride)))

    def column(self, nuclide, score_bin):
        return nuclide * self.n_score_bins + score_bin

    def find_filter(self, kind):
        """Position of the first filter of this kind, or None."""
        for i, f in enumerate(self.filters):
            if f.kind is kind:
                return i
        return None

    def score_offset(self, label):
        try:
            return self._offsets[label.strip().lower()]
        except KeyError:
            raise KeyError(f"Tally {self.id} has no score {label!r}")

    def score_at(self, score_index):
        return self._score_at[score_index]

    @property
    def is_surface_current(self):
        return any(s.name == CURRENT_SCORE for s in self.scores)

    # -- triggers -----------------------------------------------------------

    def add_trigger(self, metric, threshold, score_label):
        """Attach a trigger watching the named score."""
        index = self.score_offset(score_label)
        trigger = Trigger(metric, float(threshold), self.score_at(index).label, index)
        self.triggers.append(trigger)
        return trigger


class KeffEstimator:
    """Batch k-effective accumulator for active batches.

    Provides the (mean, std_dev) pair judged by the eigenvalue trigger.
    """
    def __init__(self):
        self.keff_history = []

    def accumulate(self, k_batch):
        self.keff_history.append(float(k_batch))

    @property
    def n_realizations(self):
        return len(self.keff_history)

    @property
    def keff_mean(self):
        if not self.keff_history:
            return 0.0
        return float(np.mean(self.keff_history))

    @property
    def keff_std(self):
        if len(self.keff_history) < 2:
            return 0.0
        return float(np.std(self.keff_history, ddof=1) / np.sqrt(len(self.keff_history)))

    @property
    def combined(self):
        """(mean, std_dev) pair, or None before two realizations."""
        if len(self.keff_history) < 2:
            return None
        return self.keff_mean, self.keff_std
