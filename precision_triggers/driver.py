"""
Triggered batch loop.

1. For each batch b = 1, 2, ...:
   a. Run the batch source -> tally scores (+ k_batch)
   b. If active (b > n_inactive): accumulate tallies and k_eff
   c. Check triggers if b is on cadence
   d. Stop on a satisfied check
2. Without active triggers, stop at n_batches; otherwise at n_max_batches.
"""
import time
from dataclasses import dataclass, field
from typing import List, Optional

import numpy as np

from .constants import RunMode
from .evaluator import TriggerEvaluator
from .messages import ConsoleSink
from .results import EvaluationResult
from .tallies import KeffEstimator


@dataclass
class RunResult:
    """Outcome of a triggered run."""
    satisfied: bool
    n_batches_run: int
    n_inactive: int
    keff: float
    keff_std: float
    evaluations: List[EvaluationResult]
    total_time: float               # seconds
    source_name: str
    predicted_batches: Optional[int] = None
    keff_history: List[float] = field(default_factory=list)

    @property
    def n_active(self):
        return self.n_batches_run - self.n_inactive

    def summary(self):
        """Print human-readable summary."""
        print("=" * 60)
        print(f"  Trigger Run Result ({self.source_name})")
        print("=" * 60)
        print(f"  Batches run: {self.n_batches_run} ({self.n_inactive} inactive + {self.n_active} active)")
        print(f"  Trigger checks: {len(self.evaluations)}")
        print(f"  Triggers satisfied: {'yes' if self.satisfied else 'no'}")
        if self.evaluations:
            last = self.evaluations[-1]
            print(f"  Last max unc./thresh.: {last.worst_ratio:.4f}")
        if self.predicted_batches is not None:
            print(f"  Last predicted batches: {self.predicted_batches}")
        if self.keff_history:
            print(f"  k_eff = {self.keff:.5f} +/- {self.keff_std:.5f}")
        print(f"  Wall time: {self.total_time:.2f} s")
        print("=" * 60)

    def to_dict(self):
        """Convert to JSON-serializable dict."""
        return {
            'satisfied': self.satisfied,
            'n_batches_run': self.n_batches_run,
            'n_inactive': self.n_inactive,
            'n_active': self.n_active,
            'keff': float(self.keff),
            'keff_std': float(self.keff_std),
            'keff_history': [float(k) for k in self.keff_history],
            'predicted_batches': self.predicted_batches,
            'total_time': float(self.total_time),
            'source_name': self.source_name,
            'evaluations': [e.to_dict() for e in self.evaluations],
        }


class TriggeredRun:
    """Batch loop that stops once all precision triggers are satisfied."""

    def __init__(self, source, problem, settings, sink=None, seed=42, is_master=True):
        self.source = source
        self.problem = problem
        self.settings = settings
        self.sink = sink if sink is not None else ConsoleSink()
        self.seed = seed
        self.evaluator = TriggerEvaluator(problem, settings, self.sink, is_master=is_master)

    @property
    def last_batch(self):
        s = self.settings
        return s.n_max_batches if s.trigger_active else s.n_batches

    def solve(self, verbose=True) -> RunResult:
        rng = np.random.default_rng(self.seed)
        s = self.settings
        keff = KeffEstimator()
        eigenvalue = s.run_mode is RunMode.EIGENVALUE

        if verbose:
            print(f"Starting triggered run")
            print(f"  Source: {self.source.get_name()}")
            print(f"  Batches: {s.n_batches} ({s.n_inactive} inactive), max {s.n_max_batches}")
            print(f"  Triggers: {self.problem.n_triggers}")
            print()

        t_start = time.time()
        satisfied = False
        predicted = None
        batch = 0

        for batch in range(1, self.last_batch + 1):
            scores = self.source.run_batch(batch, rng)

            if batch > s.n_inactive:
                for tally_id, tally in self.problem.tallies.items():
                    tally.results.accumulate(scores.tallies[tally_id])
                if eigenvalue and scores.k_batch is not None:
                    keff.accumulate(scores.k_batch)

            result = self.evaluator.evaluate(batch, keff.combined if eigenvalue else None)
            if result is None:
                continue
            if result.predicted_batches is not None:
                predicted = result.predicted_batches
            if result.satisfied:
                satisfied = True
                break

        total_time = time.time() - t_start

        run = RunResult(
            satisfied=satisfied,
            n_batches_run=batch,
            n_inactive=s.n_inactive,
            keff=keff.keff_mean,
            keff_std=keff.keff_std,
            evaluations=list(self.evaluator.history),
            total_time=total_time,
            source_name=self.source.get_name(),
            predicted_batches=predicted,
            keff_history=list(keff.keff_history),
        )

        if verbose:
            print()
            run.summary()

        return run
