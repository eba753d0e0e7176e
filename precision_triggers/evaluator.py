"""
Trigger evaluation policy over the batch sequence.

Triggers are checked on batch b when

  b >= n_batches  and  ((b - n_batches) % interval == 0  or  b == n_max_batches)

and only on the coordinating process. When the interval is left to
prediction, every unsatisfied check estimates the batch count needed for
convergence from the 1/N scaling of tally variance,

  interval  = floor((b - n_inactive) * ratio^2) + n_inactive - n_batches + 1
  predicted = n_batches + interval

and the interval is replaced so the next check lands on the predicted batch.
"""
from typing import Optional

from .checker import check_tally_triggers
from .constants import DEFAULT_BATCH_INTERVAL
from .messages import ConsoleSink
from .results import EvaluationResult
from .statistics import predict_batches


class TriggerEvaluator:
    """Decides when to check triggers, reports status and predicts batches."""

    def __init__(self, problem, settings, sink=None, is_master=True):
        self.problem = problem
        self.settings = settings
        self.sink = sink if sink is not None else ConsoleSink()
        self.is_master = is_master
        self.n_batch_interval = settings.batch_interval or DEFAULT_BATCH_INTERVAL
        self.history = []

    @property
    def pred_batches(self):
        return self.settings.pred_batches

    def should_check(self, current_batch: int) -> bool:
        s = self.settings
        if not (self.is_master and s.trigger_active):
            return False
        if current_batch < s.n_batches:
            return False
        return ((current_batch - s.n_batches) % self.n_batch_interval == 0
                or current_batch == s.n_max_batches)

    def evaluate(self, current_batch: int, keff=None) -> Optional[EvaluationResult]:
        """Check triggers if this batch is on cadence.

        Args:
            current_batch: 1-based batch just completed
            keff: (mean, std_dev) of k-effective, or None

        Returns:
            EvaluationResult, or None when no check was due
        """
        if not self.should_check(current_batch):
            return None

        s = self.settings
        result = check_tally_triggers(
            self.problem,
            run_mode=s.run_mode,
            keff=keff,
            surface_variance=s.surface_variance,
            batch=current_batch,
        )
        self._report(result, current_batch)

        if self.pred_batches and not result.satisfied:
            interval, predicted = predict_batches(
                current_batch, s.n_inactive, s.n_batches, result.worst_ratio)
            self.n_batch_interval = max(interval, 1)
            result.predicted_batches = predicted

            if predicted > s.n_max_batches:
                self.sink.warning(f"The estimated number of batches is {predicted} "
                                  f"-- greater than max batches.")
            else:
                self.sink.message(f"The estimated number of batches is {predicted}")

        self.history.append(result)
        return result

    def _report(self, result, current_batch):
        if result.satisfied:
            self.sink.message(f"Triggers satisfied for batch {current_batch}")
        elif result.is_eigenvalue:
            self.sink.message(f"Triggers unsatisfied, max unc./thresh. is "
                              f"{result.worst_ratio:.6g} for {result.name}")
        else:
            self.sink.message(f"Triggers unsatisfied, max unc./thresh. is "
                              f"{result.worst_ratio:.6g} for {result.name} "
                              f"in tally {result.tally_id}")
