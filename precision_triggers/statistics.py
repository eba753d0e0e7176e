"""
Bin uncertainty estimates from running tally sums.

For a bin with running sum S, running sum of squares S2 and n realizations:

  mean    = S / n
  std_dev = sqrt((S2/n - mean^2) / (n - 1))     (standard deviation of the mean)
  rel_err = std_dev / mean                       (0 when mean == 0)

The radicand is clamped at zero: S2/n and mean^2 nearly cancel for
well-converged bins and can go slightly negative in floating point.
"""
import math

import numpy as np

from .constants import Metric


def bin_uncertainty(sum_, sum_sq, n):
    """Standard deviation of the mean and relative error for one bin.

    Args:
        sum_: running sum of per-realization scores
        sum_sq: running sum of squared per-realization scores
        n: number of realizations (must be >= 2)

    Returns:
        (std_dev, rel_err)
    """
    if n < 2:
        raise ValueError(f"Uncertainty needs at least 2 realizations, got {n}")
    mean = sum_ / n
    var = (sum_sq / n - mean * mean) / (n - 1)
    std_dev = math.sqrt(max(var, 0.0))
    rel_err = std_dev / mean if mean != 0.0 else 0.0
    return std_dev, rel_err


def uncertainty_arrays(sum_, sum_sq, n):
    """Vectorized bin_uncertainty over arrays of any shape.

    Returns:
        (std_dev, rel_err) arrays with the shape of `sum_`
    """
    if n < 2:
        raise ValueError(f"Uncertainty needs at least 2 realizations, got {n}")
    sum_ = np.asarray(sum_, dtype=np.float64)
    sum_sq = np.asarray(sum_sq, dtype=np.float64)
    mean = sum_ / n
    var = (sum_sq / n - mean**2) / (n - 1)
    var = np.maximum(var, 0.0)
    std_dev = np.sqrt(var)
    rel_err = np.zeros_like(std_dev)
    nonzero = mean != 0.0
    rel_err[nonzero] = std_dev[nonzero] / mean[nonzero]
    return std_dev, rel_err


def select_uncertainty(metric, std_dev, rel_err, variance):
    """Pick the observed value a trigger of the given metric is judged on."""
    if metric is Metric.VARIANCE:
        return variance
    elif metric is Metric.STANDARD_DEVIATION:
        return std_dev
    elif metric is Metric.RELATIVE_ERROR:
        return rel_err
    raise ValueError(f"Unhandled metric: {metric!r}")


def uncertainty_ratio(metric, uncertainty, threshold):
    """Distance to convergence as a linear ratio.

    Variance carries squared units, so its ratio is square-rooted to stay
    comparable with the standard deviation and relative error ratios.
    """
    if metric is Metric.VARIANCE:
        return math.sqrt(uncertainty / threshold)
    elif metric in (Metric.STANDARD_DEVIATION, Metric.RELATIVE_ERROR):
        return uncertainty / threshold
    raise ValueError(f"Unhandled metric: {metric!r}")


def predict_batches(current_batch, n_inactive, n_batches, worst_ratio):
    """Predict the batch count needed to bring worst_ratio down to 1.

    Variance of a batch-mean estimator scales as 1/N in the number of
    active batches, so the active count must grow by worst_ratio^2.

    Returns:
        (batch_interval, predicted_total) where predicted_total is
        n_batches + batch_interval
    """
    batch_interval = (int(math.floor((current_batch - n_inactive) * worst_ratio**2))
                      + n_inactive - n_batches + 1)
    return batch_interval, batch_interval + n_batches
