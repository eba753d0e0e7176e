"""
Tally trigger check: compare every trigger's observed uncertainty with its
threshold and find the largest uncertainty/threshold ratio in the problem.

For each tally with at least 2 realizations and each of its triggers, the
trigger's bin population is every (filter bin, nuclide, moment) of its
score:
  scalar score          1 bin per (filter, nuclide)
  scatter-pN family     N+1 moments, orders n = 0..N
  *-yN family           (N+1)^2 moments, n = 0..N and m = -n..n
Surface-current tallies enumerate mesh face crossings instead
(see surface_current.py).
"""
from .constants import RunMode, ScoreKind, SurfaceVariance
from .results import EvaluationResult, TriggerObservation
from .statistics import uncertainty_arrays
from .surface_current import compute_current_uncertainty


def moment_bins(score, first):
    """Score-bin indices covered by a score whose first bin is `first`."""
    if score.kind is ScoreKind.SCALAR:
        yield first
    elif score.kind is ScoreKind.LEGENDRE:
        for n in range(score.order + 1):
            yield first + n
    elif score.kind is ScoreKind.SPHERICAL_HARMONIC:
        index = first
        for n in range(score.order + 1):
            for m in range(-n, n + 1):
                yield index
                index += 1
    else:
        raise ValueError(f"Unhandled score kind: {score.kind!r}")


def observe_tally_bins(tally, trigger, obs):
    """Raise `obs` to the largest std_dev/rel_err over the trigger's bins.

    Each moment column is evaluated across all filter bins at once.
    """
    score = tally.score_at(trigger.score_index)
    results = tally.results
    n = results.n_realizations
    for nuclide in range(tally.n_nuclide_bins):
        for score_bin in moment_bins(score, trigger.score_index):
            column = tally.column(nuclide, score_bin)
            std_dev, rel_err = uncertainty_arrays(
                results.sum[column], results.sum_sq[column], n)
            obs.raise_to(float(std_dev.max()), float(rel_err.max()), count=std_dev.size)
    return obs


def check_keff_trigger(trigger, keff, result):
    """Judge k-effective's (mean, std_dev) against the eigenvalue trigger."""
    mean, std_dev = keff
    obs = TriggerObservation(trigger)
    obs.std_dev = std_dev
    obs.variance = std_dev**2
    obs.rel_err = std_dev / mean if mean != 0.0 else 0.0
    return result.record(obs)


def check_tally_triggers(problem, run_mode=RunMode.FIXED_SOURCE, keff=None,
                         surface_variance=SurfaceVariance.LATEST, batch=None):
    """Evaluate every trigger in the problem.

    Args:
        problem: Problem with tallies (results already reduced) and triggers
        run_mode: RunMode; the k-effective trigger is only checked in
            eigenvalue mode
        keff: (mean, std_dev) of k-effective, or None when unavailable
        surface_variance: SurfaceVariance policy for current tallies
        batch: batch number stamped on the result

    Returns:
        EvaluationResult (fresh on every call)
    """
    result = EvaluationResult(batch=batch)

    if (run_mode is RunMode.EIGENVALUE and problem.keff_trigger is not None
            and keff is not None):
        check_keff_trigger(problem.keff_trigger, keff, result)

    for tally in problem.tallies.values():
        # Standard deviation is undefined below two realizations
        if tally.results.n_realizations < 2:
            continue

        for trigger in tally.triggers:
            obs = TriggerObservation(trigger, tally.id)
            if tally.is_surface_current:
                compute_current_uncertainty(tally, trigger, problem.mesh_for(tally),
                                            obs, surface_variance)
            else:
                observe_tally_bins(tally, trigger, obs)
            result.record(obs)

    return result
