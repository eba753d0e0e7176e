"""
precision_triggers - Statistical convergence triggers for batched
Monte Carlo tallies

After each eligible batch:
  - every tally trigger (variance, std_dev or rel_err) is compared with
    the largest uncertainty over its bins, moment expansions and
    surface-current crossings included
  - the k-effective trigger is checked in eigenvalue mode
  - if unsatisfied, the batch count needed for convergence is predicted
    from the 1/N scaling of tally variance
"""
__version__ = "0.1.0"
