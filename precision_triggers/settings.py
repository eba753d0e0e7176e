"""
Run settings that govern when triggers are checked.

  n_batches       batch at which triggers are first checked
  n_max_batches   hard stop; triggers are always checked here
  n_inactive      batches discarded before accumulation starts
  batch_interval  batches between checks; None lets the evaluator predict it
"""
from dataclasses import dataclass
from typing import Optional

from .constants import RunMode, SurfaceVariance


@dataclass
class TriggerSettings:
    n_batches: int
    n_max_batches: Optional[int] = None
    n_inactive: int = 0
    batch_interval: Optional[int] = None
    run_mode: RunMode = RunMode.EIGENVALUE
    trigger_active: bool = True
    surface_variance: SurfaceVariance = SurfaceVariance.LATEST

    def __post_init__(self):
        if self.n_max_batches is None:
            self.n_max_batches = self.n_batches
        if self.n_batches < 1:
            raise ValueError(f"batches must be positive, got {self.n_batches}")
        if self.n_max_batches < self.n_batches:
            raise ValueError(
                f"max_batches ({self.n_max_batches}) is less than batches ({self.n_batches})")
        if not 0 <= self.n_inactive < self.n_batches:
            raise ValueError(
                f"inactive ({self.n_inactive}) must be in [0, batches={self.n_batches})")
        if self.batch_interval is not None and self.batch_interval < 1:
            raise ValueError(f"batch_interval must be positive, got {self.batch_interval}")

    @property
    def pred_batches(self):
        """True when the check interval is left to prediction."""
        return self.batch_interval is None

    @property
    def n_active(self):
        return self.n_batches - self.n_inactive

    @classmethod
    def from_dict(cls, data):
        """Build settings from the JSON "settings" section."""
        interval = data.get('batch_interval')
        return cls(
            n_batches=int(data['batches']),
            n_max_batches=int(data['max_batches']) if data.get('max_batches') is not None else None,
            n_inactive=int(data.get('inactive', 0)),
            batch_interval=int(interval) if interval is not None else None,
            run_mode=RunMode.parse(data.get('run_mode', 'eigenvalue')),
            trigger_active=bool(data.get('trigger_active', True)),
            surface_variance=SurfaceVariance.parse(data.get('surface_variance', 'latest')),
        )

    def to_dict(self):
        return {
            'batches': self.n_batches,
            'max_batches': self.n_max_batches,
            'inactive': self.n_inactive,
            'batch_interval': self.batch_interval,
            'run_mode': self.run_mode.value,
            'trigger_active': self.trigger_active,
            'surface_variance': self.surface_variance.value,
        }
