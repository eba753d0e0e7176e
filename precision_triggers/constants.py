"""
Enumerations and fixed bin layouts shared by the trigger engine.

Metric names follow the tally input convention:
  variance | std_dev | rel_err
"""
from enum import Enum


class Metric(Enum):
    """Uncertainty metric a trigger compares against its threshold."""
    VARIANCE = "variance"
    STANDARD_DEVIATION = "std_dev"
    RELATIVE_ERROR = "rel_err"

    @classmethod
    def parse(cls, name):
        try:
            return cls(name.strip().lower())
        except ValueError:
            valid = ", ".join(m.value for m in cls)
            raise ValueError(f"Unknown trigger type: {name!r}. Choose from: {valid}")


class ScoreKind(Enum):
    SCALAR = "scalar"
    LEGENDRE = "legendre"                  # P0..PN, N+1 bins
    SPHERICAL_HARMONIC = "spherical"       # Y00..YNN, (N+1)^2 bins


class FilterKind(Enum):
    MESH = "mesh"
    SURFACE = "surface"
    ENERGY = "energy"
    ENERGYOUT = "energyout"
    CELL = "cell"
    MATERIAL = "material"
    UNIVERSE = "universe"

    @classmethod
    def parse(cls, name):
        try:
            return cls(name.strip().lower())
        except ValueError:
            raise ValueError(f"Unknown filter type: {name!r}")


class RunMode(Enum):
    EIGENVALUE = "eigenvalue"
    FIXED_SOURCE = "fixed source"

    @classmethod
    def parse(cls, name):
        key = name.strip().lower().replace("_", " ").replace("-", " ")
        try:
            return cls(key)
        except ValueError:
            raise ValueError(f"Unknown run mode: {name!r}")


class SurfaceVariance(Enum):
    """How a surface-current trigger reports its variance.

    LATEST keeps the square of the most recently evaluated crossing's
    standard deviation; RUNNING_MAX squares the running maximum instead,
    matching the volume-tally path.
    """
    LATEST = "latest"
    RUNNING_MAX = "max"

    @classmethod
    def parse(cls, name):
        try:
            return cls(name.strip().lower())
        except ValueError:
            raise ValueError(f"Unknown surface variance mode: {name!r}")


# ---------------------------------------------------------------------------
# Score families with moment expansions
# ---------------------------------------------------------------------------
LEGENDRE_SCORES = ("scatter-pn", "nu-scatter-pn")
SPHERICAL_HARMONIC_SCORES = ("scatter-yn", "nu-scatter-yn", "flux-yn", "total-yn")
CURRENT_SCORE = "current"

# ---------------------------------------------------------------------------
# Surface filter bins (0-based). Each mesh surface is stored once, as the
# right/front/top face of the cell below it on the extended surface mesh.
# ---------------------------------------------------------------------------
IN_RIGHT = 0
OUT_RIGHT = 1
IN_FRONT = 2
OUT_FRONT = 3
IN_TOP = 4
OUT_TOP = 5
N_SURFACE_BINS = 6

EIGENVALUE_NAME = "eigenvalue"

# ---------------------------------------------------------------------------
# Default run parameters
# ---------------------------------------------------------------------------
DEFAULT_BATCH_INTERVAL = 1
