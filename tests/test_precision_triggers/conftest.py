"""
Shared pytest fixtures for precision_triggers test suite.
"""
import numpy as np
import pytest

from precision_triggers.constants import FilterKind, Metric, N_SURFACE_BINS
from precision_triggers.mesh import RegularMesh
from precision_triggers.messages import RecordingSink
from precision_triggers.problem import Problem
from precision_triggers.tallies import Filter, Tally, parse_score


def _set_bin(tally, column, filter_index, values):
    """Load one bin's sums as if `values` were its realizations.

    Also sets the tally's realization count to len(values).
    """
    values = np.asarray(values, dtype=np.float64)
    tally.results.sum[column, filter_index] = values.sum()
    tally.results.sum_sq[column, filter_index] = (values**2).sum()
    tally.results.n_realizations = len(values)


@pytest.fixture
def set_bin():
    """Helper that loads one bin's sums from a list of realizations."""
    return _set_bin


@pytest.fixture
def rng():
    """Numpy Generator with fixed seed for reproducible tests."""
    return np.random.default_rng(42)


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def flux_tally():
    """Flux tally over 2 energy bins with a rel_err trigger at 0.25."""
    tally = Tally(
        id=1,
        scores=[parse_score("flux")],
        filters=[Filter(FilterKind.ENERGY, 2)],
    )
    tally.add_trigger(Metric.RELATIVE_ERROR, 0.25, "flux")
    return tally


@pytest.fixture
def mesh_2x1x1():
    return RegularMesh(1, (2, 1, 1))


@pytest.fixture
def current_tally(mesh_2x1x1):
    """Surface-current tally on a 2x1x1 mesh, no energy filter."""
    tally = Tally(
        id=7,
        scores=[parse_score("current")],
        filters=[
            Filter(FilterKind.MESH, mesh_2x1x1.n_surface_bins, mesh_2x1x1.id),
            Filter(FilterKind.SURFACE, N_SURFACE_BINS),
        ],
    )
    tally.add_trigger(Metric.VARIANCE, 1.0e-4, "current")
    return tally


@pytest.fixture
def flux_problem(flux_tally):
    problem = Problem()
    problem.add_tally(flux_tally)
    return problem


@pytest.fixture
def problem_dict():
    """Small eigenvalue problem in JSON form."""
    return {
        'settings': {'batches': 5, 'inactive': 2, 'max_batches': 200, 'run_mode': 'eigenvalue'},
        'keff_trigger': {'type': 'std_dev', 'threshold': 0.01},
        'meshes': [{'id': 1, 'dimension': [2, 2, 1]}],
        'tallies': [
            {'id': 1, 'scores': ['flux', 'scatter-p1'],
             'filters': [{'type': 'mesh', 'mesh': 1}],
             'triggers': [{'type': 'rel_err', 'threshold': 0.05, 'scores': ['flux']}]},
            {'id': 2, 'scores': ['current'],
             'filters': [{'type': 'mesh', 'mesh': 1}],
             'triggers': [{'type': 'std_dev', 'threshold': 0.05, 'scores': ['current']}]},
        ],
        'source': {'keff': [1.0, 0.02],
                   'tallies': {'1': {'mean': 2.0, 'rel_sigma': 0.1},
                               '2': {'mean': 1.0, 'rel_sigma': 0.1}}},
    }
