"""
Problem container: meshes, tallies and the k-effective trigger, keyed by id.

JSON layout:

  {
    "settings": {...},                                   (see settings.py)
    "keff_trigger": {"type": "std_dev", "threshold": 1e-3},
    "meshes": [{"id": 1, "dimension": [10, 10, 1]}],
    "tallies": [
      {"id": 1,
       "scores": ["flux", "scatter-p3"],
       "nuclides": ["total", "U235"],
       "filters": [{"type": "mesh", "mesh": 1}, {"type": "energy", "bins": 2}],
       "triggers": [{"type": "rel_err", "threshold": 0.01, "scores": ["flux"]}]}
    ]
  }

A trigger "scores" entry of "all" attaches one trigger per tally score.
Tallies scoring "current" are surface-current tallies; their mesh filter
spans the extended surface mesh and a surface filter is appended when the
input omits it.
"""
import json
from dataclasses import dataclass, field
from typing import Dict, Optional

from .constants import (
    CURRENT_SCORE, EIGENVALUE_NAME, N_SURFACE_BINS,
    FilterKind, Metric,
)
from .mesh import RegularMesh
from .tallies import Filter, Tally, Trigger, parse_score


@dataclass
class Problem:
    meshes: Dict[int, RegularMesh] = field(default_factory=dict)
    tallies: Dict[int, Tally] = field(default_factory=dict)
    keff_trigger: Optional[Trigger] = None

    def add_mesh(self, mesh):
        if mesh.id in self.meshes:
            raise ValueError(f"Duplicate mesh id {mesh.id}")
        self.meshes[mesh.id] = mesh
        return mesh

    def add_tally(self, tally):
        if tally.id in self.tallies:
            raise ValueError(f"Duplicate tally id {tally.id}")
        for f in tally.filters:
            if f.kind is FilterKind.MESH and f.mesh_id not in self.meshes:
                raise KeyError(f"Tally {tally.id} references unknown mesh {f.mesh_id}")
        self.tallies[tally.id] = tally
        return tally

    def mesh_for(self, tally):
        """Mesh behind the tally's mesh filter."""
        i_mesh = tally.find_filter(FilterKind.MESH)
        if i_mesh is None:
            raise ValueError(f"Tally {tally.id} has no mesh filter")
        return self.meshes[tally.filters[i_mesh].mesh_id]

    def set_keff_trigger(self, metric, threshold):
        self.keff_trigger = Trigger(metric, float(threshold), EIGENVALUE_NAME)
        return self.keff_trigger

    @property
    def n_triggers(self):
        n = sum(len(t.triggers) for t in self.tallies.values())
        return n + (1 if self.keff_trigger is not None else 0)

    @classmethod
    def from_dict(cls, data):
        problem = cls()

        for m in data.get('meshes', []):
            problem.add_mesh(RegularMesh(int(m['id']), tuple(m['dimension'])))

        for t in data.get('tallies', []):
            problem.add_tally(_build_tally(t, problem.meshes))

        keff = data.get('keff_trigger')
        if keff:
            problem.set_keff_trigger(Metric.parse(keff['type']), keff['threshold'])

        return problem


def _build_filter(entry, meshes, surface_mesh):
    kind = FilterKind.parse(entry['type'])
    if kind is FilterKind.MESH:
        mesh_id = int(entry['mesh'])
        if mesh_id not in meshes:
            raise KeyError(f"Filter references unknown mesh {mesh_id}")
        mesh = meshes[mesh_id]
        n_bins = mesh.n_surface_bins if surface_mesh else mesh.n_bins
        return Filter(kind, n_bins, mesh_id)
    if kind is FilterKind.SURFACE:
        return Filter(kind, N_SURFACE_BINS)
    return Filter(kind, int(entry['bins']))


def _build_tally(entry, meshes):
    tally_id = int(entry['id'])
    scores = [parse_score(s) for s in entry['scores']]
    is_current = any(s.name == CURRENT_SCORE for s in scores)

    filters = [_build_filter(f, meshes, is_current) for f in entry.get('filters', [])]
    if is_current:
        kinds = [f.kind for f in filters]
        if FilterKind.MESH not in kinds:
            raise ValueError(f"Tally {tally_id}: current score requires a mesh filter")
        if FilterKind.SURFACE not in kinds:
            filters.append(Filter(FilterKind.SURFACE, N_SURFACE_BINS))

    tally = Tally(
        id=tally_id,
        scores=scores,
        filters=filters,
        nuclides=list(entry.get('nuclides', ['total'])),
    )

    for trig in entry.get('triggers', []):
        metric = Metric.parse(trig['type'])
        labels = trig.get('scores', ['all'])
        if isinstance(labels, str):
            labels = labels.split()
        if any(label.lower() == 'all' for label in labels):
            labels = [s.label for s in scores]
        for label in labels:
            tally.add_trigger(metric, trig['threshold'], label)

    return tally


def load_problem(path):
    """Read a problem from a JSON file.

    Returns:
        (Problem, dict) - the dict is the raw file content, whose "settings"
        and "source" sections are parsed by their own modules
    """
    with open(path) as f:
        data = json.load(f)
    return Problem.from_dict(data), data
