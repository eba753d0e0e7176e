"""
Trigger uncertainty for surface-current tallies.

A current tally bins crossings by (surface-mesh bin, crossing direction
[, incoming energy]). For every mesh cell the six faces are visited in the
order left, right, back, front, bottom, top, each once inbound and once
outbound, giving 12 bin lookups per cell and energy bin.
"""
from .constants import (
    IN_FRONT, IN_RIGHT, IN_TOP, OUT_FRONT, OUT_RIGHT, OUT_TOP,
    FilterKind, SurfaceVariance,
)
from .statistics import bin_uncertainty


def cell_crossings(i, j, k):
    """(extended-mesh ijk, surface bin) pairs for the faces of cell (i, j, k)."""
    center = (i + 1, j + 1, k + 1)
    faces = (
        ((i, j + 1, k + 1), IN_RIGHT, OUT_RIGHT),     # left
        (center, IN_RIGHT, OUT_RIGHT),                # right
        ((i + 1, j, k + 1), IN_FRONT, OUT_FRONT),     # back
        (center, IN_FRONT, OUT_FRONT),                # front
        ((i + 1, j + 1, k), IN_TOP, OUT_TOP),         # bottom
        (center, IN_TOP, OUT_TOP),                    # top
    )
    for ijk, inbound, outbound in faces:
        yield ijk, inbound
        yield ijk, outbound


def compute_current_uncertainty(tally, trigger, mesh, obs,
                                variance_mode=SurfaceVariance.LATEST):
    """Fold every face crossing of every mesh cell into `obs`.

    std_dev and rel_err keep their running maxima. With
    SurfaceVariance.LATEST the variance is overwritten after each crossing
    by that crossing's std_dev**2, so it ends as the square of the last
    crossing evaluated; RUNNING_MAX squares the running std_dev maximum.

    Args:
        tally: surface-current Tally with mesh and surface filters
        trigger: Trigger on that tally
        mesh: RegularMesh referenced by the tally's mesh filter
        obs: TriggerObservation to update in place

    Returns:
        obs
    """
    i_mesh = tally.find_filter(FilterKind.MESH)
    i_surf = tally.find_filter(FilterKind.SURFACE)
    if i_mesh is None or i_surf is None:
        raise ValueError(f"Tally {tally.id}: surface current needs mesh and surface filters")
    i_energy = tally.find_filter(FilterKind.ENERGY)
    n_energy = tally.filters[i_energy].n_bins if i_energy is not None else 1

    results = tally.results
    n = results.n_realizations
    column = tally.column(0, trigger.score_index)
    stride = tally.stride
    bins = [0] * len(tally.filters)

    nx, ny, nz = mesh.dimension
    for i in range(nx):
        for j in range(ny):
            for k in range(nz):
                for l in range(n_energy):
                    if i_energy is not None:
                        bins[i_energy] = l
                    for ijk, surface in cell_crossings(i, j, k):
                        bins[i_mesh] = mesh.indices_to_bin(ijk, surface=True)
                        bins[i_surf] = surface
                        filter_index = sum(b * s for b, s in zip(bins, stride))

                        std_dev, rel_err = bin_uncertainty(
                            results.sum[column, filter_index],
                            results.sum_sq[column, filter_index], n)
                        obs.raise_to(std_dev, rel_err)
                        if variance_mode is SurfaceVariance.LATEST:
                            obs.variance = std_dev**2
                        else:
                            obs.variance = obs.std_dev**2
    return obs
