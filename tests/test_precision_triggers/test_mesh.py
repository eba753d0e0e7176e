"""
Tests for precision_triggers.mesh module.
"""
import pytest

from precision_triggers.mesh import RegularMesh


class TestRegularMesh:
    def test_bin_counts(self):
        mesh = RegularMesh(1, (3, 2, 4))
        assert mesh.n_bins == 24
        assert mesh.surface_dimension == (4, 3, 5)
        assert mesh.n_surface_bins == 60

    def test_cell_bins_are_c_order(self):
        mesh = RegularMesh(1, (3, 2, 4))
        assert mesh.indices_to_bin((0, 0, 0)) == 0
        assert mesh.indices_to_bin((0, 0, 1)) == 1
        assert mesh.indices_to_bin((0, 1, 0)) == 4
        assert mesh.indices_to_bin((2, 1, 3)) == 23

    def test_surface_bins_use_extended_mesh(self):
        mesh = RegularMesh(1, (2, 1, 1))
        # extended dims (3, 2, 2)
        assert mesh.indices_to_bin((0, 1, 1), surface=True) == 3
        assert mesh.indices_to_bin((2, 1, 1), surface=True) == 11

    def test_all_surface_bins_distinct(self):
        mesh = RegularMesh(1, (2, 3, 2))
        nx, ny, nz = mesh.surface_dimension
        bins = {mesh.indices_to_bin((i, j, k), surface=True)
                for i in range(nx) for j in range(ny) for k in range(nz)}
        assert bins == set(range(mesh.n_surface_bins))

    @pytest.mark.parametrize("ijk", [(2, 0, 0), (-1, 0, 0), (0, 1, 0)])
    def test_out_of_range_cell(self, ijk):
        mesh = RegularMesh(1, (2, 1, 1))
        with pytest.raises(IndexError):
            mesh.indices_to_bin(ijk)

    def test_surface_index_beyond_extension(self):
        mesh = RegularMesh(1, (2, 1, 1))
        with pytest.raises(IndexError):
            mesh.indices_to_bin((3, 0, 0), surface=True)

    def test_invalid_dimension(self):
        with pytest.raises(ValueError):
            RegularMesh(1, (2, 0, 1))
        with pytest.raises(ValueError):
            RegularMesh(1, (2, 2))
