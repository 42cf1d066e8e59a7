#!/usr/bin/env python
"""
Tests for coordinate mapping, axis reordering and filename helpers.
"""

import numpy as np
import pytest

from landmark_converter.landmark_io import (
    derive_base_filename,
    format_coordinates,
    format_number,
    output_path_for,
    points_to_slicer,
    points_to_zyx,
    voxel_to_physical,
)


class TestVoxelToPhysical:
    """Test the voxel to physical affine mapping."""

    def test_single_point_non_unit_spacing_and_offset(self):
        """Each axis is scaled by its spacing and shifted by its offset."""
        physical = voxel_to_physical(
            (10, 20, 30), spacing=(0.5, 0.75, 2.5), offset=(-100, 50, 12.5)
        )
        np.testing.assert_allclose(
            physical, [10 * 0.5 - 100, 20 * 0.75 + 50, 30 * 2.5 + 12.5]
        )

    def test_many_points(self):
        """An (N, 3) array is mapped row by row."""
        voxels = np.array([[0, 0, 0], [1, 2, 3], [4, 5, 6]])
        physical = voxel_to_physical(voxels, spacing=(2, 3, 4), offset=(1, 1, 1))
        assert physical.shape == (3, 3)
        np.testing.assert_allclose(physical[0], [1, 1, 1])
        np.testing.assert_allclose(physical[1], [3, 7, 13])
        np.testing.assert_allclose(physical[2], [9, 16, 25])

    def test_unit_spacing_zero_offset_is_identity(self):
        physical = voxel_to_physical((7, 8, 9), spacing=(1, 1, 1), offset=(0, 0, 0))
        np.testing.assert_array_equal(physical, [7, 8, 9])

    def test_rejects_non_3d_points(self):
        with pytest.raises(ValueError):
            voxel_to_physical((1, 2), spacing=(1, 1, 1), offset=(0, 0, 0))


class TestAxisOrdering:
    """Test the per-format axis orderings."""

    def test_points_to_zyx(self):
        zyx = points_to_zyx(np.array([[1.0, 2.0, 3.0], [4.0, 5.0, 6.0]]))
        np.testing.assert_array_equal(zyx, [[3, 2, 1], [6, 5, 4]])

    def test_points_to_slicer_negates_first_two_columns(self):
        slicer = points_to_slicer(np.array([[20.0, 40.0, 60.0]]))
        np.testing.assert_array_equal(slicer, [[-60, -40, 20]])

    def test_points_to_slicer_leaves_input_untouched(self):
        points = np.array([[1.0, 2.0, 3.0]])
        points_to_slicer(points)
        np.testing.assert_array_equal(points, [[1, 2, 3]])


class TestFormatting:
    """Test number rendering."""

    @pytest.mark.parametrize(
        "value, expected",
        [
            (20.0, "20"),
            (0.3125, "0.3125"),
            (-12.5, "-12.5"),
            (-0.0, "-0"),
            (123456789.0, "1.23457e+08"),
            (1.0 / 3.0, "0.333333"),
        ],
    )
    def test_format_number(self, value, expected):
        assert format_number(value) == expected

    def test_format_coordinates_separator(self):
        row = np.array([1.5, -2.0, 3.0])
        assert format_coordinates(row) == "1.5 -2 3"
        assert format_coordinates(row, ", ") == "1.5, -2, 3"


class TestFilenames:
    """Test output filename derivation."""

    @pytest.mark.parametrize(
        "path, expected",
        [
            ("/data/case01/case01_pointpairs.txt", "case01_pointpairs"),
            ("C:\\data\\case01\\case01_pointpairs.txt", "case01_pointpairs"),
            ("relative/dir/landmarks.v2.txt", "landmarks.v2"),
            ("no_extension", "no_extension"),
            ("/data.dir/no_extension", "no_extension"),
        ],
    )
    def test_derive_base_filename(self, path, expected):
        assert derive_base_filename(path) == expected

    def test_output_path_for(self, tmp_path):
        path = output_path_for(tmp_path, "/in/case01.txt", "_transformix.txt")
        assert path == str(tmp_path / "case01_transformix.txt")


if __name__ == "__main__":
    pytest.main([__file__, "-v", "-s"])
