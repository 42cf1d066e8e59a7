#!/usr/bin/env python
"""
Tests for the registration landmark list reader.
"""

import numpy as np
import pytest

from landmark_converter.landmark_io import (
    LandmarkParseError,
    MissingSourceFileError,
    RegistrationReader,
    parse_registration_values,
    read_registration_file,
)


class TestParseRegistrationValues:
    """Test the point-count rule and the reversal."""

    def test_plain_coordinate_list(self):
        """3n values are all coordinates."""
        coords = parse_registration_values([1, 2, 3, 4, 5, 6])
        np.testing.assert_array_equal(coords, [6, 5, 4, 3, 2, 1])

    def test_leading_count_dropped(self):
        """In 3n+1 values the first one is the point count."""
        coords = parse_registration_values([2, 1, 2, 3, 4, 5, 6])
        np.testing.assert_array_equal(coords, [6, 5, 4, 3, 2, 1])

    def test_last_coordinate_kept(self):
        coords = parse_registration_values([1, 10, 20, 30])
        np.testing.assert_array_equal(coords, [30, 20, 10])

    def test_empty_list(self):
        with pytest.raises(LandmarkParseError, match="no coordinates"):
            parse_registration_values([])

    def test_only_point_count(self):
        with pytest.raises(LandmarkParseError, match="no coordinates"):
            parse_registration_values([0])

    def test_count_not_divisible(self):
        with pytest.raises(LandmarkParseError, match="cannot be grouped"):
            parse_registration_values([1, 2, 3, 4, 5])

    def test_filename_in_error(self):
        with pytest.raises(LandmarkParseError, match="list.txt"):
            parse_registration_values([1, 2], filename="list.txt")

    def test_mismatched_point_count_is_logged(self, package_log):
        coords = parse_registration_values([5, 1, 2, 3])
        np.testing.assert_array_equal(coords, [3, 2, 1])
        assert "Point count 5 does not match the 1 points listed" in package_log.text


class TestReadRegistrationFile:
    """Test reading registration landmark lists from disk."""

    def test_plain_file(self, write_registration_list):
        path = write_registration_list([10, 20, 30, 40, 50, 60])

        landmarks = read_registration_file(path)

        assert landmarks.point_count == 2
        assert not landmarks.has_moving_points
        np.testing.assert_array_equal(
            landmarks.fixed_points, [[60, 50, 40], [30, 20, 10]]
        )

    def test_count_prefixed_file(self, tmp_path):
        """Every coordinate survives and the count is not read as one."""
        path = tmp_path / "counted.txt"
        path.write_text("2\n1 2 3\n4 5 6\n")

        landmarks = RegistrationReader.read(path)

        assert landmarks.point_count == 2
        np.testing.assert_array_equal(
            landmarks.fixed_points, [[6, 5, 4], [3, 2, 1]]
        )

    def test_no_trailing_newline(self, tmp_path):
        path = tmp_path / "bare.txt"
        path.write_text("1.5 2.5 3.5")

        landmarks = read_registration_file(path)

        np.testing.assert_array_equal(landmarks.fixed_points, [[3.5, 2.5, 1.5]])

    def test_non_numeric_value(self, tmp_path):
        path = tmp_path / "bad.txt"
        path.write_text("1 2 x 4\n")
        with pytest.raises(LandmarkParseError) as excinfo:
            read_registration_file(path)
        assert excinfo.value.token_number == 3

    def test_not_utf8(self, tmp_path):
        path = tmp_path / "latin1.txt"
        path.write_bytes(b"1 2 3 # M\xfcller\n")
        with pytest.raises(LandmarkParseError, match="not UTF-8"):
            read_registration_file(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(MissingSourceFileError):
            read_registration_file(tmp_path / "missing.txt")

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.txt"
        path.write_text("")
        with pytest.raises(LandmarkParseError):
            read_registration_file(path)


if __name__ == "__main__":
    pytest.main([__file__, "-v", "-s"])
