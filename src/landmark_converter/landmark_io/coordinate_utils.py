"""Coordinate and filename helpers shared by landmark readers and writers.

Provides the voxel to physical affine mapping, the per-format axis orderings
used when serializing points, and output filename derivation.
"""

import os

import numpy as np
from numpy.typing import NDArray


def voxel_to_physical(
    voxel: NDArray | tuple | list,
    spacing: NDArray | tuple | list,
    offset: NDArray | tuple | list,
) -> NDArray:
    """Map voxel indices to physical coordinates.

    physical[a] = voxel[a] * spacing[a] + offset[a] for each axis a.

    Only spacing and offset are applied: the image direction is assumed to be
    the identity.

    Args:
        voxel: One index triplet with shape (3,) or many with shape (N, 3)
        spacing: Voxel spacing per axis, shape (3,)
        offset: Physical position of voxel (0, 0, 0), shape (3,)

    Returns:
        NDArray: Physical coordinates with the same shape as ``voxel``
    """
    voxel = np.asarray(voxel, dtype=np.float64)
    spacing = np.asarray(spacing, dtype=np.float64)
    offset = np.asarray(offset, dtype=np.float64)
    if voxel.shape[-1] != 3:
        raise ValueError(f"Voxel coordinates must have 3 components, got {voxel.shape}")
    return voxel * spacing + offset


def points_to_zyx(points: NDArray) -> NDArray:
    """Reorder (N, 3) X,Y,Z rows into Z,Y,X rows.

    Transformix parameter files and plain text landmark files list each
    point in this order.
    """
    points = np.asarray(points, dtype=np.float64).reshape(-1, 3)
    return points[:, ::-1]


def points_to_slicer(points: NDArray) -> NDArray:
    """Reorder (N, 3) X,Y,Z rows into Slicer fiducial columns.

    Slicer columns are (-Z, -Y, X): the axis order is reversed and the first
    two written axes are negated.
    """
    slicer_points = points_to_zyx(points).copy()
    slicer_points[:, 0] = -slicer_points[:, 0]
    slicer_points[:, 1] = -slicer_points[:, 1]
    return slicer_points


def format_number(value: float) -> str:
    """Render a coordinate the way a default C++ output stream does.

    Six significant digits, trailing zeros removed, so 20.0 -> "20" and
    0.3125 -> "0.3125". The sign of zero is kept: a negated zero
    coordinate prints as "-0".
    """
    return f"{float(value):g}"


def format_coordinates(row: NDArray, separator: str = " ") -> str:
    """Join one row of coordinates with ``separator``."""
    return separator.join(format_number(v) for v in row)


def derive_base_filename(path: str | os.PathLike) -> str:
    """Strip directory and last extension from a landmark file path.

    Both Windows and POSIX separators are recognized, so
    ``C:\\data\\case01.pts`` and ``/data/case01.pts`` both give ``case01``.

    Args:
        path: Input landmark file path

    Returns:
        str: Bare file name used to build output file names
    """
    name = os.fspath(path).replace("\\", "/").rsplit("/", 1)[-1]
    base, _ext = os.path.splitext(name)
    return base


def output_path_for(output_dir: str | os.PathLike, input_path: str, suffix: str) -> str:
    """Build ``<output_dir>/<input base name><suffix>``."""
    file_name = derive_base_filename(input_path) + suffix
    return os.path.join(os.fspath(output_dir), file_name)
