"""Data structures for landmark conversion.

Holds the landmark set shared between readers and writers, the parsed
MetaImage header fields, the format tags and the error types raised along the
read/transform/write pipeline.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

import numpy as np
from numpy.typing import NDArray

NUM_DIMS = 3


class InputFormat(str, Enum):
    """Landmark source formats."""

    IX_POINT_PAIRS = "ix_pp"  # annotation-tool point pairs, voxel indices
    IREG = "ireg"  # registration landmark list, physical space


class OutputFormat(str, Enum):
    """Landmark destination formats."""

    TRANSFORMIX = "tfx_lmk"  # SplineKernelTransform parameter file
    SLICER_FIDUCIAL = "slr_fid"  # 3D Slicer .fcsv
    TEXT = "std_txt"  # plain point list


class LandmarkConverterError(Exception):
    """Base class for all conversion failures."""


class UnsupportedFormatError(LandmarkConverterError, ValueError):
    """Raised for a format tag that names no known reader or writer."""


class UnsupportedPairingError(LandmarkConverterError, ValueError):
    """Raised when an input format cannot be converted to an output format."""


class MissingSourceFileError(LandmarkConverterError, FileNotFoundError):
    """Raised when an input landmark file or its image header cannot be opened."""


class LandmarkParseError(LandmarkConverterError, ValueError):
    """Raised when landmark or header text does not match the expected layout.

    Attributes:
        path: File being parsed, if known
        token_number: 1-based position of the offending token, if known
    """

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        token_number: Optional[int] = None,
    ) -> None:
        self.path = path
        self.token_number = token_number
        location = ""
        if path is not None:
            location = f" in {path}"
        if token_number is not None:
            location += f" at token {token_number}"
        super().__init__(f"{message}{location}")


@dataclass
class MetaHeader:
    """Fields lifted from a MetaImage (.mhd) header.

    Values are kept as the raw text following ``key = `` except for offset and
    spacing, which are parsed into three floats.
    """

    orientation: str = ""
    image_dimensions: str = ""
    offset: Optional[NDArray] = None
    spacing: Optional[NDArray] = None


@dataclass
class PointPairRecord:
    """One landmark record of a point-pair file, still in voxel indices."""

    index: int
    manually_chosen: bool
    very_unsure: bool
    fixed_voxel: NDArray  # Shape: (3,)
    moving_voxel: NDArray  # Shape: (3,)

    def is_kept(self, keep_all: bool) -> bool:
        """Whether the record passes the confidence filter.

        Automatically chosen points are always kept. Manually chosen points
        are dropped only when flagged very unsure and keep_all is off.
        """
        if not self.manually_chosen:
            return True
        return keep_all or not self.very_unsure


@dataclass
class LandmarkSet:
    """Landmarks in physical space produced by a reader, consumed by writers.

    ``fixed_points`` and ``moving_points`` hold one X,Y,Z row per landmark,
    index aligned between the two sets. Sources with only one point set leave
    ``moving_points`` as None. Arrays are made read-only once validated.
    """

    point_count: int
    fixed_points: NDArray  # Shape: (N, 3)
    moving_points: Optional[NDArray] = None  # Shape: (N, 3)
    image_dimensions: str = ""
    voxel_offset: NDArray = field(default_factory=lambda: np.zeros(NUM_DIMS))
    voxel_spacing: NDArray = field(default_factory=lambda: np.ones(NUM_DIMS))
    dimension_count: int = NUM_DIMS

    def __post_init__(self) -> None:
        """Validate shapes and freeze the coordinate arrays."""
        if self.dimension_count != NUM_DIMS:
            raise ValueError(
                f"Only {NUM_DIMS}D landmarks are supported, got {self.dimension_count}"
            )

        self.fixed_points = np.array(self.fixed_points, dtype=np.float64).reshape(
            -1, NUM_DIMS
        )
        if self.fixed_points.size != NUM_DIMS * self.point_count:
            raise ValueError(
                f"Expected {NUM_DIMS * self.point_count} fixed coordinates for "
                f"{self.point_count} points, got {self.fixed_points.size}"
            )

        if self.moving_points is not None:
            self.moving_points = np.array(
                self.moving_points, dtype=np.float64
            ).reshape(-1, NUM_DIMS)
            if self.moving_points.shape != self.fixed_points.shape:
                raise ValueError(
                    f"Moving points shape {self.moving_points.shape} does not match "
                    f"fixed points shape {self.fixed_points.shape}"
                )
            self.moving_points.flags.writeable = False

        self.voxel_offset = np.array(self.voxel_offset, dtype=np.float64)
        self.voxel_spacing = np.array(self.voxel_spacing, dtype=np.float64)
        if self.voxel_offset.shape != (NUM_DIMS,) or self.voxel_spacing.shape != (
            NUM_DIMS,
        ):
            raise ValueError("Offset and spacing must have exactly 3 components")

        self.fixed_points.flags.writeable = False
        self.voxel_offset.flags.writeable = False
        self.voxel_spacing.flags.writeable = False

    @property
    def has_moving_points(self) -> bool:
        """True when the source supplied a second, moving point set."""
        return self.moving_points is not None
