"""Landmark writers for Transformix, 3D Slicer and plain text files.

Every writer names its output after the input landmark file: directory and
extension are stripped and a writer specific suffix is appended, for example
``case01_pointpairs.txt`` -> ``case01_pointpairs_transformix.txt``.

Axis conventions of the written points (input rows are X,Y,Z):

- Transformix parameter file: ``z y x``
- Slicer fiducial file: ``-z, -y, x``
- Plain text: ``z y x``

A writer that cannot create its destination logs the failure and returns
None instead of a path. Nothing is retried.
"""

import os
from typing import Literal, Optional

from numpy.typing import NDArray

from ..landmark_converter_base import get_module_logger
from .coordinate_utils import (
    format_coordinates,
    output_path_for,
    points_to_slicer,
    points_to_zyx,
)
from .data_structures import LandmarkSet

logger = get_module_logger(__name__)

PointSetName = Literal["fixed", "moving"]

IDENTITY_DIRECTION = (
    "1.0000000000 0.0000000000 0.0000000000 "
    "0.0000000000 1.0000000000 0.0000000000 "
    "0.0000000000 0.0000000000 1.0000000000"
)

SLICER_HEADER = (
    "# name = lmk\n"
    "# numPoints = {num_points}\n"
    "# symbolScale = 5.5\n"
    "# symbolType = 11\n"
    "# visibility = 1\n"
    "# textScale = 12.5\n"
    "# color = 0.4,1,1\n"
    "# selectedColor = 0.807843,0.560784,1\n"
    "# opacity = 1\n"
    "# ambient = 0\n"
    "# diffuse = 1\n"
    "# specular = 0\n"
    "# power = 1\n"
    "# locked = 1\n"
    "# columns = label,x,y,z,sel,vis\n"
)


def select_points(landmarks: LandmarkSet, point_set: PointSetName) -> NDArray:
    """Return the fixed or moving rows of a landmark set."""
    if point_set == "fixed":
        return landmarks.fixed_points
    if point_set == "moving":
        if not landmarks.has_moving_points:
            raise ValueError("Landmark set has no moving points")
        return landmarks.moving_points
    raise ValueError(f"Invalid point set: {point_set}")


class LandmarkWriter:
    """Base class for landmark writers.

    Subclasses set ``suffix`` and implement ``render``.
    """

    suffix = ""

    def output_path(self, input_path: str, output_dir: str) -> str:
        return output_path_for(output_dir, input_path, self.suffix)

    def render(self, landmarks: LandmarkSet) -> str:
        raise NotImplementedError("This method should be implemented by the subclass.")

    def write(
        self, landmarks: LandmarkSet, input_path: str, output_dir: str
    ) -> Optional[str]:
        """Render ``landmarks`` and write them next to ``output_dir``.

        Args:
            landmarks: Landmarks to write
            input_path: Path of the landmark file they were read from
            output_dir: Directory receiving the output file

        Returns:
            str | None: Path of the written file, or None if it could not be
            created. A partially written file is removed.
        """
        text = self.render(landmarks)
        path = self.output_path(input_path, output_dir)
        logger.info(f"Creating output file: {path}")
        try:
            f = open(path, "w", encoding="utf-8", newline="\n")
        except OSError as e:
            logger.error(f"Failed to create output file {path}: {e}")
            return None

        try:
            with f:
                f.write(text)
        except OSError as e:
            logger.error(f"Failed to write output file {path}: {e}")
            self._remove_partial(path)
            return None
        return path

    @staticmethod
    def _remove_partial(path: str) -> None:
        try:
            os.remove(path)
        except OSError as e:
            logger.warning(f"Could not remove partial output file {path}: {e}")


class TransformixParameterWriter(LandmarkWriter):
    """Writes a SplineKernelTransform parameter file for Transformix.

    The moving points become the transform parameters and the fixed points
    the ``FixedImageLandmarks``. Both are needed, so single-set landmark
    lists are rejected.
    """

    suffix = "_transformix.txt"

    @staticmethod
    def _point_sequence(points: NDArray) -> str:
        return "".join(" " + format_coordinates(row) for row in points_to_zyx(points))

    def render(self, landmarks: LandmarkSet) -> str:
        if not landmarks.has_moving_points:
            raise ValueError(
                "Transformix parameter files need both fixed and moving landmarks"
            )

        num_parameters = landmarks.dimension_count * landmarks.point_count
        lines = [
            '(Transform "SplineKernelTransform")',
            f"(NumberOfParameters {num_parameters})",
            f"(TransformParameters{self._point_sequence(landmarks.moving_points)})",
            '(InitialTransformParametersFileName "NoInitialTransform")',
            '(HowToCombineTransforms "Compose")',
            "",
            "// Image specific",
            "(FixedImageDimension 3)",
            "(MovingImageDimension 3)",
            '(FixedInternalImagePixelType "float")',
            '(MovingInternalImagePixelType "float")',
            f"(Size {landmarks.image_dimensions})",
            "(Index 0 0 0)",
            f"(Spacing {format_coordinates(landmarks.voxel_spacing)})",
            f"(Origin {format_coordinates(landmarks.voxel_offset)})",
            f"(Direction {IDENTITY_DIRECTION})",
            '(UseDirectionCosines "true")',
            "",
            "// SplineKernelTransform specific",
            '(SplineKernelType "ThinPlateSpline")',
            "(SplinePoissonRatio 0.0)",
            "(SplineRelaxationFactor 0.0)",
            f"(FixedImageLandmarks{self._point_sequence(landmarks.fixed_points)})",
            "",
            "// ResampleInterpolator specific",
            '(ResampleInterpolator "FinalBSplineInterpolator")',
            "(FinalBSplineInterpolationOrder 3)",
            "",
            "// Resampler specific",
            '(Resampler "DefaultResampler")',
            "(DefaultPixelValue 0.000000)",
            '(ResultImageFormat "mhd")',
            '(ResultImagePixelType "short")',
            '(CompressResultImage "false")',
        ]
        return "\n".join(lines) + "\n"


class SlicerFiducialWriter(LandmarkWriter):
    """Writes one point set as a 3D Slicer fiducial (.fcsv) file.

    Rows are ``label, -z, -y, x, 0, 1``: a 1-based label, the point in
    Slicer's axis convention, then unselected and visible flags.
    """

    def __init__(self, point_set: PointSetName = "fixed"):
        self.point_set = point_set
        self.suffix = f"_{point_set}_slicer.fcsv"

    def render(self, landmarks: LandmarkSet) -> str:
        points = points_to_slicer(select_points(landmarks, self.point_set))
        rows = [
            f"{label}, {format_coordinates(row, ', ')}, 0, 1"
            for label, row in enumerate(points, start=1)
        ]
        return SLICER_HEADER.format(num_points=landmarks.point_count) + "\n".join(rows)


class TextLandmarkWriter(LandmarkWriter):
    """Writes one point set as a plain text point list.

    The file starts with the literal ``point`` and the number of points,
    followed by one ``z y x`` line per landmark.
    """

    def __init__(self, point_set: PointSetName = "fixed"):
        self.point_set = point_set
        self.suffix = f"_{point_set}_landmarks.txt"

    def render(self, landmarks: LandmarkSet) -> str:
        points = points_to_zyx(select_points(landmarks, self.point_set))
        lines = ["point", str(landmarks.point_count)]
        lines.extend(format_coordinates(row) for row in points)
        return "\n".join(lines) + "\n"


def write_transformix_parameters(
    landmarks: LandmarkSet, input_path: str, output_dir: str
) -> Optional[str]:
    return TransformixParameterWriter().write(landmarks, input_path, output_dir)


def write_slicer_fiducials(
    landmarks: LandmarkSet,
    input_path: str,
    output_dir: str,
    point_set: PointSetName = "fixed",
) -> Optional[str]:
    return SlicerFiducialWriter(point_set).write(landmarks, input_path, output_dir)


def write_text_landmarks(
    landmarks: LandmarkSet,
    input_path: str,
    output_dir: str,
    point_set: PointSetName = "fixed",
) -> Optional[str]:
    return TextLandmarkWriter(point_set).write(landmarks, input_path, output_dir)


def ensure_output_dir(output_dir: str) -> None:
    """Create ``output_dir`` and its parents if missing."""
    os.makedirs(output_dir, exist_ok=True)
