"""Landmark file reading, coordinate mapping and writing.

Readers:
- Annotation-tool point-pair files (voxel indices + MetaImage header)
- Registration-tool landmark lists (physical coordinates)

Writers:
- Transformix SplineKernelTransform parameter files
- 3D Slicer fiducial files (.fcsv)
- Plain text point lists

Example Usage:
    >>> from landmark_converter.landmark_io import (
    ...     read_point_pair_file,
    ...     write_text_landmarks,
    ... )
    >>> landmarks = read_point_pair_file("case01_pointpairs.txt", keep_all=True)
    >>> write_text_landmarks(landmarks, "case01_pointpairs.txt", "out", "fixed")
    'out/case01_pointpairs_fixed_landmarks.txt'
"""

from .coordinate_utils import (
    derive_base_filename,
    format_coordinates,
    format_number,
    output_path_for,
    points_to_slicer,
    points_to_zyx,
    voxel_to_physical,
)
from .data_structures import (
    InputFormat,
    LandmarkConverterError,
    LandmarkParseError,
    LandmarkSet,
    MetaHeader,
    MissingSourceFileError,
    OutputFormat,
    PointPairRecord,
    UnsupportedFormatError,
    UnsupportedPairingError,
)
from .point_pair_reader import (
    POINT_RECORD_GRAMMAR,
    LabeledTokenStream,
    PointPairReader,
    normalize_header_path,
    parse_point_record,
    read_meta_header,
    read_point_pair_file,
)
from .registration_reader import (
    RegistrationReader,
    parse_registration_values,
    read_registration_file,
)
from .writers import (
    LandmarkWriter,
    SlicerFiducialWriter,
    TextLandmarkWriter,
    TransformixParameterWriter,
    ensure_output_dir,
    write_slicer_fiducials,
    write_text_landmarks,
    write_transformix_parameters,
)

__all__ = [
    # Data structures
    "InputFormat",
    "OutputFormat",
    "LandmarkSet",
    "MetaHeader",
    "PointPairRecord",
    # Errors
    "LandmarkConverterError",
    "LandmarkParseError",
    "MissingSourceFileError",
    "UnsupportedFormatError",
    "UnsupportedPairingError",
    # Coordinate utilities
    "voxel_to_physical",
    "points_to_zyx",
    "points_to_slicer",
    "format_number",
    "format_coordinates",
    "derive_base_filename",
    "output_path_for",
    # Readers
    "POINT_RECORD_GRAMMAR",
    "LabeledTokenStream",
    "PointPairReader",
    "RegistrationReader",
    "normalize_header_path",
    "parse_point_record",
    "parse_registration_values",
    "read_meta_header",
    "read_point_pair_file",
    "read_registration_file",
    # Writers
    "LandmarkWriter",
    "TransformixParameterWriter",
    "SlicerFiducialWriter",
    "TextLandmarkWriter",
    "ensure_output_dir",
    "write_transformix_parameters",
    "write_slicer_fiducials",
    "write_text_landmarks",
]
