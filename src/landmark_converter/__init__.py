"""
LandmarkConverter - Landmark pair conversion for medical image registration.

Reads paired anatomical landmarks from annotation-tool point-pair files
(voxel indices plus a MetaImage header) or registration landmark lists
(physical coordinates), and writes them as Transformix spline-transform
parameter files, 3D Slicer fiducial files or plain text point lists.

Main Components:
    - WorkflowConvertLandmarks: Read, transform and write one landmark file
    - landmark_io: Readers, writers and coordinate utilities
    - LandmarkConverterBase: Base class with standardized logging
"""

__version__ = "1.3.0"

from . import landmark_io

# Base classes
from .landmark_converter_base import LandmarkConverterBase

# Workflow
from .workflow_convert_landmarks import (
    ConversionResult,
    WorkflowConvertLandmarks,
    convert_landmarks,
)

__all__ = [
    # Workflow classes
    "WorkflowConvertLandmarks",
    "ConversionResult",
    "convert_landmarks",
    # Base classes
    "LandmarkConverterBase",
    # Landmark I/O library
    "landmark_io",
]
