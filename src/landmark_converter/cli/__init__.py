"""Command-line interface modules for LandmarkConverter."""

__all__ = [
    "convert_landmarks",
]
