"""Reader for registration-tool landmark lists.

The file is a flat list of whitespace separated numbers that are already in
physical space. Every number is data: a list of 3n values holds n points,
and in a list of 3n+1 values the first value is the point count rather than
a coordinate and is dropped. The list is stored in reverse order.
"""

from pathlib import Path

import numpy as np

from ..landmark_converter_base import get_module_logger
from .data_structures import (
    NUM_DIMS,
    LandmarkParseError,
    LandmarkSet,
    MissingSourceFileError,
)

logger = get_module_logger(__name__)


def parse_registration_values(
    values: list[float], filename: str | None = None
) -> np.ndarray:
    """Apply the point-count rule to a raw value list.

    Args:
        values: Every number of the file, in file order
        filename: Source path for error messages

    Returns:
        np.ndarray: Flat coordinate sequence, reversed

    Raises:
        LandmarkParseError: If no coordinates remain or the count cannot be
            split into triplets
    """
    coords = list(values)
    if len(coords) % NUM_DIMS == 1:
        logger.debug(f"Dropping leading point count {coords[0]:g}")
        coords = coords[1:]
    if not coords:
        raise LandmarkParseError("Landmark list has no coordinates", path=filename)
    if len(coords) % NUM_DIMS != 0:
        raise LandmarkParseError(
            f"{len(coords)} coordinates cannot be grouped into {NUM_DIMS}D points",
            path=filename,
        )

    declared = len(values) != len(coords)
    if declared and int(values[0]) != len(coords) // NUM_DIMS:
        logger.warning(
            f"Point count {values[0]:g} does not match the "
            f"{len(coords) // NUM_DIMS} points listed"
        )

    return np.array(coords[::-1], dtype=np.float64)


class RegistrationReader:
    """Reads a registration landmark list into a single-set LandmarkSet."""

    @staticmethod
    def read(filename: str | Path) -> LandmarkSet:
        """Read the landmark list.

        Args:
            filename: Path to the landmark list file

        Returns:
            LandmarkSet: Fixed points only, ``moving_points`` is None

        Raises:
            MissingSourceFileError: If the file cannot be opened
            LandmarkParseError: If a value is not numeric or the list is
                malformed
        """
        filename = str(filename)
        logger.info(f"Opening landmarks file: {filename}")
        try:
            with open(filename, "r", encoding="utf-8") as f:
                tokens = f.read().split()
        except OSError as e:
            raise MissingSourceFileError(
                f"Failed to open landmarks file {filename}: {e}"
            ) from e
        except UnicodeDecodeError as e:
            raise LandmarkParseError(
                f"Landmark list is not UTF-8 text (byte {e.start})", path=filename
            ) from e

        values = []
        for number, token in enumerate(tokens, start=1):
            try:
                values.append(float(token))
            except ValueError as e:
                raise LandmarkParseError(
                    f"Non-numeric value '{token}'", path=filename, token_number=number
                ) from e

        coords = parse_registration_values(values, filename)
        point_count = len(coords) // NUM_DIMS
        logger.info(f"Read {point_count} landmarks")

        return LandmarkSet(point_count=point_count, fixed_points=coords)


def read_registration_file(filename: str | Path) -> LandmarkSet:
    """Read a registration landmark list. See RegistrationReader.read."""
    return RegistrationReader.read(filename)
