"""Reader for annotation-tool point-pair files.

A point-pair file starts with two lines naming the MetaImage headers of the
fixed and moving images, optionally prefixed by ``Scan_<n>=``. The rest of the
file is a stream of whitespace separated labeled tokens, one landmark after
another::

    Scan_1=C:\\cases\\case01\\fixed.mhd
    Scan_2=C:\\cases\\case01\\moving.mhd
    Point_00->Distinctiveness=0.84
    Point_00->ManuallyChosen=1
    Point_00->SqDiffRegion=12
    Point_00->VeryUnsure=0
    Point_00->0=112
    Point_00->0_Corresp=110
    Point_00->0_SystemGuess=109
    ...

Coordinates are voxel indices. They are mapped into physical space with the
offset and spacing of the fixed image header. The moving coordinates use the
fixed image grid as well, so both images are assumed to share one grid.
"""

import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

import numpy as np

from ..landmark_converter_base import get_module_logger
from .coordinate_utils import voxel_to_physical
from .data_structures import (
    NUM_DIMS,
    LandmarkParseError,
    LandmarkSet,
    MetaHeader,
    MissingSourceFileError,
    PointPairRecord,
)

logger = get_module_logger(__name__)

TOKEN_PATTERN = re.compile(r"^Point_(?P<index>\d+)->(?P<tag>[^=]+)=(?P<value>.*)$")
SCAN_PREFIX_PATTERN = re.compile(r"^Scan_\d+=")
SYSTEM_GUESS_SUFFIX = "_SystemGuess"

ORIENTATION_KEYS = ("Orientation", "AnatomicalOrientation")
DIMSIZE_KEYS = ("DimSize",)
OFFSET_KEYS = ("Offset", "Origin", "Position")
SPACING_KEYS = ("ElementSpacing",)
# Pixel data follows this key in single-file (.mha) images
LAST_HEADER_KEY = "ElementDataFile"


def _parse_flag(text: str) -> bool:
    return float(text) != 0.0


@dataclass(frozen=True)
class FieldSpec:
    """One labeled field of a point record.

    Attributes:
        tag: Text between ``->`` and ``=`` in the token
        name: Record value name, or None for fields that are read and ignored
        parse: Converts the token value text
        required: Whether the token must be present
    """

    tag: str
    name: Optional[str] = None
    parse: Callable[[str], object] = str
    required: bool = True


def _coordinate_fields() -> tuple[FieldSpec, ...]:
    fields = []
    for axis in range(NUM_DIMS):
        fields.append(FieldSpec(f"{axis}", f"fixed_{axis}", float))
        fields.append(FieldSpec(f"{axis}_Corresp", f"moving_{axis}", float))
    return tuple(fields)


# Field order of one landmark. SystemGuess companions may follow any token
# and are skipped.
POINT_RECORD_GRAMMAR: tuple[FieldSpec, ...] = (
    FieldSpec("Distinctiveness", required=False),
    FieldSpec("ManuallyChosen", "manually_chosen", _parse_flag),
    FieldSpec("SqDiffRegion", required=False),
    FieldSpec("VeryUnsure", "very_unsure", _parse_flag, required=False),
) + _coordinate_fields()


@dataclass(frozen=True)
class LabeledToken:
    """A parsed ``Point_<index>-><tag>=<value>`` token."""

    index: int
    tag: str
    value: str
    number: int  # 1-based position in the token stream


class LabeledTokenStream:
    """Sequential access to the labeled tokens of a point-pair file.

    ``expect`` consumes a token that must carry a given tag and point index,
    ``accept`` consumes it only if it matches, ``skip_system_guesses`` drops
    SystemGuess companions.
    """

    def __init__(self, tokens: list[str], path: Optional[str] = None):
        self.tokens = tokens
        self.path = path
        self.position = 0

    def at_end(self) -> bool:
        return self.position >= len(self.tokens)

    def peek(self) -> Optional[LabeledToken]:
        """Parse the next token without consuming it."""
        if self.at_end():
            return None
        text = self.tokens[self.position]
        match = TOKEN_PATTERN.match(text)
        if match is None:
            raise LandmarkParseError(
                f"Malformed landmark token '{text}'",
                path=self.path,
                token_number=self.position + 1,
            )
        return LabeledToken(
            index=int(match.group("index")),
            tag=match.group("tag"),
            value=match.group("value"),
            number=self.position + 1,
        )

    def accept(self, tag: str, index: int) -> Optional[LabeledToken]:
        token = self.peek()
        if token is None or token.tag != tag:
            return None
        if token.index != index:
            raise LandmarkParseError(
                f"Point index {token.index} found inside the record of point {index}",
                path=self.path,
                token_number=token.number,
            )
        self.position += 1
        return token

    def expect(self, tag: str, index: int) -> LabeledToken:
        token = self.accept(tag, index)
        if token is None:
            found = self.peek()
            if found is None:
                raise LandmarkParseError(
                    f"File ended while reading field '{tag}' of point {index}",
                    path=self.path,
                    token_number=self.position + 1,
                )
            raise LandmarkParseError(
                f"Expected field '{tag}' of point {index} but found '{found.tag}'",
                path=self.path,
                token_number=found.number,
            )
        return token

    def skip_system_guesses(self, index: int) -> int:
        """Consume SystemGuess tokens of point ``index``; return how many."""
        skipped = 0
        while True:
            token = self.peek()
            if (
                token is None
                or token.index != index
                or not token.tag.endswith(SYSTEM_GUESS_SUFFIX)
            ):
                return skipped
            self.position += 1
            skipped += 1


def parse_point_record(stream: LabeledTokenStream) -> PointPairRecord:
    """Consume one landmark record following POINT_RECORD_GRAMMAR."""
    first = stream.peek()
    if first is None:
        raise LandmarkParseError("No landmark record to read", path=stream.path)
    index = first.index

    values: dict[str, object] = {"very_unsure": False}
    for field_spec in POINT_RECORD_GRAMMAR:
        stream.skip_system_guesses(index)
        if field_spec.required:
            token = stream.expect(field_spec.tag, index)
        else:
            token = stream.accept(field_spec.tag, index)
            if token is None:
                continue
        if field_spec.name is None:
            continue
        try:
            values[field_spec.name] = field_spec.parse(token.value)
        except ValueError as e:
            raise LandmarkParseError(
                f"Invalid value '{token.value}' for field "
                f"'{field_spec.tag}' of point {index}",
                path=stream.path,
                token_number=token.number,
            ) from e
    stream.skip_system_guesses(index)

    return PointPairRecord(
        index=index,
        manually_chosen=bool(values["manually_chosen"]),
        very_unsure=bool(values["very_unsure"]),
        fixed_voxel=np.array([values[f"fixed_{a}"] for a in range(NUM_DIMS)]),
        moving_voxel=np.array([values[f"moving_{a}"] for a in range(NUM_DIMS)]),
    )


def normalize_header_path(
    raw_path: str,
    base_dir: Optional[str] = None,
    drive_map: Optional[dict[str, str]] = None,
) -> str:
    """Turn a header path line of a point-pair file into a local path.

    Removes the ``Scan_<n>=`` label, converts backslashes to forward slashes
    and rewrites Windows drive prefixes listed in ``drive_map`` (for example
    ``{"Z:": "/mnt/share"}``). A relative path that does not exist as given is
    looked up next to the point-pair file.

    Args:
        raw_path: Header path line as it appears in the file
        base_dir: Directory of the point-pair file
        drive_map: Drive prefix to local directory replacements

    Returns:
        str: Normalized header path
    """
    path = SCAN_PREFIX_PATTERN.sub("", raw_path.strip()).replace("\\", "/")

    for drive, mount in (drive_map or {}).items():
        prefix = drive.replace("\\", "/").rstrip("/")
        if path.lower().startswith(prefix.lower()):
            path = mount.replace("\\", "/").rstrip("/") + path[len(prefix) :]
            break

    if base_dir and not os.path.isabs(path) and not os.path.exists(path):
        candidate = os.path.join(base_dir, path)
        if os.path.exists(candidate):
            path = candidate

    return path


def _parse_triplet(text: str, key: str, path: str, line_number: int) -> np.ndarray:
    components = text.split()
    try:
        values = [float(v) for v in components[:NUM_DIMS]]
    except ValueError as e:
        raise LandmarkParseError(
            f"Non-numeric {key} value '{text}' on line {line_number}", path=path
        ) from e
    if len(values) < NUM_DIMS:
        raise LandmarkParseError(
            f"{key} needs {NUM_DIMS} components, got '{text}' on line {line_number}",
            path=path,
        )
    return np.array(values)


def read_meta_header(filename: str | Path) -> MetaHeader:
    """Read orientation, size, offset and spacing from a MetaImage header.

    Lines have the form ``Key = Value``. When a key repeats, the last
    occurrence wins. Reading stops at ``ElementDataFile``.

    Args:
        filename: Path to the .mhd (or .mha) file

    Returns:
        MetaHeader: Parsed header fields

    Raises:
        MissingSourceFileError: If the header cannot be opened
        LandmarkParseError: If Offset or ElementSpacing is missing or malformed
    """
    filename = str(filename)
    header = MetaHeader()

    logger.info(f"Opening MetaHeader file: {filename}")
    try:
        with open(filename, "r", encoding="utf-8", errors="replace") as f:
            for line_number, line in enumerate(f, start=1):
                key, sep, value = line.partition("=")
                if not sep:
                    continue
                key = key.strip()
                value = value.strip()
                if key in ORIENTATION_KEYS:
                    header.orientation = value
                elif key in DIMSIZE_KEYS:
                    header.image_dimensions = value
                elif key in OFFSET_KEYS:
                    header.offset = _parse_triplet(value, key, filename, line_number)
                elif key in SPACING_KEYS:
                    header.spacing = _parse_triplet(value, key, filename, line_number)
                elif key == LAST_HEADER_KEY:
                    break
    except OSError as e:
        raise MissingSourceFileError(
            f"Failed to open fixed image header {filename}: {e}"
        ) from e

    if header.offset is None:
        raise LandmarkParseError("Image header has no Offset entry", path=filename)
    if header.spacing is None:
        raise LandmarkParseError(
            "Image header has no ElementSpacing entry", path=filename
        )

    logger.debug(
        f"Header DimSize='{header.image_dimensions}' offset={header.offset} "
        f"spacing={header.spacing}"
    )
    return header


class PointPairReader:
    """Reads an annotation-tool point-pair file into a LandmarkSet.

    Example:
        >>> reader = PointPairReader(keep_all=False)
        >>> landmarks = reader.read("case01_pointpairs.txt")
        >>> landmarks.fixed_points.shape
        (12, 3)
    """

    def __init__(
        self,
        keep_all: bool = False,
        drive_map: Optional[dict[str, str]] = None,
    ):
        """
        Args:
            keep_all: Keep manually chosen points flagged very unsure
            drive_map: Windows drive prefix replacements for header paths
        """
        self.keep_all = keep_all
        self.drive_map = dict(drive_map or {})

    def read_text(self, filename: str) -> tuple[str, str, list[str]]:
        """Split a point-pair file into its two header paths and its tokens."""
        logger.info(f"Opening point pairs file: {filename}")
        try:
            with open(filename, "r", encoding="utf-8") as f:
                lines = f.read().splitlines()
        except OSError as e:
            raise MissingSourceFileError(
                f"Failed to open point pairs file {filename}: {e}"
            ) from e
        except UnicodeDecodeError as e:
            raise LandmarkParseError(
                f"Point pairs file is not UTF-8 text (byte {e.start})", path=filename
            ) from e

        lines = [line for line in lines if line.strip()]
        if len(lines) < 2:
            raise LandmarkParseError(
                "Point pairs file must start with fixed and moving header paths",
                path=filename,
            )

        tokens = []
        for line in lines[2:]:
            tokens.extend(line.split())
        return lines[0], lines[1], tokens

    def read_records(self, tokens: list[str], filename: str) -> list[PointPairRecord]:
        """Parse every landmark record of the token stream, in file order."""
        stream = LabeledTokenStream(tokens, path=filename)
        records = []
        while not stream.at_end():
            records.append(parse_point_record(stream))
        return records

    def read(self, filename: str | Path) -> LandmarkSet:
        """Read landmarks and convert them to physical coordinates.

        Args:
            filename: Path to the point-pair file

        Returns:
            LandmarkSet: Fixed and moving landmarks in file order

        Raises:
            MissingSourceFileError: If the point-pair file or the fixed image
                header cannot be opened
            LandmarkParseError: If the file is not UTF-8 text or a record does
                not follow the expected layout
        """
        filename = str(filename)
        fixed_line, moving_line, tokens = self.read_text(filename)
        base_dir = os.path.dirname(os.path.abspath(filename))
        fixed_header_path = normalize_header_path(fixed_line, base_dir, self.drive_map)
        moving_header_path = normalize_header_path(
            moving_line, base_dir, self.drive_map
        )
        logger.debug(f"Fixed image header: {fixed_header_path}")
        logger.debug(f"Moving image header: {moving_header_path}")

        records = self.read_records(tokens, filename)
        kept = []
        for record in records:
            if record.is_kept(self.keep_all):
                kept.append(record)
            else:
                logger.debug(f"Discarding very unsure point {record.index}")
        logger.info(f"Kept {len(kept)} of {len(records)} point pairs")

        header = read_meta_header(fixed_header_path)

        fixed_voxels = np.array([r.fixed_voxel for r in kept]).reshape(-1, NUM_DIMS)
        moving_voxels = np.array([r.moving_voxel for r in kept]).reshape(-1, NUM_DIMS)

        return LandmarkSet(
            point_count=len(kept),
            fixed_points=voxel_to_physical(fixed_voxels, header.spacing, header.offset),
            moving_points=voxel_to_physical(
                moving_voxels, header.spacing, header.offset
            ),
            image_dimensions=header.image_dimensions,
            voxel_offset=header.offset,
            voxel_spacing=header.spacing,
        )


def read_point_pair_file(
    filename: str | Path,
    keep_all: bool = False,
    drive_map: Optional[dict[str, str]] = None,
) -> LandmarkSet:
    """Read a point-pair file. See PointPairReader.read."""
    return PointPairReader(keep_all=keep_all, drive_map=drive_map).read(filename)
