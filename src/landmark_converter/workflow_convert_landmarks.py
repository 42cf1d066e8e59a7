"""
Landmark conversion workflow.

Reads landmarks in one of the supported input formats, maps them into
physical space where needed, and writes them in the requested output format.
Format tags select the reader and writer through lookup tables, and
unsupported input/output combinations are listed in one compatibility table
that is checked before any file is touched.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path

from landmark_converter.landmark_converter_base import LandmarkConverterBase
from landmark_converter.landmark_io import (
    InputFormat,
    LandmarkSet,
    LandmarkWriter,
    OutputFormat,
    PointPairReader,
    RegistrationReader,
    SlicerFiducialWriter,
    TextLandmarkWriter,
    TransformixParameterWriter,
    UnsupportedFormatError,
    UnsupportedPairingError,
    ensure_output_dir,
)

# (input, output) -> reason the conversion is not possible
UNSUPPORTED_PAIRINGS: dict[tuple[InputFormat, OutputFormat], str] = {
    (InputFormat.IREG, OutputFormat.TRANSFORMIX): (
        "Landmark list to Transformix parameters is not supported: "
        "a landmark list has no moving point set"
    ),
}

# Output formats written once per point set (fixed, then moving if present)
PER_POINT_SET_FORMATS = (OutputFormat.SLICER_FIDUCIAL, OutputFormat.TEXT)

READER_CLASSES: dict[InputFormat, type] = {
    InputFormat.IX_POINT_PAIRS: PointPairReader,
    InputFormat.IREG: RegistrationReader,
}

# Reader constructor options taken from the workflow settings
READER_OPTIONS: dict[InputFormat, tuple[str, ...]] = {
    InputFormat.IX_POINT_PAIRS: ("keep_all", "drive_map"),
    InputFormat.IREG: (),
}

WRITER_CLASSES: dict[OutputFormat, type[LandmarkWriter]] = {
    OutputFormat.TRANSFORMIX: TransformixParameterWriter,
    OutputFormat.SLICER_FIDUCIAL: SlicerFiducialWriter,
    OutputFormat.TEXT: TextLandmarkWriter,
}


def parse_input_format(tag: str | InputFormat) -> InputFormat:
    """Map an input format tag to InputFormat.

    Raises:
        UnsupportedFormatError: If the tag names no reader
    """
    try:
        return InputFormat(tag)
    except ValueError as e:
        options = ", ".join(f.value for f in InputFormat)
        raise UnsupportedFormatError(
            f"Unexpected input format '{tag}'. Options are: {options}"
        ) from e


def parse_output_format(tag: str | OutputFormat) -> OutputFormat:
    """Map an output format tag to OutputFormat.

    Raises:
        UnsupportedFormatError: If the tag names no writer
    """
    try:
        return OutputFormat(tag)
    except ValueError as e:
        options = ", ".join(f.value for f in OutputFormat)
        raise UnsupportedFormatError(
            f"Unexpected output format '{tag}'. Options are: {options}"
        ) from e


def check_pairing(input_format: InputFormat, output_format: OutputFormat) -> None:
    """Raise UnsupportedPairingError for combinations with no defined mapping."""
    reason = UNSUPPORTED_PAIRINGS.get((input_format, output_format))
    if reason is not None:
        raise UnsupportedPairingError(reason)


@dataclass
class ConversionResult:
    """Files produced by one conversion.

    Attributes:
        written: Paths of the files that were created
        failed: Paths of the files that could not be created
    """

    landmarks: LandmarkSet
    written: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.failed


class WorkflowConvertLandmarks(LandmarkConverterBase):
    """
    Workflow converting one landmark file between formats.

    Example:
        >>> workflow = WorkflowConvertLandmarks(
        ...     input_file="case01_pointpairs.txt",
        ...     input_format="ix_pp",
        ...     output_dir="out",
        ...     output_format="std_txt",
        ...     keep_all=False,
        ... )
        >>> result = workflow.run()
        >>> result.written
        ['out/case01_pointpairs_fixed_landmarks.txt',
         'out/case01_pointpairs_moving_landmarks.txt']
    """

    def __init__(
        self,
        input_file: str | Path,
        input_format: str | InputFormat,
        output_dir: str | Path,
        output_format: str | OutputFormat,
        *,
        keep_all: bool = False,
        drive_map: dict[str, str] | None = None,
        make_output_dir: bool = False,
        log_level: int | str = logging.INFO,
    ):
        """
        Initialize the conversion workflow.

        Format tags and their pairing are validated here, before any I/O.

        Args:
            input_file: Landmark file to read.
            input_format: "ix_pp" (point pairs) or "ireg" (landmark list).
            output_dir: Directory receiving the output file(s).
            output_format: "tfx_lmk", "slr_fid" or "std_txt".
            keep_all: Keep manually chosen point pairs flagged very unsure.
            drive_map: Windows drive prefix replacements for the header paths
                named in point-pair files, e.g. {"Z:": "/mnt/share"}.
            make_output_dir: Create output_dir if it does not exist.
            log_level: Logging level.

        Raises:
            UnsupportedFormatError: If a format tag is unknown.
            UnsupportedPairingError: If the formats cannot be combined.
        """
        super().__init__(class_name=self.__class__.__name__, log_level=log_level)
        self.input_file = str(input_file)
        self.input_format = parse_input_format(input_format)
        self.output_dir = str(output_dir)
        self.output_format = parse_output_format(output_format)
        self.keep_all = keep_all
        self.drive_map = dict(drive_map or {})
        self.make_output_dir = make_output_dir

        check_pairing(self.input_format, self.output_format)

    def read_landmarks(self) -> LandmarkSet:
        """Read the input file with the reader matching the input format."""
        reader_class = READER_CLASSES[self.input_format]
        options = {
            name: getattr(self, name) for name in READER_OPTIONS[self.input_format]
        }
        self.log_debug("Reader %s with options %s", reader_class.__name__, options)
        return reader_class(**options).read(self.input_file)

    def create_writers(self, landmarks: LandmarkSet) -> list[LandmarkWriter]:
        """Instantiate the writers needed for the output format."""
        writer_class = WRITER_CLASSES[self.output_format]
        if self.output_format not in PER_POINT_SET_FORMATS:
            return [writer_class()]
        writers = [writer_class("fixed")]
        if landmarks.has_moving_points:
            writers.append(writer_class("moving"))
        else:
            self.log_debug("No moving point set, writing fixed points only")
        return writers

    def write_landmarks(self, landmarks: LandmarkSet) -> ConversionResult:
        """Write ``landmarks`` with every writer of the output format."""
        result = ConversionResult(landmarks=landmarks)
        writers = self.create_writers(landmarks)
        if self.make_output_dir:
            try:
                ensure_output_dir(self.output_dir)
            except OSError as e:
                self.log_error(
                    "Failed to create output directory %s: %s", self.output_dir, e
                )
                result.failed.extend(
                    writer.output_path(self.input_file, self.output_dir)
                    for writer in writers
                )
                return result

        for writer in writers:
            path = writer.write(landmarks, self.input_file, self.output_dir)
            if path is None:
                result.failed.append(
                    writer.output_path(self.input_file, self.output_dir)
                )
            else:
                result.written.append(path)
        return result

    def run(self) -> ConversionResult:
        """
        Run the conversion: read, transform, write.

        Returns:
            ConversionResult: Written and failed output paths. ``success`` is
            False when any output file could not be created.

        Raises:
            MissingSourceFileError: If the input file or the image header it
                names cannot be opened.
            LandmarkParseError: If the input does not follow its format.
        """
        self.log_section("Landmark conversion workflow")
        self.log_info("Input: %s (%s)", self.input_file, self.input_format.value)
        self.log_info("Output: %s (%s)", self.output_dir, self.output_format.value)

        self.log_info("Starting conversion...")
        landmarks = self.read_landmarks()
        self.log_info("Read %d landmarks", landmarks.point_count)
        if landmarks.point_count == 0:
            self.log_warning("No landmarks left to write in %s", self.input_file)

        self.log_info("Starting write...")
        result = self.write_landmarks(landmarks)
        for path in result.written:
            self.log_info("Wrote %s", path)
        for path in result.failed:
            self.log_error("Could not write %s", path)

        if result.success:
            self.log_info("Conversion complete!")
        return result


def convert_landmarks(
    input_file: str | Path,
    input_format: str | InputFormat,
    output_dir: str | Path,
    output_format: str | OutputFormat,
    keep_all: bool = False,
    **kwargs,
) -> ConversionResult:
    """Convert one landmark file. See WorkflowConvertLandmarks."""
    workflow = WorkflowConvertLandmarks(
        input_file=input_file,
        input_format=input_format,
        output_dir=output_dir,
        output_format=output_format,
        keep_all=keep_all,
        **kwargs,
    )
    return workflow.run()

