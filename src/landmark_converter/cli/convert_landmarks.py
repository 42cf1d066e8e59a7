#!/usr/bin/env python
"""
Command-line interface for landmark conversion.

Reads landmark pairs from an annotation-tool point-pair file or a
registration landmark list and writes them as a Transformix parameter file,
3D Slicer fiducial files or plain text point lists.
"""

import argparse
import sys

from landmark_converter import LandmarkConverterBase, WorkflowConvertLandmarks
from landmark_converter.landmark_io import (
    InputFormat,
    LandmarkConverterError,
    OutputFormat,
)

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def parse_drive_map(entries: list[str] | None) -> dict[str, str]:
    """Turn ``DRIVE=DIR`` entries into a drive map.

    Raises:
        ValueError: If an entry has no ``=``
    """
    drive_map = {}
    for entry in entries or []:
        drive, sep, directory = entry.partition("=")
        if not sep or not drive:
            raise ValueError(
                f"Drive mapping must look like Z:=/mnt/share, got '{entry}'"
            )
        drive_map[drive] = directory
    return drive_map


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Convert landmark pairs between registration file formats",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Input formats:
  ix_pp    Point pair file of landmarks matched with the annotation tool
  ireg     Registration landmark list (physical coordinates)

Output formats:
  tfx_lmk  Transformix landmark-based transform parameter file
  slr_fid  3D Slicer fiducial file(s)
  std_txt  Plain text file(s)

Examples:
  # Point pairs to Transformix, dropping very unsure manual points
  %(prog)s -in_file case01.txt -in_type ix_pp -out_dir out -out_type tfx_lmk -keep_all 0

  # Registration landmarks to Slicer fiducials
  %(prog)s -in_file lmk.txt -in_type ireg -out_dir out -out_type slr_fid -keep_all 1

  # Header paths recorded on a Windows share
  %(prog)s -in_file case01.txt -in_type ix_pp -out_dir out -out_type std_txt \\
      -keep_all 1 --drive-map Z:=/mnt/share
        """,
    )

    parser.add_argument(
        "-in_file",
        required=True,
        dest="input_file",
        help="The input file containing the landmarks",
    )
    parser.add_argument(
        "-in_type",
        required=True,
        choices=[f.value for f in InputFormat],
        dest="input_format",
        help="The format of the input landmarks",
    )
    parser.add_argument(
        "-out_dir",
        required=True,
        dest="output_dir",
        help="The directory where the output file(s) will be written",
    )
    parser.add_argument(
        "-out_type",
        required=True,
        choices=[f.value for f in OutputFormat],
        dest="output_format",
        help="The format of the output landmarks",
    )
    parser.add_argument(
        "-keep_all",
        required=True,
        choices=["0", "1"],
        dest="keep_all",
        help="Keep (1) or discard (0) manually chosen points marked very unsure",
    )
    parser.add_argument(
        "--drive-map",
        nargs="+",
        default=None,
        metavar="DRIVE=DIR",
        help="Replace Windows drive prefixes of header paths, e.g. Z:=/mnt/share",
    )
    parser.add_argument(
        "--make-out-dir",
        action="store_true",
        help="Create the output directory if it does not exist",
    )
    parser.add_argument(
        "--log-level",
        choices=LOG_LEVELS,
        default="INFO",
        help="Logging level (default: INFO)",
    )
    parser.add_argument(
        "--log-file",
        default=None,
        help="Also write log messages to this file",
    )
    parser.add_argument(
        "--log-classes",
        nargs="+",
        default=None,
        metavar="NAME",
        help="Only show log messages from these classes or modules, "
        "e.g. WorkflowConvertLandmarks point_pair_reader writers",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Command-line interface for landmark conversion."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        drive_map = parse_drive_map(args.drive_map)
    except ValueError as e:
        print(f"Error: {e}")
        return 1

    try:
        workflow = WorkflowConvertLandmarks(
            input_file=args.input_file,
            input_format=args.input_format,
            output_dir=args.output_dir,
            output_format=args.output_format,
            keep_all=args.keep_all == "1",
            drive_map=drive_map,
            make_output_dir=args.make_out_dir,
            log_level=args.log_level,
        )
    except LandmarkConverterError as e:
        print(f"Error: {e}")
        return 1

    LandmarkConverterBase.set_log_level(args.log_level)
    if args.log_classes:
        LandmarkConverterBase.set_log_classes(args.log_classes)
    if args.log_file is not None:
        try:
            LandmarkConverterBase.add_log_file(args.log_file)
        except OSError as e:
            print(f"Error: Cannot open log file {args.log_file}: {e}")
            return 1

    try:
        result = workflow.run()
    except LandmarkConverterError as e:
        print(f"\nError during conversion: {e}")
        return 1

    if not result.success:
        print(f"\nFailed to create output file(s): {', '.join(result.failed)}")
        return 1

    print("\nConversion completed successfully.")
    for path in result.written:
        print(f"Output: {path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
