#!/usr/bin/env python
"""
Shared pytest fixtures for LandmarkConverter tests.

Sample point-pair files, MetaImage headers and registration landmark lists
are generated in pytest's tmp_path by factory fixtures, so tests can describe
exactly the landmarks they need.
"""

import logging
from pathlib import Path

import pytest

from landmark_converter.landmark_converter_base import (
    LOGGER_NAME,
    LandmarkConverterBase,
)


def point_pair_tokens(
    index,
    fixed,
    moving,
    manual=False,
    unsure=False,
    width=1,
    system_guess=False,
):
    """Build the labeled tokens of one point-pair record."""
    label = f"Point_{index:0{width}d}->"
    tokens = [
        f"{label}Distinctiveness=0.75",
        f"{label}ManuallyChosen={int(manual)}",
        f"{label}SqDiffRegion=12",
        f"{label}VeryUnsure={int(unsure)}",
    ]
    for axis in range(3):
        tokens.append(f"{label}{axis}={fixed[axis]}")
        tokens.append(f"{label}{axis}_Corresp={moving[axis]}")
        if system_guess:
            tokens.append(f"{label}{axis}_SystemGuess={moving[axis] + 1}")
    return tokens


@pytest.fixture(autouse=True)
def quiet_logging():
    """Keep workflow logging at WARNING so test output stays readable."""
    LandmarkConverterBase.set_log_level("WARNING")
    yield
    LandmarkConverterBase.set_log_all_classes()
    shared_logger = LandmarkConverterBase._shared_logger
    if shared_logger is not None:
        for handler in list(shared_logger.handlers):
            if isinstance(handler, logging.FileHandler):
                shared_logger.removeHandler(handler)
                handler.close()


@pytest.fixture
def package_log(caplog):
    """caplog attached to the LandmarkConverter logger tree.

    The package logger stops propagation once its handlers are installed, so
    pytest's root handler alone would miss library messages.
    """
    package_logger = logging.getLogger(LOGGER_NAME)
    package_logger.addHandler(caplog.handler)
    yield caplog
    package_logger.removeHandler(caplog.handler)


@pytest.fixture
def write_header(tmp_path):
    """Factory writing a MetaImage header; returns its path."""

    def _write(
        offset=(0, 0, 0),
        spacing=(1, 1, 1),
        dim_size="512 512 120",
        name="fixed.mhd",
        extra_lines=(),
    ):
        lines = [
            "ObjectType = Image",
            "NDims = 3",
            "BinaryData = True",
            "BinaryDataByteOrderMSB = False",
            "TransformMatrix = 1 0 0 0 1 0 0 0 1",
            "Offset = " + " ".join(str(v) for v in offset),
            "CenterOfRotation = 0 0 0",
            "Orientation = RAI",
            "ElementSpacing = " + " ".join(str(v) for v in spacing),
            f"DimSize = {dim_size}",
            *extra_lines,
            "ElementType = MET_SHORT",
            "ElementDataFile = fixed.raw",
        ]
        path = tmp_path / name
        path.write_text("\n".join(lines) + "\n")
        return path

    return _write


@pytest.fixture
def write_point_pairs(tmp_path):
    """Factory writing a point-pair file.

    ``points`` is a list of dicts with keys fixed, moving and optionally
    manual, unsure and system_guess.
    """

    def _write(
        points,
        fixed_header,
        moving_header=None,
        width=1,
        name="case01_pointpairs.txt",
    ):
        fixed_header = Path(fixed_header)
        moving_header = fixed_header if moving_header is None else moving_header
        lines = [f"Scan_1={fixed_header}", f"Scan_2={moving_header}"]
        for index, point in enumerate(points):
            lines.extend(
                point_pair_tokens(
                    index,
                    point["fixed"],
                    point["moving"],
                    manual=point.get("manual", False),
                    unsure=point.get("unsure", False),
                    width=width,
                    system_guess=point.get("system_guess", False),
                )
            )
        path = tmp_path / name
        path.write_text("\n".join(lines) + "\n")
        return path

    return _write


@pytest.fixture
def write_registration_list(tmp_path):
    """Factory writing a registration landmark list; returns its path."""

    def _write(values, name="case01_ireg.txt"):
        path = tmp_path / name
        path.write_text(" ".join(str(v) for v in values) + "\n")
        return path

    return _write


@pytest.fixture
def output_dir(tmp_path):
    """Empty directory receiving converted files."""
    path = tmp_path / "out"
    path.mkdir()
    return path
