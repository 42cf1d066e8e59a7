#!/usr/bin/env python
"""
Tests for the shared logging base class.
"""

import logging

import pytest

from landmark_converter.landmark_converter_base import (
    LOGGER_NAME,
    LandmarkConverterBase,
    get_module_logger,
)


class _Step(LandmarkConverterBase):
    def __init__(self, name):
        super().__init__(class_name=name, log_level=logging.INFO)


class TestLandmarkConverterBase:
    """Test the shared logger and class filter."""

    def test_shared_logger(self):
        first = _Step("First")
        second = _Step("Second")
        assert first.logger is second.logger
        assert first.logger.name == "LandmarkConverter"

    def test_string_log_level(self):
        step = LandmarkConverterBase(class_name="Step", log_level="debug")
        assert step.log_level == logging.DEBUG

    def test_class_filter(self):
        _Step("First")
        LandmarkConverterBase.set_log_classes(["First", "Other"])
        assert LandmarkConverterBase._class_filter.enabled
        assert LandmarkConverterBase._class_filter.allowed_classes == {
            "First",
            "Other",
        }
        LandmarkConverterBase.set_log_all_classes()
        assert not LandmarkConverterBase._class_filter.enabled

    def test_messages_carry_class_name(self, tmp_path):
        step = _Step("Writer")
        log_file = tmp_path / "steps.log"
        LandmarkConverterBase.set_log_level("INFO")
        LandmarkConverterBase.add_log_file(str(log_file))

        step.log_section("Converting %s", "case01")
        step.log_info("Read %d landmarks", 3)

        text = log_file.read_text()
        assert "Writer Converting case01" in text
        assert "Writer Read 3 landmarks" in text
        assert "=" * 70 in text

    def test_filtered_class_is_silent(self, tmp_path):
        step = _Step("Hidden")
        log_file = tmp_path / "filtered.log"
        LandmarkConverterBase.set_log_level("INFO")
        LandmarkConverterBase.add_log_file(str(log_file))
        LandmarkConverterBase.set_log_classes(["Visible"])

        step.log_info("not shown")

        assert log_file.read_text() == ""


class TestModuleLoggers:
    """Test that library modules log into the package logger tree."""

    def test_module_logger_name(self):
        logger = get_module_logger("landmark_converter.landmark_io.writers")
        assert logger.name == "LandmarkConverter.writers"
        assert logger.parent is logging.getLogger(LOGGER_NAME)

    def test_module_messages_reach_log_file(self, tmp_path):
        _Step("Workflow")
        log_file = tmp_path / "library.log"
        LandmarkConverterBase.set_log_level("DEBUG")
        LandmarkConverterBase.add_log_file(str(log_file))

        get_module_logger("pkg.registration_reader").debug("Dropping count 2")

        assert "DEBUG Dropping count 2" in log_file.read_text()

    def test_module_messages_follow_level(self, tmp_path):
        _Step("Workflow")
        log_file = tmp_path / "level.log"
        LandmarkConverterBase.set_log_level("WARNING")
        LandmarkConverterBase.add_log_file(str(log_file))

        get_module_logger("pkg.writers").info("Creating output file")

        assert log_file.read_text() == ""

    def test_filter_selects_module_names(self, tmp_path):
        step = _Step("Workflow")
        log_file = tmp_path / "modules.log"
        LandmarkConverterBase.set_log_level("INFO")
        LandmarkConverterBase.add_log_file(str(log_file))
        LandmarkConverterBase.set_log_classes(["writers"])

        step.log_info("workflow message")
        get_module_logger("pkg.point_pair_reader").info("reader message")
        get_module_logger("pkg.writers").info("writer message")

        text = log_file.read_text()
        assert "writer message" in text
        assert "reader message" not in text
        assert "workflow message" not in text


if __name__ == "__main__":
    pytest.main([__file__, "-v", "-s"])
