"""
Unit tests for time display strings.
"""
import math

import pytest

from ui.qt_gui.widgets.waveform.timing import format_clock
from ui.qt_gui.widgets.waveform.timing.time_format import format_duration, format_section_time


@pytest.mark.parametrize("seconds,expected", [
    (0, "0:00"),
    (9.99, "0:09"),
    (65, "1:05"),
    (600, "10:00"),
    (-3, "0:00"),
    (math.nan, "0:00"),
    (math.inf, "0:00"),
])
def test_format_clock(seconds, expected):
    assert format_clock(seconds) == expected


@pytest.mark.parametrize("seconds,expected", [
    (0, "0:00.00"),
    (75.5, "1:15.50"),
    (12.345, "0:12.34"),
])
def test_format_section_time(seconds, expected):
    assert format_section_time(seconds) == expected


def test_format_duration():
    assert format_duration(12.5) == "12.50s"
