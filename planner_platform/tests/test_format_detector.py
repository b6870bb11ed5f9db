"""Tests for raw output format classification."""

from __future__ import annotations

import pytest

from planner_app.services.format_detector import detect_format


@pytest.mark.parametrize(
    "raw, expected",
    [
        ('{"monthly_summary": "Plan A"}', "json"),
        ("  [1, 2, 3]  ", "json"),
        ('{"monthly_summary": "Plan A",', "mixed"),
        ('Here you go: {"monthly_summary": "Plan A"}', "mixed"),
        ("Week 1: focus on reading every morning", "text"),
        ("", "text"),
        (None, "text"),
    ],
)
def test_detect_format(raw, expected):
    assert detect_format(raw) == expected
