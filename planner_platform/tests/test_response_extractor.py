"""Tests for multi-strategy plan extraction."""

from __future__ import annotations

import json

from planner_app.services import response_extractor
from planner_app.services.response_extractor import (
    SUMMARY_SENTINEL,
    ExtractionSettings,
    default_week,
    extract_monthly_summary,
    extract_structured_data,
)
from planner_app.utils import WEEKDAYS

from conftest import PLAN_JSON

WEEK_PROSE = """Week 1
Focus: Foundations
Goals: Read two books, Draft outline
Monday:
- Read the first two chapters of the novel (2h)
- Sketch character arcs for main cast
Wednesday
09:00-10:30 Review yesterday's outline notes
Friday: Rest
"""


def test_json_object_is_trusted_verbatim():
    result = extract_structured_data(json.dumps(PLAN_JSON))

    assert result.structured_data == PLAN_JSON
    assert result.metadata.confidence == 90
    assert result.metadata.parsing_errors == []
    assert result.metadata.missing_fields == []
    assert result.metadata.detected_format == "json"
    assert result.metadata.extraction_notes == "Successfully parsed as JSON"


def test_json_with_empty_breakdown_skips_fallback():
    result = extract_structured_data('{"monthly_summary":"Plan A","weekly_breakdown":[]}')

    assert result.metadata.confidence == 90
    assert result.structured_data["monthly_summary"] == "Plan A"
    assert result.structured_data["weekly_breakdown"] == []


def test_json_embedded_in_prose():
    raw = "Here is your plan:\n```json\n" + json.dumps(PLAN_JSON) + "\n```\nGood luck!"

    result = extract_structured_data(raw)

    assert result.metadata.detected_format == "mixed"
    assert result.metadata.confidence == 90
    assert result.structured_data == PLAN_JSON


def test_unrecoverable_text_falls_back_to_default_week():
    result = extract_structured_data("ok thanks")

    assert result.metadata.detected_format == "text"
    assert result.metadata.confidence == 30
    assert result.structured_data["weekly_breakdown"] == [default_week()]
    assert result.structured_data["monthly_summary"] == SUMMARY_SENTINEL
    assert result.metadata.missing_fields == ["monthly_summary"]
    assert result.metadata.extraction_notes == "Basic text analysis fallback"


def test_prose_summary_caps_confidence_at_pattern_level():
    raw = "Stay consistent this month and keep your evenings free for rest and reading."

    result = extract_structured_data(raw)

    assert result.metadata.detected_format == "text"
    assert 30 <= result.metadata.confidence <= 60
    assert result.structured_data["weekly_breakdown"]
    assert result.metadata.missing_fields == []


def test_week_sections_are_parsed_into_tasks():
    result = extract_structured_data(WEEK_PROSE)
    breakdown = result.structured_data["weekly_breakdown"]

    assert result.metadata.confidence == 60
    assert len(breakdown) == 1
    week = breakdown[0]
    assert week["week"] == 1
    assert week["focus"] == "Foundations"
    assert week["goals"] == ["Read two books", "Draft outline"]
    assert list(week["daily_tasks"]) == list(WEEKDAYS)

    monday = week["daily_tasks"]["Monday"]
    assert [task["task_description"] for task in monday] == [
        "Read the first two chapters of the novel",
        "Sketch character arcs for main cast",
    ]
    assert monday[0]["start_time"] == "09:00"
    assert monday[0]["end_time"] == "11:00"
    assert monday[0]["difficulty_level"] == "moderate"

    wednesday = week["daily_tasks"]["Wednesday"]
    assert wednesday[0]["task_description"] == "Review yesterday's outline notes"
    assert (wednesday[0]["start_time"], wednesday[0]["end_time"]) == ("09:00", "10:30")

    friday = week["daily_tasks"]["Friday"]
    assert friday == [
        {
            "task_description": "Complete Friday objectives",
            "focus_area": "General",
            "start_time": "09:00",
            "end_time": "11:00",
            "difficulty_level": "moderate",
            "scheduling_reason": "Default task for Friday",
        }
    ]


def test_settings_override_difficulty_thresholds():
    settings = ExtractionSettings(simple_max_hours=2, default_start_hour=7)

    result = extract_structured_data(WEEK_PROSE, settings)
    monday = result.structured_data["weekly_breakdown"][0]["daily_tasks"]["Monday"]

    assert monday[0]["difficulty_level"] == "simple"
    assert monday[0]["start_time"] == "07:00"


def test_broken_json_still_yields_embedded_fields():
    raw = (
        "Plan follows:\n"
        '{"monthly_summary": "Ship the MVP", "weekly_breakdown": '
        '[{"week": 1, "focus": "Build", "goals": ["MVP"], "daily_tasks": {}}], "oops": }'
    )

    result = extract_structured_data(raw)

    assert result.metadata.detected_format == "mixed"
    assert result.metadata.confidence == 60
    assert result.structured_data["monthly_summary"] == "Ship the MVP"
    assert result.structured_data["weekly_breakdown"][0]["focus"] == "Build"


def test_auxiliary_notes_are_collected():
    raw = "Personalization notes: Morning person, prefers short tasks\nSuccess metrics: two chapters"

    result = extract_structured_data(raw)

    assert result.structured_data["personalization_notes"] == ["Morning person, prefers short tasks"]
    assert result.structured_data["success_metrics"] == ["two chapters"]


def test_strategy_failure_is_recorded_and_fold_continues(monkeypatch):
    def boom(text, settings):
        raise RuntimeError("boom")

    monkeypatch.setattr(response_extractor, "_extract_weekly_breakdown", boom)

    result = extract_structured_data(
        "Stay focused this week on finishing the onboarding flow and writing docs."
    )

    assert result.metadata.parsing_errors == ["Pattern extraction failed: boom"]
    assert result.metadata.confidence == 30
    assert result.structured_data["weekly_breakdown"] == [default_week()]
    assert result.structured_data["monthly_summary"].startswith("Stay focused this week")


def test_non_string_input_never_raises():
    result = extract_structured_data(None)

    assert result.raw_content == ""
    assert result.structured_data["weekly_breakdown"]
    assert result.metadata.to_dict()["missing_fields"] == ["monthly_summary"]


def test_default_week_covers_every_weekday():
    week = default_week()

    assert week["focus"] == "Foundation and Planning"
    assert set(week["daily_tasks"]) == set(WEEKDAYS)
    assert all(len(tasks) >= 1 for tasks in week["daily_tasks"].values())


def test_summary_sub_strategies_in_order():
    assert extract_monthly_summary('noise "monthly_summary": "Quoted \\"plan\\"" more') == 'Quoted "plan"'
    assert extract_monthly_summary("Overview: a calm month focused on deep work") == (
        "a calm month focused on deep work"
    )
    paragraph = "lowercase start " * 20
    summary = extract_monthly_summary(paragraph)
    assert summary.endswith("...")
    assert len(summary) == 203
    assert extract_monthly_summary("short") == SUMMARY_SENTINEL
