"""Recover a structured monthly plan from unpredictable generator output.

The extractor folds an ordered list of strategies over the raw text. Each
strategy is a pure function returning the fields it could recover plus the
confidence that recovery justifies; later strategies only fill fields the
earlier ones left empty, and a strategy that raises is recorded in
`parsing_errors` instead of aborting the fold.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping

from ..utils import WEEKDAYS
from .format_detector import detect_format

logger = logging.getLogger(__name__)

SUMMARY_SENTINEL = "Summary could not be extracted"
CRITICAL_FIELDS = ("monthly_summary",)
AUXILIARY_NOTE_FIELDS = {
    "personalization_notes": r"personali[sz]ation[_\s]notes?",
    "productivity_insights": r"productivity[_\s]insights?",
    "potential_conflicts": r"potential[_\s]conflicts?",
    "success_metrics": r"success[_\s]metrics?",
    "energy_management": r"energy[_\s]management",
}

JSON_CONFIDENCE = 90
PATTERN_CONFIDENCE = 60
FALLBACK_CONFIDENCE = 30

_SUMMARY_FIELD_RE = re.compile(r'"monthly_summary"\s*:\s*"((?:[^"\\]|\\.)+)"')
_SUMMARY_LABEL_RES = (
    re.compile(r"(?:monthly summary|overview|summary)[:\s]*([^\n]+)", re.IGNORECASE),
    re.compile(r"(?:this month|for this month)[:\s]*([^\n]+)", re.IGNORECASE),
)
_FIRST_SENTENCE_RE = re.compile(r"^([A-Z][^.!?\n]*[.!?])", re.MULTILINE)
_WEEKLY_ARRAY_RE = re.compile(r'"weekly_breakdown"\s*:\s*\[')
_WEEK_HEADER_RE = re.compile(r"\bweek\s*(\d+)", re.IGNORECASE)
_WEEK_KEYWORD_RE = re.compile(r"\b(?:focus|goals?)\b", re.IGNORECASE)
_FOCUS_LABEL_RE = re.compile(r"\bfocus(?:\s+area)?\s*[:\-]\s*([^\n]+)", re.IGNORECASE)
_GOALS_LABEL_RE = re.compile(r"\bgoals?\s*[:\-]\s*([^\n]+)", re.IGNORECASE)
_WEEKDAY_RE = re.compile(r"\b(" + "|".join(WEEKDAYS) + r")\b", re.IGNORECASE)
_BULLET_RE = re.compile(r"^[-*•]\s*(.+)$")
_NUMBERED_RE = re.compile(r"^\d+[.)]\s*(.+)$")
_DURATION_RE = re.compile(
    r"\(\s*(\d+(?:\.\d+)?)\s*(h|hr|hrs|hours?|m|min|mins|minutes?)\s*\)",
    re.IGNORECASE,
)
_TIME_RANGE_RE = re.compile(r"(\d{1,2}):(\d{2})\s*(?:-|–|to)\s*(\d{1,2}):(\d{2})")
_NOTE_STRIP_CHARS = "\"'[]{} ,"


@dataclass(frozen=True)
class ExtractionSettings:
    """Heuristic constants used when inferring tasks from prose."""

    default_task_hours: float = 2
    simple_max_hours: float = 1
    moderate_max_hours: float = 3
    default_start_hour: int = 9

    def difficulty_for(self, hours: float) -> str:
        if hours <= self.simple_max_hours:
            return "simple"
        if hours <= self.moderate_max_hours:
            return "moderate"
        return "advanced"


def settings_from_config(config: Mapping[str, Any]) -> ExtractionSettings:
    return ExtractionSettings(
        default_task_hours=float(config.get("EXTRACTION_DEFAULT_TASK_HOURS", 2)),
        simple_max_hours=float(config.get("EXTRACTION_SIMPLE_MAX_HOURS", 1)),
        moderate_max_hours=float(config.get("EXTRACTION_MODERATE_MAX_HOURS", 3)),
        default_start_hour=int(config.get("EXTRACTION_DEFAULT_START_HOUR", 9)),
    )


@dataclass
class ExtractionMetadata:
    confidence: int = 0
    notes: list[str] = field(default_factory=list)
    detected_format: str = "text"
    parsing_errors: list[str] = field(default_factory=list)
    missing_fields: list[str] = field(default_factory=list)

    @property
    def extraction_notes(self) -> str:
        return "; ".join(self.notes)

    def to_dict(self) -> dict:
        return {
            "confidence": self.confidence,
            "extraction_notes": self.extraction_notes,
            "detected_format": self.detected_format,
            "parsing_errors": list(self.parsing_errors),
            "missing_fields": list(self.missing_fields),
        }


@dataclass
class ExtractionResult:
    raw_content: str
    structured_data: dict
    metadata: ExtractionMetadata

    def to_dict(self) -> dict:
        return {
            "raw_content": self.raw_content,
            "structured_data": self.structured_data,
            "metadata": self.metadata.to_dict(),
        }


@dataclass
class StrategyOutcome:
    data: dict
    confidence: int
    note: str
    terminal: bool = False


Strategy = Callable[[str, dict, ExtractionSettings], "StrategyOutcome | None"]


def extract_structured_data(raw: str | None, settings: ExtractionSettings | None = None) -> ExtractionResult:
    """Run every strategy over `raw` and return the merged plan and diagnostics.

    Never raises. When nothing usable is found the result still carries a
    synthetic default week so callers always have something to stage.
    """

    text = raw if isinstance(raw, str) else ""
    settings = settings or ExtractionSettings()
    metadata = ExtractionMetadata(detected_format=detect_format(text))
    structured: dict = {}

    for name, strategy in STRATEGIES:
        try:
            outcome = strategy(text, structured, settings)
        except Exception as exc:  # noqa: BLE001 - each strategy is its own failure boundary
            logger.debug("Extraction strategy %s failed", name, exc_info=True)
            metadata.parsing_errors.append(f"{name} failed: {exc}")
            continue
        if outcome is None:
            continue
        if outcome.terminal:
            structured = dict(outcome.data)
            contributed = True
        else:
            contributed = _merge_missing(structured, outcome.data)
        if contributed:
            metadata.confidence = max(metadata.confidence, outcome.confidence)
            metadata.notes.append(outcome.note)
        if outcome.terminal:
            break

    metadata.missing_fields = [name for name in CRITICAL_FIELDS if _is_missing(name, structured.get(name))]
    return ExtractionResult(raw_content=text, structured_data=structured, metadata=metadata)


def extract_monthly_summary(text: str) -> str:
    match = _SUMMARY_FIELD_RE.search(text)
    if match:
        return _decode_json_string(match.group(1))

    for pattern in (*_SUMMARY_LABEL_RES, _FIRST_SENTENCE_RE):
        match = pattern.search(text)
        if match and len(match.group(1)) > 20:
            return match.group(1).strip()

    paragraphs = [part.strip() for part in text.split("\n\n") if len(part.strip()) > 50]
    if paragraphs:
        return paragraphs[0][:200] + "..."

    return SUMMARY_SENTINEL


def default_week(week: int = 1) -> dict:
    """The synthetic week used when no breakdown can be recovered."""

    def task(description, focus, start, end, difficulty, reason):
        return [
            {
                "task_description": description,
                "focus_area": focus,
                "start_time": start,
                "end_time": end,
                "difficulty_level": difficulty,
                "scheduling_reason": reason,
            }
        ]

    return {
        "week": week,
        "focus": "Foundation and Planning",
        "goals": ["Set up weekly structure", "Establish core habits"],
        "daily_tasks": {
            "Monday": task("Plan week objectives", "Planning", "09:00", "10:00", "simple", "Weekly planning session"),
            "Tuesday": task("Focus on primary goals", "Core Objectives", "09:00", "11:00", "moderate", "Main goal work"),
            "Wednesday": task("Progress review and adjustment", "Review", "09:00", "10:00", "simple", "Mid-week check-in"),
            "Thursday": task("Continue core objectives", "Core Objectives", "09:00", "11:00", "moderate", "Goal progression"),
            "Friday": task("Weekly completion and review", "Review", "09:00", "10:00", "simple", "End-of-week assessment"),
            "Saturday": task("Rest and reflection", "Personal", "10:00", "11:00", "simple", "Weekend recovery"),
            "Sunday": task("Plan next week", "Planning", "19:00", "20:00", "simple", "Weekly preparation"),
        },
    }


# --- strategies -------------------------------------------------------------


def _direct_json(text: str, current: dict, settings: ExtractionSettings) -> StrategyOutcome | None:
    parsed = _load_json_object(text)
    if parsed is None:
        return None
    return StrategyOutcome(parsed, JSON_CONFIDENCE, "Successfully parsed as JSON", terminal=True)


def _pattern_extraction(text: str, current: dict, settings: ExtractionSettings) -> StrategyOutcome:
    data: dict = {"monthly_summary": extract_monthly_summary(text)}
    breakdown = _extract_weekly_breakdown(text, settings)
    if breakdown:
        data["weekly_breakdown"] = breakdown
    for name, label in AUXILIARY_NOTE_FIELDS.items():
        note = _extract_labeled_note(text, label)
        if note:
            data[name] = [note]
    return StrategyOutcome(data, PATTERN_CONFIDENCE, "Partially extracted using pattern matching")


def _text_analysis(text: str, current: dict, settings: ExtractionSettings) -> StrategyOutcome:
    data: dict = {"monthly_summary": extract_monthly_summary(text)}
    if _is_missing("weekly_breakdown", current.get("weekly_breakdown")):
        data["weekly_breakdown"] = [default_week()]
    return StrategyOutcome(data, FALLBACK_CONFIDENCE, "Basic text analysis fallback")


STRATEGIES: tuple[tuple[str, Strategy], ...] = (
    ("JSON parsing", _direct_json),
    ("Pattern extraction", _pattern_extraction),
    ("Text analysis", _text_analysis),
)


# --- helpers ----------------------------------------------------------------


def _is_missing(name: str, value: Any) -> bool:
    if value is None or value == "" or value == [] or value == {}:
        return True
    return name == "monthly_summary" and value == SUMMARY_SENTINEL


def _merge_missing(target: dict, partial: dict) -> bool:
    contributed = False
    for name, value in partial.items():
        if name in target and not _is_missing(name, target[name]):
            continue
        if name not in target or not _is_missing(name, value):
            target[name] = value
        if not _is_missing(name, value):
            contributed = True
    return contributed


def _load_json_object(text: str) -> dict | None:
    try:
        parsed = json.loads(text)
    except ValueError:
        parsed = None
    if isinstance(parsed, dict):
        return parsed

    start = text.find("{")
    if start == -1:
        return None
    try:
        parsed, _ = json.JSONDecoder().raw_decode(text, start)
    except ValueError:
        end = text.rfind("}")
        if end <= start:
            return None
        try:
            parsed = json.loads(text[start : end + 1])
        except ValueError:
            return None
    return parsed if isinstance(parsed, dict) else None


def _decode_json_string(fragment: str) -> str:
    try:
        return json.loads(f'"{fragment}"')
    except ValueError:
        return fragment


def _extract_weekly_breakdown(text: str, settings: ExtractionSettings) -> list[dict]:
    match = _WEEKLY_ARRAY_RE.search(text)
    if match:
        try:
            parsed, _ = json.JSONDecoder().raw_decode(text, match.end() - 1)
        except ValueError:
            logger.debug("Embedded weekly_breakdown array is not valid JSON")
        else:
            if isinstance(parsed, list) and parsed:
                return parsed

    headers = list(_WEEK_HEADER_RE.finditer(text))
    weeks: dict[int, dict] = {}
    for index, header in enumerate(headers):
        number = int(header.group(1))
        if number in weeks:
            continue
        end = headers[index + 1].start() if index + 1 < len(headers) else len(text)
        section = text[header.start() : end]
        if not _WEEK_KEYWORD_RE.search(section):
            continue
        weeks[number] = {
            "week": number,
            "focus": _section_focus(section, number),
            "goals": _section_goals(section),
            "daily_tasks": _extract_daily_tasks(section, settings),
        }
    return [weeks[number] for number in sorted(weeks)]


def _section_focus(section: str, number: int) -> str:
    match = _FOCUS_LABEL_RE.search(section)
    if match:
        focus = match.group(1).strip().strip(_NOTE_STRIP_CHARS)
        if focus:
            return focus
    return f"Week {number} focus"


def _section_goals(section: str) -> list[str]:
    match = _GOALS_LABEL_RE.search(section)
    if match:
        goals = [part.strip().strip(_NOTE_STRIP_CHARS) for part in re.split(r"[,;]", match.group(1))]
        goals = [goal for goal in goals if goal]
        if goals:
            return goals
    return ["Complete weekly objectives"]


def _extract_daily_tasks(section: str, settings: ExtractionSettings) -> dict[str, list[dict]]:
    mentions = list(_WEEKDAY_RE.finditer(section))
    chunks: dict[str, str] = {}
    for index, mention in enumerate(mentions):
        day = mention.group(1).capitalize()
        if day in chunks:
            continue
        end = mentions[index + 1].start() if index + 1 < len(mentions) else len(section)
        chunks[day] = section[mention.end() : end]

    daily: dict[str, list[dict]] = {}
    for day in WEEKDAYS:
        tasks = _parse_task_lines(chunks.get(day, ""), day, settings)
        daily[day] = tasks or [_default_day_task(day, settings)]
    return daily


def _parse_task_lines(chunk: str, day: str, settings: ExtractionSettings) -> list[dict]:
    tasks: list[dict] = []
    for raw_line in chunk.splitlines():
        line = raw_line.strip().lstrip(":").strip()
        if not line:
            continue

        time_range = _TIME_RANGE_RE.search(line)
        duration = _DURATION_RE.search(line)
        marker = _BULLET_RE.match(line) or _NUMBERED_RE.match(line)
        if marker:
            body = marker.group(1)
        elif time_range or duration:
            body = line
        else:
            continue

        description = _TIME_RANGE_RE.sub("", _DURATION_RE.sub("", body))
        description = description.strip(" \t-:,")
        if len(description) <= 10:
            continue

        if time_range:
            start_h, start_m, end_h, end_m = (int(part) for part in time_range.groups())
            start_minutes = start_h * 60 + start_m
            end_minutes = max(end_h * 60 + end_m, start_minutes)
        else:
            hours = _duration_hours(duration) if duration else settings.default_task_hours
            start_minutes = settings.default_start_hour * 60
            end_minutes = start_minutes + int(round(hours * 60))
        hours = (end_minutes - start_minutes) / 60

        tasks.append(
            {
                "task_description": description,
                "focus_area": "General",
                "start_time": _format_clock(start_minutes),
                "end_time": _format_clock(end_minutes),
                "difficulty_level": settings.difficulty_for(hours),
                "scheduling_reason": f"Scheduled for {day}",
            }
        )
    return tasks


def _default_day_task(day: str, settings: ExtractionSettings) -> dict:
    start_minutes = settings.default_start_hour * 60
    end_minutes = start_minutes + int(round(settings.default_task_hours * 60))
    return {
        "task_description": f"Complete {day} objectives",
        "focus_area": "General",
        "start_time": _format_clock(start_minutes),
        "end_time": _format_clock(end_minutes),
        "difficulty_level": settings.difficulty_for(settings.default_task_hours),
        "scheduling_reason": f"Default task for {day}",
    }


def _duration_hours(match: re.Match) -> float:
    amount = float(match.group(1))
    if match.group(2).lower().startswith("m"):
        return amount / 60
    return amount


def _format_clock(minutes: int) -> str:
    minutes = min(max(minutes, 0), 23 * 60 + 59)
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def _extract_labeled_note(text: str, label: str) -> str | None:
    match = re.search(label + r"[\"']?\s*[:\-]?\s*([^\n]+)", text, re.IGNORECASE)
    if not match:
        return None
    note = match.group(1).strip().strip(_NOTE_STRIP_CHARS).replace('", "', ", ")
    return note or None
