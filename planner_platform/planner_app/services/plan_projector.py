"""Flatten a weekly breakdown into dated, prioritised tasks."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import date, datetime, time, timedelta
from typing import Any, Iterable

from ..utils import month_label

WEEKDAY_OFFSETS = {
    "monday": 0,
    "tuesday": 1,
    "wednesday": 2,
    "thursday": 3,
    "friday": 4,
    "saturday": 5,
    "sunday": 6,
}
PRIORITY_BY_DIFFICULTY = {"advanced": "High", "moderate": "Medium", "simple": "Low"}
# Weeks past this fall outside any month and are not projected.
MAX_WEEKS = 6


@dataclass(frozen=True)
class ProjectedTask:
    title: str
    description: str
    due_date: date
    priority: str
    category: str
    estimated_hours: int
    week_number: int
    day_of_week: str
    start_time: str
    end_time: str
    difficulty_level: str

    def to_dict(self) -> dict:
        payload = asdict(self)
        payload["due_date"] = self.due_date.isoformat()
        return payload


def parse_clock(value: Any) -> time | None:
    """Accept `HH:MM`, `HH:MM:SS` or a full ISO-8601 datetime."""

    if isinstance(value, datetime):
        return value.time()
    if isinstance(value, time):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    raw = value.strip()
    if "T" in raw or raw.count("-") >= 2:
        try:
            return datetime.fromisoformat(raw.replace("Z", "+00:00")).time()
        except ValueError:
            return None
    try:
        return time.fromisoformat(raw if raw.count(":") else f"{raw}:00")
    except ValueError:
        parts = raw.split(":")
        try:
            hour = int(parts[0])
            minute = int(parts[1]) if len(parts) > 1 else 0
            return time(min(hour, 23), min(minute, 59))
        except ValueError:
            return None


def calculate_task_date(month_start: date, week_number: int, day: str) -> date:
    offset = WEEKDAY_OFFSETS.get(str(day).strip().lower(), 0)
    return month_start + timedelta(days=(week_number - 1) * 7 + offset)


def _week_number(value: Any) -> int | None:
    """Week index from generator output; None when it cannot be placed in the month."""

    try:
        number = int(value or 1)
    except (TypeError, ValueError):
        return 1
    except OverflowError:
        return None
    return number if 1 <= number <= MAX_WEEKS else None


def calculate_hours(start: Any, end: Any) -> int:
    start_clock = parse_clock(start)
    end_clock = parse_clock(end)
    start_hour = start_clock.hour if start_clock else 0
    end_hour = end_clock.hour if end_clock else 0
    return end_hour - start_hour


def extract_tasks_from_breakdown(breakdown: Iterable[Any] | None, month_start: date) -> list[ProjectedTask]:
    tasks: list[ProjectedTask] = []
    for week in breakdown or []:
        if not isinstance(week, dict):
            continue
        week_number = _week_number(week.get("week"))
        if week_number is None:
            continue
        daily = week.get("daily_tasks")
        if not isinstance(daily, dict):
            continue
        for day, day_tasks in daily.items():
            if not isinstance(day_tasks, list):
                continue
            due = calculate_task_date(month_start, week_number, day)
            for item in day_tasks:
                if not isinstance(item, dict):
                    continue
                difficulty = str(item.get("difficulty_level") or "simple").lower()
                tasks.append(
                    ProjectedTask(
                        title=str(item.get("task_description") or "Untitled task"),
                        description=str(item.get("scheduling_reason") or ""),
                        due_date=due,
                        priority=PRIORITY_BY_DIFFICULTY.get(difficulty, "Low"),
                        category=str(item.get("focus_area") or "General"),
                        estimated_hours=calculate_hours(item.get("start_time"), item.get("end_time")),
                        week_number=week_number,
                        day_of_week=str(day),
                        start_time=str(item.get("start_time") or ""),
                        end_time=str(item.get("end_time") or ""),
                        difficulty_level=difficulty,
                    )
                )
    return tasks


def build_plan_view(
    structured: dict,
    month_start: date,
    *,
    confidence: int | None = None,
    extraction_notes: str | None = None,
) -> dict:
    """Aggregate view of a plan; totals always derive from the task list."""

    breakdown = structured.get("weekly_breakdown") if isinstance(structured, dict) else None
    tasks = extract_tasks_from_breakdown(breakdown, month_start)
    goals: list[str] = []
    for week in breakdown or []:
        if isinstance(week, dict) and isinstance(week.get("goals"), list):
            goals.extend(str(goal) for goal in week["goals"])
    label = month_label(month_start)
    return {
        "title": f"{label} Plan",
        "month": label,
        "monthly_summary": structured.get("monthly_summary") if isinstance(structured, dict) else None,
        "goals": goals,
        "tasks": [dict(task.to_dict(), index=index, completed=False) for index, task in enumerate(tasks)],
        "total_tasks": len(tasks),
        "estimated_hours": sum(task.estimated_hours for task in tasks),
        "confidence": confidence,
        "extraction_notes": extraction_notes,
    }
