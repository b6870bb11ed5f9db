"""Pytest configuration for ensuring project modules resolve correctly."""

from __future__ import annotations

import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import json

import pytest

from planner_app import create_app
from planner_app.extensions import db
from planner_app.services.ai_client import GeneratorOutput
from planner_app.services.errors import GeneratorFailure

USER_ID = "user-123456"

PLAN_JSON = {
    "monthly_summary": "Build a steady writing habit while shipping the side project.",
    "weekly_breakdown": [
        {
            "week": 1,
            "focus": "Kickoff",
            "goals": ["Outline chapters", "Set up repo"],
            "daily_tasks": {
                "Monday": [
                    {
                        "task_description": "Outline the first three chapters",
                        "focus_area": "Writing",
                        "start_time": "09:00",
                        "end_time": "11:00",
                        "difficulty_level": "moderate",
                        "scheduling_reason": "Fresh morning focus",
                    }
                ],
                "Wednesday": [
                    {
                        "task_description": "Create project repository",
                        "focus_area": "Coding",
                        "start_time": "2025-01-01T18:00:00Z",
                        "end_time": "2025-01-01T22:00:00Z",
                        "difficulty_level": "advanced",
                        "scheduling_reason": "Evening deep work",
                    }
                ],
            },
        }
    ],
}


class FakeGenerator:
    """Records prompts and replays a canned completion or failure."""

    def __init__(self, content: str | None = None, error: Exception | None = None, configured: bool = True):
        self.content = json.dumps(PLAN_JSON) if content is None else content
        self.error = error
        self.is_configured = configured
        self.prompts: list[str] = []

    def generate(self, prompt: str) -> GeneratorOutput:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return GeneratorOutput(content=self.content, format="json", model="fake-model")


@pytest.fixture()
def app_with_db():
    app = create_app("test")
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app_with_db):
    return app_with_db.test_client()


@pytest.fixture()
def fake_generator(app_with_db):
    generator = FakeGenerator()
    app_with_db.extensions["plan_generator"] = generator
    return generator


@pytest.fixture()
def failing_generator(app_with_db):
    generator = FakeGenerator(error=GeneratorFailure("Generator request failed: 502 Bad Gateway"))
    app_with_db.extensions["plan_generator"] = generator
    return generator


@pytest.fixture()
def auth_headers():
    return {"X-User-ID": USER_ID}


@pytest.fixture()
def plan_payload():
    return {
        "goals_text": "Finish the novel draft and ship the side project MVP.",
        "task_complexity": "Balanced",
        "focus_areas": "Writing, Coding",
        "weekend_preference": "Rest",
        "fixed_commitments": [
            {
                "day_of_week": "Tuesday",
                "start_time": "18:00",
                "end_time": "20:00",
                "description": "Evening class",
            }
        ],
    }
