"""Entry point for `flask --app app run` and `python app.py`."""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

ENV_FILE = Path(__file__).resolve().parent / ".env"

# Config classes read os.environ at import time, so `.env` goes first.
if ENV_FILE.exists() and os.getenv("FLASK_SKIP_DOTENV", "").lower() not in {"1", "true", "yes"}:
    load_dotenv(ENV_FILE, override=False)

from planner_app import create_app  # noqa: E402

app = create_app(os.getenv("FLASK_CONFIG"))


def main() -> None:
    app.logger.info(
        "Starting %s (generator configured: %s)",
        app.config.get("APP_NAME"),
        bool(app.config.get("OPENROUTER_API_KEY")),
    )
    # The reloader would fork a second draft sweeper.
    app.run(
        host=os.getenv("HOST", "127.0.0.1"),
        port=int(os.getenv("PORT", "5090")),
        debug=bool(app.config.get("DEBUG")),
        use_reloader=False,
    )


if __name__ == "__main__":  # pragma: no cover
    main()
