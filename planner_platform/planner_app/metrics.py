"""Prometheus metrics helpers."""

from __future__ import annotations

from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest

REQUEST_COUNT = Counter(
    "planner_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"],
)
REQUEST_LATENCY = Histogram(
    "planner_request_latency_seconds",
    "Latency of HTTP requests in seconds",
    ["endpoint"],
)
GENERATION_OUTCOMES = Counter(
    "planner_generations_total",
    "Plan generation attempts by outcome",
    ["outcome"],
)
EXTRACTION_CONFIDENCE = Histogram(
    "planner_extraction_confidence",
    "Confidence reported by the response extractor",
    buckets=(10, 30, 60, 90, 100),
)
DRAFTS_SWEPT = Counter(
    "planner_drafts_swept_total",
    "Expired plan drafts removed by the sweeper",
)


def record_request(method: str, endpoint: str, status: int, latency: float) -> None:
    REQUEST_COUNT.labels(method=method, endpoint=endpoint, status=status).inc()
    REQUEST_LATENCY.labels(endpoint=endpoint).observe(latency)


def record_generation(outcome: str, confidence: float | None = None) -> None:
    GENERATION_OUTCOMES.labels(outcome=outcome).inc()
    if confidence is not None:
        EXTRACTION_CONFIDENCE.observe(confidence)


def record_sweep(removed: int) -> None:
    if removed:
        DRAFTS_SWEPT.inc(removed)


def latest_metrics() -> tuple[bytes, str]:
    data = generate_latest()
    return data, CONTENT_TYPE_LATEST
