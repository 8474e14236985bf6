"""Metrics and error reporting."""

from prediction_league.telemetry.metrics import (
    get_metrics_text,
    record_email,
    record_job_run,
    record_scored_prediction,
    record_standings_ingest,
)
from prediction_league.telemetry.sentry import init_sentry, sentry_job_context

__all__ = [
    "get_metrics_text",
    "init_sentry",
    "record_email",
    "record_job_run",
    "record_scored_prediction",
    "record_standings_ingest",
    "sentry_job_context",
]
