"""
Prometheus metrics for the league's scheduled jobs and pipelines.

Labels are restricted to LOW-CARDINALITY values only:
- job:      scheduler job family ("retrieve_latest_standings", "prediction_window_open", ...)
- status:   "ok", "error", "timeout"
- outcome:  bounded per-metric sets documented on each metric

Season IDs, entry IDs and email addresses must never be used as labels.
"""

import logging
import time

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    REGISTRY,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)

logger = logging.getLogger(__name__)

# =============================================================================
# JOB HEALTH METRICS
# =============================================================================

job_runs_total = Counter(
    "league_job_runs_total",
    "Scheduled job runs by job and final status",
    ["job", "status"],
)

job_duration_ms = Histogram(
    "league_job_duration_ms",
    "Scheduled job duration in milliseconds",
    ["job"],
    buckets=[10, 50, 100, 250, 500, 1000, 2500, 5000, 10000],
)

job_last_success_timestamp = Gauge(
    "league_job_last_success_timestamp",
    "Unix timestamp of the last successful run per job",
    ["job"],
)

# =============================================================================
# PIPELINE METRICS
# =============================================================================

# outcome: no_predictions, not_live, terminal, scored
standings_ingest_total = Counter(
    "league_standings_ingest_total",
    "Standings ingest runs by outcome",
    ["outcome"],
)

# operation: insert, update, mismatched
scored_predictions_total = Counter(
    "league_scored_predictions_total",
    "Scored entry prediction writes by operation",
    ["operation"],
)

# outcome: sent, logged, failed
emails_total = Counter(
    "league_emails_total",
    "Outbound emails handled by the queue runner",
    ["outcome"],
)

email_queue_depth = Gauge(
    "league_email_queue_depth",
    "Messages waiting in the email queue",
)


def record_job_run(job: str, status: str, duration_ms: float) -> None:
    """
    Record a job run with status and duration.

    Args:
        job: Job family identifier.
        status: "ok", "error" or "timeout".
        duration_ms: Job duration in milliseconds.
    """
    try:
        job_runs_total.labels(job=job, status=status).inc()
        if duration_ms > 0:
            job_duration_ms.labels(job=job).observe(duration_ms)
        if status == "ok":
            job_last_success_timestamp.labels(job=job).set(time.time())
    except Exception as e:
        logger.warning(f"Failed to record job run metric: {e}")


def record_standings_ingest(outcome: str) -> None:
    try:
        standings_ingest_total.labels(outcome=outcome).inc()
    except Exception as e:
        logger.warning(f"Failed to record standings ingest metric: {e}")


def record_scored_prediction(operation: str) -> None:
    try:
        scored_predictions_total.labels(operation=operation).inc()
    except Exception as e:
        logger.warning(f"Failed to record scored prediction metric: {e}")


def record_email(outcome: str, queue_depth: int) -> None:
    try:
        emails_total.labels(outcome=outcome).inc()
        email_queue_depth.set(queue_depth)
    except Exception as e:
        logger.warning(f"Failed to record email metric: {e}")


def get_metrics_text() -> tuple[bytes, str]:
    """Render the default registry in Prometheus text format."""
    return generate_latest(REGISTRY), CONTENT_TYPE_LATEST
