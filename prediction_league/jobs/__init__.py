"""Scheduled jobs and long-running workers."""

from prediction_league.jobs.email_queue_runner import EmailQueueRunner
from prediction_league.jobs.fanout import bounded_fanout
from prediction_league.jobs.prediction_windows import PredictionWindowClosingJob, PredictionWindowOpenJob
from prediction_league.jobs.runner import run_job
from prediction_league.jobs.standings_ingestor import IngestResult, IngestStatus, StandingsIngestor
from prediction_league.jobs.token_reaper import TokenReaperJob

__all__ = [
    "EmailQueueRunner",
    "IngestResult",
    "IngestStatus",
    "PredictionWindowClosingJob",
    "PredictionWindowOpenJob",
    "StandingsIngestor",
    "TokenReaperJob",
    "bounded_fanout",
    "run_job",
]
