"""Run one scheduled job tick under a deadline, with metrics and error capture.

Jobs never propagate failures to the scheduler; every outcome is logged and
the next tick retries.
"""

import asyncio
import logging
import time
from typing import Awaitable, Callable

from prediction_league.errors import MultiError
from prediction_league.telemetry import record_job_run, sentry_job_context

logger = logging.getLogger(__name__)

STATUS_OK = "ok"
STATUS_ERROR = "error"
STATUS_TIMEOUT = "timeout"


async def run_job(
    job: str,
    func: Callable[[], Awaitable[object]],
    timeout: float,
    **tags,
) -> str:
    """Await ``func()`` within ``timeout`` seconds and return the run status."""
    start = time.time()
    status = STATUS_OK
    label = " ".join(f"{k}={v}" for k, v in tags.items())

    try:
        with sentry_job_context(job, **tags):
            await asyncio.wait_for(func(), timeout=timeout)
    except asyncio.TimeoutError:
        status = STATUS_TIMEOUT
        logger.error(f"[{job.upper()}] Timed out after {timeout}s {label}")
    except MultiError as e:
        status = STATUS_ERROR
        logger.error(f"[{job.upper()}] {len(e)} failure(s) {label}")
        for err in e.errors:
            logger.error(f"[{job.upper()}]   {type(err).__name__}: {err}")
    except Exception as e:
        status = STATUS_ERROR
        logger.error(f"[{job.upper()}] Failed {label}: {e}", exc_info=True)
    finally:
        record_job_run(job, status, (time.time() - start) * 1000)

    return status
