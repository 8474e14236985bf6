"""
Service supervisor.

Runs a set of workers concurrently. The first SIGINT/SIGTERM, or the first
worker to fail, triggers shutdown: every worker is halted in parallel and
given a grace period to return. Exit status is 0 only when every worker
returned cleanly within that period.
"""

import asyncio
import logging
import signal
from typing import Protocol, Sequence

from prediction_league.errors import LeagueError, TransientError

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1


class Worker(Protocol):
    async def run(self) -> None: ...

    async def halt(self) -> None: ...


def worker_name(worker: Worker) -> str:
    return type(worker).__name__


class Service:
    def __init__(
        self,
        workers: Sequence[Worker],
        grace_period: float = 5.0,
        handle_signals: bool = True,
    ):
        self.workers = list(workers)
        self.grace_period = grace_period
        self.handle_signals = handle_signals
        self._stop = asyncio.Event()

    def request_stop(self) -> None:
        self._stop.set()

    async def run_all(self) -> int:
        loop = asyncio.get_running_loop()
        if self.handle_signals:
            for sig in (signal.SIGINT, signal.SIGTERM):
                loop.add_signal_handler(sig, self._on_signal, sig)

        try:
            return await self._supervise()
        finally:
            if self.handle_signals:
                for sig in (signal.SIGINT, signal.SIGTERM):
                    loop.remove_signal_handler(sig)

    def _on_signal(self, sig: signal.Signals) -> None:
        logger.info(f"[SERVICE] Received {sig.name}, shutting down")
        self._stop.set()

    async def _supervise(self) -> int:
        tasks = {asyncio.create_task(self._run_worker(w)): w for w in self.workers}
        stop_task = asyncio.create_task(self._stop.wait())
        failed = False
        pending = set(tasks)

        logger.info(f"[SERVICE] Running {len(tasks)} worker(s)")
        while pending:
            done, _ = await asyncio.wait(pending | {stop_task}, return_when=asyncio.FIRST_COMPLETED)
            if stop_task in done:
                break
            for task in done:
                pending.discard(task)
                if task.exception() is not None:
                    logger.error(f"[SERVICE] {worker_name(tasks[task])} failed: {task.exception()}")
                    failed = True
            if failed:
                break

        stop_task.cancel()
        if not pending:
            logger.info("[SERVICE] All workers finished")
            return EXIT_FAILURE if failed else EXIT_OK

        clean = await self._shutdown(tasks, pending)
        return EXIT_OK if clean and not failed else EXIT_FAILURE

    async def _shutdown(self, tasks: dict, pending: set) -> bool:
        halts = [asyncio.create_task(self._halt_worker(w)) for w in self.workers]
        done, not_done = await asyncio.wait(pending | set(halts), timeout=self.grace_period)

        clean = True
        for task in not_done:
            task.cancel()
            clean = False
        if not_done:
            logger.error(f"[SERVICE] {len(not_done)} task(s) still running after {self.grace_period}s grace, cancelled")
            await asyncio.gather(*not_done, return_exceptions=True)

        for task in done:
            if task.exception() is not None:
                name = worker_name(tasks[task]) if task in tasks else "halt"
                logger.error(f"[SERVICE] {name} returned error during shutdown: {task.exception()}")
                clean = False

        logger.info(f"[SERVICE] Shutdown complete (clean={clean})")
        return clean

    async def _run_worker(self, worker: Worker) -> None:
        try:
            await worker.run()
        except LeagueError:
            raise
        except Exception as e:
            raise TransientError(f"{worker_name(worker)} crashed: {e}") from e

    async def _halt_worker(self, worker: Worker) -> None:
        try:
            await worker.halt()
        except LeagueError:
            raise
        except Exception as e:
            raise TransientError(f"{worker_name(worker)} halt failed: {e}") from e
