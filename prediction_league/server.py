"""HTTP surface: health, metrics, leaderboards and admin triggers."""

import asyncio
import contextlib
import logging
from dataclasses import asdict
from typing import Optional

import uvicorn
from fastapi import Depends, FastAPI, Query, Request
from fastapi.responses import JSONResponse, Response

from prediction_league.application import Application
from prediction_league.errors import (
    ConflictError,
    LeagueError,
    MismatchedRankingsError,
    MultiError,
    NotFoundError,
    TransientError,
    UnauthorizedError,
    UnknownTeamError,
    ValidationError,
)
from prediction_league.security import verify_admin
from prediction_league.telemetry import get_metrics_text
from prediction_league.tokens.magic_login import issue_magic_login

logger = logging.getLogger(__name__)

ERROR_STATUS = (
    (NotFoundError, 404),
    (ConflictError, 409),
    (ValidationError, 422),
    (UnauthorizedError, 401),
    (TransientError, 503),
    (UnknownTeamError, 502),
    (MismatchedRankingsError, 502),
    (MultiError, 502),
    # Handlers resolve by MRO, so this only catches kinds not listed above
    (LeagueError, 500),
)


def _error_handler(status_code: int):
    async def handle(request: Request, exc: Exception) -> JSONResponse:
        if status_code >= 500:
            logger.error(f"[HTTP] {request.method} {request.url.path} -> {status_code}: {exc}")
        content = {"error": str(exc)}
        if isinstance(exc, ValidationError):
            content["reasons"] = exc.reasons
        headers = {"WWW-Authenticate": "Basic"} if status_code == 401 else None
        return JSONResponse(status_code=status_code, content=content, headers=headers)

    return handle


def create_app(application: Application) -> FastAPI:
    app = FastAPI(title="Prediction League", docs_url=None, redoc_url=None)
    app.state.application = application

    for exc_class, status_code in ERROR_STATUS:
        app.add_exception_handler(exc_class, _error_handler(status_code))

    @app.get("/health")
    async def health():
        return {"status": "ok", "email_queue_pending": application.email_queue.pending_count}

    @app.get("/metrics")
    async def metrics():
        content, content_type = get_metrics_text()
        return Response(content=content, media_type=content_type)

    @app.get("/api/season/{season_id}/leaderboard/{round_number}")
    async def leaderboard(season_id: str, round_number: int, realm: Optional[str] = Query(default=None)):
        if round_number < 1:
            raise ValidationError(["round number must be positive"], fields=["round_number"])
        realm_name = realm or _default_realm_name(application, season_id)
        board = await application.leaderboards.get_leaderboard(season_id, round_number, realm_name)
        return asdict(board)

    @app.post("/api/admin/season/{season_id}/standings", dependencies=[Depends(verify_admin)])
    async def ingest_standings(season_id: str):
        application.seasons.get_by_id(season_id)
        ingestor = application.ingestors.get(season_id)
        if ingestor is None:
            raise ConflictError(f"standings ingestion is not enabled for season {season_id}")
        try:
            result = await asyncio.wait_for(ingestor.run(), timeout=application.settings.WORKER_TIMEOUT_SECONDS)
        except asyncio.TimeoutError as e:
            raise TransientError(f"standings ingest for {season_id} timed out") from e
        return {
            "status": result.status.value,
            "round_number": result.standings.round_number if result.standings else None,
            "finalised": result.finalised,
            "scored": len(result.scored),
            "emails_issued": result.emails_issued,
            "email_errors": [str(e) for e in result.email_errors],
        }

    @app.post("/api/admin/entry/{entry_id}/magic-login", dependencies=[Depends(verify_admin)])
    async def magic_login(entry_id: str):
        entry = await application.entries.entries.get_by_id(entry_id)
        token = await issue_magic_login(entry, application.tokens, application.comms)
        return {"entry_id": entry.id, "expires_at": token.expires_at.isoformat()}

    return app


def _default_realm_name(application: Application, season_id: str) -> str:
    realms = application.realms.for_season(season_id)
    if not realms:
        raise NotFoundError(f"no realm configured for season {season_id}")
    return realms[0].name


class _SupervisedServer(uvicorn.Server):
    """Uvicorn server that leaves signal handling to the service supervisor."""

    def install_signal_handlers(self) -> None:
        pass

    @contextlib.contextmanager
    def capture_signals(self):
        yield


class HTTPServerWorker:
    def __init__(self, app: FastAPI, host: str, port: int, log_level: str = "info"):
        config = uvicorn.Config(app, host=host, port=port, log_level=log_level.lower(), lifespan="off")
        self.server = _SupervisedServer(config)

    async def run(self) -> None:
        logger.info(f"[HTTP] Listening on {self.server.config.host}:{self.server.config.port}")
        await self.server.serve()

    async def halt(self) -> None:
        self.server.should_exit = True
