"""FastAPI server for helpdesk metrics."""

from __future__ import annotations

import json
import logging
import math
import uuid
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Any, Optional

import pandas as pd
import plotly.io as pio
from fastapi import FastAPI, File, HTTPException, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, StreamingResponse
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel

from .backlog import backlog_to_frame
from .config import Settings, get_settings
from .metrics import TicketMetrics, metrics_summary
from .pipeline import MissingDocumentError, TicketReportSession
from .visualization import build_metric_figures

logger = logging.getLogger(__name__)

NO_DOCUMENT_DETAIL = "No CSV data found. Please upload a CSV file first."


@dataclass
class SessionData:
    session_id: str
    file_name: str
    created_at: str
    report: TicketReportSession


SESSION_STORE: dict[str, SessionData] = {}


class UploadAck(BaseModel):
    message: str = "CSV upload endpoint ready"
    received: bool = True


def _df_to_records(df: pd.DataFrame, limit: int | None = None) -> list[dict[str, Any]]:
    if df is None or df.empty:
        return []
    frame = df.copy()
    if limit is not None:
        frame = frame.head(limit)
    for col in frame.columns:
        if pd.api.types.is_datetime64_any_dtype(frame[col]):
            frame[col] = frame[col].dt.strftime("%Y-%m-%d %H:%M:%S")
    return json.loads(frame.to_json(orient="records", date_format="iso"))


def _figure_to_json(figure: Any) -> dict[str, Any]:
    return json.loads(pio.to_json(figure, validate=False))


def _json_safe(value: Any) -> Any:
    if isinstance(value, dict):
        return {k: _json_safe(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_json_safe(v) for v in value]
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            return None
        return value
    return value


def _metrics_payload(metrics: TicketMetrics) -> dict[str, Any]:
    payload = asdict(metrics)
    payload["open_backlog"] = metrics.open_backlog
    for name in ("avg_first_response_time", "avg_time_to_close"):
        averages = getattr(metrics, name)
        payload[name]["priority_order"] = [key for key, _ in averages.ordered()]
    payload["summary"] = metrics_summary(metrics)
    return _json_safe(payload)


def _get_session(session_id: str) -> SessionData:
    session = SESSION_STORE.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail=NO_DOCUMENT_DETAIL)
    return session


def _now() -> datetime:
    return datetime.now()


def create_app(settings: Settings | None = None) -> FastAPI:
    if settings is None:
        settings = get_settings()

    app = FastAPI(title="Helpdesk Metrics API", version="1.0.0")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/api/health")
    def health() -> dict[str, Any]:
        return {
            "status": "ok",
            "server": settings.server_name,
            "port": settings.port,
            "time": datetime.now(timezone.utc).isoformat(),
        }

    # Body is ignored.
    @app.post("/api/upload-csv", response_model=UploadAck)
    def upload_csv_notice(request: Request) -> UploadAck:
        return UploadAck()

    @app.post("/api/sessions")
    async def create_session(file: UploadFile = File(...)) -> JSONResponse:
        payload = await file.read()
        if not payload:
            raise HTTPException(status_code=400, detail="Uploaded file is empty.")

        file_name = file.filename or "tickets.csv"
        try:
            report = TicketReportSession.from_bytes(payload, file_name=file_name)
            metrics = report.metrics(_now())
        except (ValueError, MissingDocumentError) as exc:
            raise HTTPException(status_code=400, detail=f"Failed to parse '{file_name}': {exc}") from exc

        session_id = str(uuid.uuid4())
        SESSION_STORE[session_id] = SessionData(
            session_id=session_id,
            file_name=file_name,
            created_at=datetime.now().isoformat(),
            report=report,
        )
        logger.info("Stored session %s from %s (%d tickets)", session_id, file_name, metrics.total_tickets)

        return JSONResponse(
            content={
                "session_id": session_id,
                "file_name": file_name,
                "tickets": metrics.total_tickets,
                "metrics": _metrics_payload(metrics),
            }
        )

    @app.get("/api/sessions/{session_id}/metrics")
    def get_metrics(session_id: str) -> JSONResponse:
        session = _get_session(session_id)
        metrics = session.report.metrics(_now())
        figures = {name: _figure_to_json(fig) for name, fig in build_metric_figures(metrics).items()}
        return JSONResponse(content={"metrics": _metrics_payload(metrics), "figures": figures})

    @app.get("/api/sessions/{session_id}/backlog")
    def get_backlog(session_id: str, limit: Optional[int] = None) -> JSONResponse:
        session = _get_session(session_id)
        tickets = session.report.backlog(_now())
        frame = backlog_to_frame(tickets)
        return JSONResponse(content={"total": len(tickets), "rows": _df_to_records(frame, limit=limit)})

    @app.get("/api/sessions/{session_id}/export/backlog.csv")
    def export_backlog_csv(session_id: str) -> StreamingResponse:
        session = _get_session(session_id)
        frame = backlog_to_frame(session.report.backlog(_now()))
        payload = frame.to_csv(index=False).encode("utf-8")
        return StreamingResponse(
            iter([payload]),
            media_type="text/csv",
            headers={"Content-Disposition": "attachment; filename=backlog.csv"},
        )

    @app.get("/api/sessions/{session_id}/export/tickets.csv")
    def export_tickets_csv(session_id: str) -> StreamingResponse:
        session = _get_session(session_id)
        payload = session.report.tickets_frame().to_csv(index=False).encode("utf-8")
        return StreamingResponse(
            iter([payload]),
            media_type="text/csv",
            headers={"Content-Disposition": "attachment; filename=tickets.csv"},
        )

    @app.delete("/api/sessions/{session_id}")
    def clear_session(session_id: str) -> dict[str, Any]:
        _get_session(session_id)
        del SESSION_STORE[session_id]
        logger.info("Cleared session %s", session_id)
        return {"session_id": session_id, "cleared": True}

    if settings.static_dir is not None:
        if settings.static_dir.is_dir():
            app.mount("/", StaticFiles(directory=str(settings.static_dir), html=True), name="frontend")
        else:
            logger.warning("Static directory %s does not exist, not serving frontend", settings.static_dir)

    return app


app = create_app()
