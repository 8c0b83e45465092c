"""FastAPI web server exposing the username checking queue."""

from contextlib import asynccontextmanager
from datetime import datetime
from pathlib import Path
from typing import Optional

from fastapi import Depends, FastAPI, File, HTTPException, UploadFile
from fastapi.responses import Response
from pydantic import BaseModel, Field

from instacheck import UsernameChecker, CheckerConfig, __version__
from instacheck.core.exporter import XLSX_MEDIA_TYPE
from instacheck.exceptions import ImportFileError
from instacheck.models.record import UsernameRecord
from instacheck.models.stats import ProcessingStats


# Request/Response models
class AddTextRequest(BaseModel):
    """Request body for queueing typed usernames."""

    text: str = Field(
        ...,
        description="Usernames separated by newlines or commas. "
        "@handles and instagram.com profile URLs are accepted.",
        json_schema_extra={"example": "alice\n@bob\nhttps://www.instagram.com/carol/"},
    )


class AddedResponse(BaseModel):
    """Records created by an add request."""

    added: int
    records: list[UsernameRecord]


class RecordsResponse(BaseModel):
    """Current queue with summary counts."""

    records: list[UsernameRecord]
    stats: ProcessingStats


class RunResponse(BaseModel):
    """Run-level processor state."""

    state: str
    started: Optional[bool] = None
    stats: ProcessingStats


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    timestamp: str


class ConfigResponse(BaseModel):
    """Active checker configuration, without the credential."""

    model: str = Field(..., description="Model used for web-search classification.")
    max_searches: int = Field(..., description="Web searches allowed per username.")
    request_delay_ms: int = Field(
        ...,
        description="Pause in milliseconds after each username. "
        "Keeps the call rate low to avoid provider rate limiting.",
    )
    api_key_configured: bool = Field(
        ...,
        description="Whether a credential is available. Without one every check fails.",
    )
    export_filename: str = Field(..., description="Filename offered by the export download.")
    log_level: str


# Global checker instance
_checker: Optional[UsernameChecker] = None


def get_checker() -> UsernameChecker:
    """Return the session checker created at startup."""
    if _checker is None:
        raise HTTPException(status_code=503, detail="Checker not initialized")
    return _checker


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage checker lifecycle."""
    global _checker
    _checker = UsernameChecker(CheckerConfig())
    await _checker.__aenter__()
    yield
    await _checker.__aexit__(None, None, None)
    _checker = None


# Create FastAPI app
app = FastAPI(
    title="instacheck API",
    description="Bulk Instagram username page checker",
    version=__version__,
    lifespan=lifespan,
)


def _run_response(checker: UsernameChecker, started: Optional[bool] = None) -> RunResponse:
    return RunResponse(state=checker.state.value, started=started, stats=checker.stats)


@app.get("/health", response_model=HealthResponse, tags=["System"])
async def health_check():
    """Check API health status."""
    return HealthResponse(
        status="healthy",
        version=__version__,
        timestamp=datetime.now().isoformat(),
    )


@app.get("/api/config", response_model=ConfigResponse, tags=["System"])
async def get_config(checker: UsernameChecker = Depends(get_checker)):
    """
    Get the active configuration.

    **Configuration is set via environment variables** with the `INSTACHECK_` prefix:
    - `INSTACHECK_API_KEY=...`
    - `INSTACHECK_REQUEST_DELAY_MS=2000`
    """
    config = checker.config
    return ConfigResponse(
        model=config.model,
        max_searches=config.max_searches,
        request_delay_ms=config.request_delay_ms,
        api_key_configured=bool(getattr(checker.classifier, "api_key", None)),
        export_filename=Path(config.export_path).name,
        log_level=config.log_level,
    )


@app.get("/api/records", response_model=RecordsResponse, tags=["Queue"])
async def list_records(checker: UsernameChecker = Depends(get_checker)):
    """List queued records in insertion order with summary counts."""
    return RecordsResponse(records=checker.records, stats=checker.stats)


@app.post("/api/records/text", response_model=AddedResponse, tags=["Queue"])
async def add_text(request: AddTextRequest, checker: UsernameChecker = Depends(get_checker)):
    """Queue usernames from a block of text."""
    added = checker.add_text(request.text)
    return AddedResponse(added=len(added), records=added)


@app.post("/api/records/file", response_model=AddedResponse, tags=["Queue"])
async def add_file(
    file: UploadFile = File(..., description="Spreadsheet (.xlsx, .xlsm, .xls) or CSV"),
    checker: UsernameChecker = Depends(get_checker),
):
    """
    Queue usernames from an uploaded spreadsheet.

    Every non-empty text cell of the first sheet is treated as a username.
    Records are appended to the existing queue.
    """
    data = await file.read()
    try:
        added = checker.add_file_bytes(data, file.filename or "")
    except ImportFileError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return AddedResponse(added=len(added), records=added)


@app.delete("/api/records", response_model=RunResponse, tags=["Queue"])
async def clear_records(checker: UsernameChecker = Depends(get_checker)):
    """Remove all records. Also stops an active run."""
    checker.clear()
    return _run_response(checker)


@app.get("/api/stats", response_model=ProcessingStats, tags=["Queue"])
async def get_stats(checker: UsernameChecker = Depends(get_checker)):
    """Summary counts over the current queue."""
    return checker.stats


@app.get("/api/run", response_model=RunResponse, tags=["Run"])
async def get_run(checker: UsernameChecker = Depends(get_checker)):
    """Current run state."""
    return _run_response(checker)


@app.post("/api/run/start", response_model=RunResponse, tags=["Run"])
async def start_run(checker: UsernameChecker = Depends(get_checker)):
    """
    Start checking queued usernames in the background.

    Only idle and previously failed records are checked. Starting while a
    run is active does nothing and reports `started: false`.
    """
    started = checker.start()
    return _run_response(checker, started=started)


@app.post("/api/run/stop", response_model=RunResponse, tags=["Run"])
async def stop_run(checker: UsernameChecker = Depends(get_checker)):
    """Stop the active run after the username currently being checked."""
    checker.stop()
    return _run_response(checker)


@app.get("/api/export", tags=["Results"])
async def export_results(checker: UsernameChecker = Depends(get_checker)):
    """Download all records as an Excel workbook."""
    filename = Path(checker.config.export_path).name
    return Response(
        content=checker.export_bytes(),
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="127.0.0.1", port=8000)
