"""
HTTP API
========
FastAPI front for the scanner.

    POST /scan      {url, maxPages?, maxDepth?, auth?} → FinalReport JSON
    POST /api/scan  same handler (path used by the bundled frontend)
    GET  /health    {"status": "ok"}

Errors:
    400 {error, details}  invalid URL or auth block
    422                   body validation (FastAPI default)
    500 {error, details}  the scan could not run (browser launch failure)

Run with ``python -m trustscan serve`` or ``uvicorn trustscan.server:app``.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from . import __version__
from .auth.variants import parse_auth
from .coordinator import ScanCoordinator
from .errors import InvalidURLError
from .markdown_exporter import export_markdown
from .run_config import ScanConfig, Settings
from .utils import report_base_name

load_dotenv()

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s | %(levelname)s | %(message)s',
    datefmt='%H:%M:%S'
)
logger = logging.getLogger(__name__)


class ScanRequest(BaseModel):
    url: str = Field(..., min_length=1, description="Start URL; https:// is assumed when missing")
    maxPages: Optional[int] = Field(None, ge=1, le=500)
    maxDepth: Optional[int] = Field(None, ge=0, le=10)
    auth: Optional[Dict[str, Any]] = None


def error_response(status_code: int, error: str, details: str = "") -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": error, "details": details})


# ── Dependencies (overridable in tests) ───────────────────────────

def get_settings() -> Settings:
    return Settings.from_env()


def get_coordinator_factory():
    return ScanCoordinator


def _save_markdown(report, settings: Settings) -> None:
    if not settings.reports_dir:
        return
    try:
        export_markdown(report, f"{settings.reports_dir}/{report_base_name(report.start_url)}.md")
    except OSError as exc:
        logger.warning(f"[API] Could not write markdown report: {exc}")


def create_app() -> FastAPI:
    app = FastAPI(
        title="trustscan",
        version=__version__,
        description="Website trust & hygiene scanner",
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    async def health() -> Dict[str, str]:
        return {"status": "ok"}

    @app.post("/scan")
    @app.post("/api/scan")
    async def scan(
        body: ScanRequest,
        settings: Settings = Depends(get_settings),
        coordinator_factory=Depends(get_coordinator_factory),
    ):
        logger.info(
            f"[API] Scan request for {body.url} "
            f"(pages={body.maxPages or 'default'}, depth={body.maxDepth if body.maxDepth is not None else 'default'})"
        )
        try:
            config = ScanConfig.from_request(
                body.url,
                max_pages=body.maxPages,
                max_depth=body.maxDepth,
                auth=parse_auth(body.auth),
            )
        except InvalidURLError as exc:
            return error_response(status.HTTP_400_BAD_REQUEST, "Invalid URL", str(exc))
        except ValueError as exc:
            return error_response(status.HTTP_400_BAD_REQUEST, "Invalid request", str(exc))

        coordinator = coordinator_factory(config, settings)
        try:
            report = await coordinator.run()
        except Exception as exc:
            logger.error(f"[API] Scan error: {exc}", exc_info=True)
            return error_response(
                status.HTTP_500_INTERNAL_SERVER_ERROR,
                "Failed to scan website.",
                str(exc),
            )

        _save_markdown(report, settings)
        return report.to_dict()

    return app


app = create_app()
