from contextlib import asynccontextmanager
from typing import Dict, Optional

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel

from .config import configure_logging, load_config
from .errors import ConfigError
from .models import TenantRecord, VerificationReport
from .orchestrator import VerificationOrchestrator
from .tools.extraction import extract_from_form, extract_from_text
from .tools.history import MAX_HISTORY, load_history, save_report_summary

# Load environment variables
load_dotenv()
configure_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    # One orchestrator (and so one rate limiter + HTTP session) per process
    try:
        config = load_config()
    except ConfigError as exc:
        raise RuntimeError(f"Invalid verification configuration: {exc}") from exc
    app.state.orchestrator = VerificationOrchestrator(config)
    try:
        yield
    finally:
        await app.state.orchestrator.aclose()


app = FastAPI(title="Tenant Verification API", lifespan=lifespan)


class ExtractInput(BaseModel):
    text: Optional[str] = None
    form_fields: Optional[Dict[str, Optional[str]]] = None


def get_orchestrator(request: Request) -> VerificationOrchestrator:
    return request.app.state.orchestrator


@app.get("/ping")
def ping():
    return {"pong": True}


@app.post("/verify", response_model=VerificationReport)
async def verify(
        record: TenantRecord,
        save_history: bool = Query(True, description="Store a summary in the verification history"),
        orchestrator: VerificationOrchestrator = Depends(get_orchestrator),
):
    report = await orchestrator.run_verification(record)
    if save_history:
        await run_in_threadpool(save_report_summary, report)
    return report


@app.post("/extract", response_model=TenantRecord)
def extract(payload: ExtractInput):
    """
    Turn scraped page data into a TenantRecord.

    Form fields win over values found in free text when both are supplied.
    """
    if not payload.text and not payload.form_fields:
        raise HTTPException(status_code=400, detail="Provide 'text' and/or 'form_fields'")
    data = {}
    if payload.text:
        data.update(extract_from_text(payload.text).model_dump(exclude_none=True))
    if payload.form_fields:
        data.update(extract_from_form(payload.form_fields).model_dump(exclude_none=True))
    return TenantRecord(**data)


@app.get("/config/status")
def config_status(orchestrator: VerificationOrchestrator = Depends(get_orchestrator)):
    return orchestrator.config.configuration_status()


@app.get("/history")
def history(
        risk_level: Optional[str] = Query(None, description="Filter by risk level: Low, Medium, High, Very High"),
        name: Optional[str] = Query(None, description="Search by tenant name (case-insensitive)"),
        limit: int = Query(MAX_HISTORY, ge=1, le=MAX_HISTORY, description="Limit number of results"),
        offset: int = Query(0, ge=0, description="Offset for pagination"),
):
    """
    Recent verification summaries, newest first.

    Query Parameters:
        - risk_level: exact risk level match
        - name: partial, case-insensitive name match
        - limit / offset: pagination (at most 50 summaries are kept)
    """
    items = load_history(limit=limit, offset=offset, risk_level=risk_level, name=name)
    return {"returned_count": len(items), "offset": offset, "limit": limit, "data": items}
