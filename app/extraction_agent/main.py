from __future__ import annotations

import json
import logging
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from .agent import (
    AgentNotConfigured,
    AgentNotInitialized,
    DocumentExtractionAgent,
    get_extraction_agent,
    initialize_agent,
    update_agent_config,
)
from .config import CONFIG
from .field_registry import template_registry_payload
from .pipeline.autofill import autofill_form
from .pipeline.extract import ExtractionFailed
from .pipeline.validate import validate_extraction
from .schemas import ExtractedField, ExtractionContext

RUNS_DIR = CONFIG.runs_dir

logging.basicConfig(level=CONFIG.log_level, format="%(asctime)s %(levelname)s %(name)s - %(message)s")
LOGGER = logging.getLogger("extraction_agent")

app = FastAPI(title="DS-160 Document Extraction Agent")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _new_run_id() -> str:
    return datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S") + "_" + uuid.uuid4().hex[:8]


def _run_dir(run_id: str) -> Optional[Path]:
    if not CONFIG.save_runs:
        return None
    run_dir = RUNS_DIR / run_id
    run_dir.mkdir(parents=True, exist_ok=True)
    return run_dir


def _log_run(run_dir: Optional[Path], message: str) -> None:
    LOGGER.info(message)
    if run_dir is None:
        return
    timestamp = datetime.now(timezone.utc).isoformat()
    with (run_dir / "run.log").open("a") as f:
        f.write(f"[{timestamp}] {message}\n")


def _write_json_artifact(run_dir: Optional[Path], filename: str, payload: Dict) -> None:
    if run_dir is None:
        return
    (run_dir / filename).write_text(json.dumps(payload, indent=2, ensure_ascii=False))


def _resolve_agent() -> DocumentExtractionAgent:
    try:
        return get_extraction_agent()
    except AgentNotInitialized:
        return initialize_agent()


def _parse_fields(raw: object) -> List[ExtractedField]:
    if not isinstance(raw, list):
        raise ValueError("extracted_fields must be a list")
    return [ExtractedField.model_validate(item) for item in raw]


@app.get("/health")
async def health() -> Dict[str, str]:
    return {"status": "ok"}


@app.get("/templates")
async def templates() -> Dict[str, object]:
    return template_registry_payload()


@app.get("/config")
async def get_config():
    try:
        agent = _resolve_agent()
    except AgentNotConfigured as exc:
        return JSONResponse({"error": str(exc)}, status_code=503)
    return JSONResponse({"config": agent.get_config().to_dict()})


@app.patch("/config")
async def patch_config(payload: Dict):
    try:
        _resolve_agent()
    except AgentNotConfigured as exc:
        return JSONResponse({"error": str(exc)}, status_code=503)
    try:
        config = update_agent_config(dict(payload))
    except (TypeError, ValueError) as exc:
        return JSONResponse({"error": str(exc)}, status_code=400)
    return JSONResponse({"config": config.to_dict()})


@app.post("/extract")
async def extract(context: ExtractionContext):
    run_id = _new_run_id()
    run_dir = _run_dir(run_id)
    _log_run(
        run_dir,
        f"Starting extraction category={context.document_category} filename={context.filename or '-'} "
        f"chars={len(context.document_text)}",
    )
    try:
        agent = _resolve_agent()
    except AgentNotConfigured as exc:
        _log_run(run_dir, f"Agent not configured: {exc}")
        return JSONResponse({"run_id": run_id, "error": str(exc)}, status_code=503)

    try:
        result = await agent.extract_document(context)
    except ExtractionFailed as exc:
        _log_run(run_dir, f"Extraction failed: {exc}")
        return JSONResponse({"run_id": run_id, "error": str(exc)}, status_code=502)

    payload = result.model_dump()
    _write_json_artifact(run_dir, "result.json", payload)
    _log_run(
        run_dir,
        f"Extraction complete. fields={len(result.extracted_fields)} "
        f"overall={result.confidence_summary.overall_confidence:.2f} ms={result.processing_time_ms}",
    )
    return JSONResponse({"run_id": run_id, "result": payload})


@app.post("/validate")
async def validate(payload: Dict):
    try:
        fields = _parse_fields(payload.get("extracted_fields"))
    except (ValueError, ValidationError) as exc:
        return JSONResponse({"error": f"Invalid payload: {exc}"}, status_code=400)
    summary = validate_extraction(fields)
    return JSONResponse({"validation": summary.model_dump()})


@app.post("/autofill")
async def autofill(payload: Dict):
    form_fields = payload.get("form_fields")
    if not isinstance(form_fields, dict):
        return JSONResponse({"error": "Missing form_fields"}, status_code=400)
    mappings = payload.get("field_mappings") or {}
    if not isinstance(mappings, dict):
        return JSONResponse({"error": "field_mappings must be an object"}, status_code=400)
    try:
        fields = _parse_fields(payload.get("extracted_fields"))
    except (ValueError, ValidationError) as exc:
        return JSONResponse({"error": f"Invalid payload: {exc}"}, status_code=400)
    form_data = autofill_form(form_fields, fields, field_mappings=mappings)
    return JSONResponse({"form_data": form_data, "filled_count": len(form_data)})
