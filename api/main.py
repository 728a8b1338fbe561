"""
Copygate API: Main Application

POST /run        Staged rewrite + gating for a source text
GET  /stages     The stage catalog (id + title)
GET  /ruleset    Active ruleset and its content hash
POST /factcheck  Look up a single claim with the fact-check provider
GET  /health     Health check
"""

from __future__ import annotations

import asyncio
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.requests import Request

from copygate import __version__
from copygate.config import settings
from copygate.diff import compute_diff_spans
from copygate.factcheck import FactCheckProvider
from copygate.factcheck.gate import select_claims
from copygate.factcheck.google import GoogleFactCheckProvider
from copygate.cache import VerificationCache
from copygate.llm.factory import get_provider
from copygate.logging import setup_logging, get_logger
from copygate.pipeline import fold_verifications, run_pipeline
from copygate.ruleset import RulesetSource
from copygate.stages import RULESET_STAGES
from copygate.schemas.run import (
    FactCheckRequest,
    FactCheckResponse,
    HealthResponse,
    RulesetResponse,
    RunRequest,
    RunResponse,
    StagesResponse,
)

logger = get_logger("api")

MIN_TEXT_CHARS = 10
CLAMP_CHARS = 1500

FACTCHECK_MODE = settings.FACTCHECK_MODE


# ============================================================
# SHARED COLLABORATORS (constructed once, passed by reference)
# ============================================================

_llm = None
_ruleset_source = RulesetSource(settings.RULESET_PATH)
_factcheck: Optional[FactCheckProvider] = None


def _get_llm():
    global _llm
    if _llm is None:
        _llm = get_provider(settings.LLM_PROVIDER)
    return _llm


def _get_factcheck() -> Optional[FactCheckProvider]:
    global _factcheck
    if _factcheck is None and settings.FACTCHECK_API_KEY:
        _factcheck = GoogleFactCheckProvider(
            api_key=settings.FACTCHECK_API_KEY,
            cache=VerificationCache(
                ttl_seconds=settings.FACTCHECK_CACHE_TTL,
                max_entries=settings.FACTCHECK_CACHE_MAX,
            ),
        )
    return _factcheck


# ============================================================
# STARTUP / SHUTDOWN
# ============================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Wire up dependencies on startup."""
    setup_logging()
    bundle = _ruleset_source.load()
    logger.info("Copygate API starting",
                extra={"catalog_version": bundle.catalog_version, "mode": FACTCHECK_MODE})
    yield
    logger.info("Copygate API shutting down")


app = FastAPI(
    title="Copygate API",
    description="Staged editorial rewrite with post-generation safety gating",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in settings.CORS_ORIGINS.split(",")],
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
    allow_credentials=False,
)


# ============================================================
# GLOBAL ERROR HANDLER
# ============================================================

@app.exception_handler(Exception)
async def global_error_handler(request: Request, exc: Exception):
    """Catch unhandled exceptions and return a structured error without internals."""
    logger.error(
        f"Unhandled exception: {type(exc).__name__}",
        extra={"error": str(exc), "path": request.url.path, "method": request.method},
        exc_info=True,
    )
    return JSONResponse(
        status_code=500,
        content={"success": False, "error": "Internal server error. The run could not be completed."},
    )


# ============================================================
# FACT-CHECK HELPERS
# ============================================================

async def _auto_verifications(provider: FactCheckProvider, text: str) -> list[dict]:
    """Select claims from text and look them up concurrently."""
    claims = select_claims(
        text,
        max_claims=settings.FACTCHECK_MAX_CLAIMS,
        min_len=settings.FACTCHECK_MIN_SENT_LEN,
        max_len=settings.FACTCHECK_MAX_SENT_LEN,
    )
    lookups = await asyncio.gather(
        *[provider.search(q) for q in claims],
        return_exceptions=True,
    )

    verifications = []
    for query, fc in zip(claims, lookups):
        if isinstance(fc, Exception):
            logger.warning("Fact-check lookup failed",
                           extra={"query": query[:80], "error": str(fc), "error_type": type(fc).__name__})
            continue
        verifications.append({**fc, "query": query})
    return verifications


async def _preview_lookup(provider: FactCheckProvider, query: str) -> Optional[dict]:
    try:
        fc = await provider.search(query)
    except Exception as e:
        logger.warning("Fact-check preview failed",
                       extra={"query": query[:80], "error": str(e), "error_type": type(e).__name__})
        return None
    return {"mode": "preview", "query": query,
            "signals": fc.get("signals"), "results": fc.get("results", [])}


def _status(result: dict, source_text: str) -> str:
    if source_text and not result["rewrite"]["text"]:
        return "blocked"
    if result.get("human_review_recommended"):
        return "review"
    return "ok"


# ============================================================
# ROUTES
# ============================================================

@app.post("/run", response_model=RunResponse)
async def run(request: RunRequest):
    """Rewrite source copy under the requested stage and gate the output."""
    if len(request.text.strip()) < MIN_TEXT_CHARS:
        raise HTTPException(400, f"The source text must be at least {MIN_TEXT_CHARS} characters")

    start = time.time()
    text = request.text[:CLAMP_CHARS] if request.options.clamp1500 else request.text
    salvage = settings.SUS_SALVAGE if request.options.salvage is None else request.options.salvage

    provider = _get_factcheck() if FACTCHECK_MODE in ("auto", "preview") else None

    result = await run_pipeline(
        text,
        stage=request.stage,
        llm=_get_llm(),
        ruleset=_ruleset_source,
        salvage=salvage,
        temperature=settings.TEMPERATURE,
    )

    if provider is not None and FACTCHECK_MODE == "auto":
        # Claims come from the gated rewrite so the gate can find them again
        verifications = await _auto_verifications(provider, result["rewrite"]["text"] or text)
        if verifications:
            result = fold_verifications(result, verifications, mode="auto")

    if provider is not None and FACTCHECK_MODE == "preview" and request.factcheck_query:
        preview = await _preview_lookup(provider, request.factcheck_query)
        if preview:
            result["workshop"]["fact_check_tools"] = preview

    corrected = result["rewrite"]["text"]
    report = {
        "version": result["version"],
        "model": result["workshop"].get("model", "unknown"),
        "catalog_version": result["catalog_version"],
        "stage": result["workshop"]["stage"],
        "findings_count": len(result["analysis"]["findings"]),
        "tone": result["analysis"]["tone"],
        "status": _status(result, text),
        "human_review_recommended": result.get("human_review_recommended"),
    }

    logger.info(
        f"Run complete: stage={report['stage']} status={report['status']}",
        extra={
            "stage": report["stage"],
            "findings_count": report["findings_count"],
            "catalog_version": report["catalog_version"],
            "duration_ms": int((time.time() - start) * 1000),
        },
    )

    return {
        "success": True,
        "result": {
            "corrected_text": corrected,
            "report": report,
            "full": result,
            "diff_spans": compute_diff_spans(text, corrected),
        },
    }


@app.get("/stages", response_model=StagesResponse)
async def get_stages():
    """List all rule stages in order."""
    return {"stages": RULESET_STAGES}


@app.get("/ruleset", response_model=RulesetResponse)
async def get_ruleset():
    """Return the active ruleset and its content hash."""
    bundle = _ruleset_source.load()
    return {"success": True, "ruleset": list(bundle.rules), "version": bundle.catalog_version}


@app.post("/factcheck", response_model=FactCheckResponse)
async def factcheck(request: FactCheckRequest):
    """Look up a single claim."""
    if not request.query.strip():
        raise HTTPException(400, "Missing fact-check query")

    provider = _get_factcheck()
    if provider is None:
        raise HTTPException(503, "Fact-check provider is not available")

    try:
        result = await provider.search(
            request.query.strip(),
            language_code=request.language_code,
            max_age_days=request.max_age_days,
            page_size=request.page_size,
        )
    except Exception as e:
        logger.warning("Fact-check lookup failed",
                       extra={"query": request.query[:80], "error": str(e), "error_type": type(e).__name__})
        raise HTTPException(502, "Fact-check provider temporarily unavailable. Please try again.")

    return {"success": True, "result": result}


@app.get("/health", response_model=HealthResponse)
async def health():
    """Health check."""
    return {
        "status": "operational",
        "version": __version__,
        "llm_provider": settings.LLM_PROVIDER,
        "factcheck_mode": FACTCHECK_MODE,
        "catalog_version": _ruleset_source.load().catalog_version,
        "stages": len(RULESET_STAGES),
    }


# --- Version Header Middleware ---
@app.middleware("http")
async def add_version_headers(request: Request, call_next):
    response = await call_next(request)
    response.headers["X-Copygate-Version"] = __version__
    response.headers["X-Content-Type-Options"] = "nosniff"
    return response


# --- Request Logging Middleware ---
@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log every API request with method, path, status, duration."""
    path = request.url.path
    if path == "/health":
        return await call_next(request)

    start = time.time()
    response = await call_next(request)
    duration_ms = round((time.time() - start) * 1000, 1)

    logger.info(
        f"{request.method} {path} → {response.status_code} ({duration_ms}ms)",
        extra={
            "method": request.method,
            "path": path,
            "status_code": response.status_code,
            "duration_ms": duration_ms,
        },
    )
    return response


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("api.main:app", host=settings.HOST, port=settings.PORT)
