"""
HTTP surface for the lease economics engine.

Run with: uvicorn lease_economics.api:app
"""

from __future__ import annotations

import logging
import time
import uuid
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field, ValidationError
from starlette.middleware.base import BaseHTTPMiddleware

from lease_economics import __version__
from lease_economics.config import configure_logging, get_settings
from lease_economics.engine.amortization import build_amortization_schedule
from lease_economics.engine.analysis import analyze_deal
from lease_economics.engine.scenario import analyze_scenarios, compare_all
from lease_economics.models import (
    AmortizationRow,
    AnalysisResult,
    DealDefinition,
    NormalizationIssue,
    NormalizedBundle,
    ScenarioComparison,
    ScenarioResult,
)
from lease_economics.services.normalizer import normalize

_LOG = logging.getLogger("uvicorn.error")


class NormalizeResponse(BaseModel):
    bundle: NormalizedBundle
    issues: List[NormalizationIssue] = Field(default_factory=list)


class ScenarioSpec(BaseModel):
    name: str
    overrides: Dict[str, Any] = Field(default_factory=dict)


class ScenariosRequest(BaseModel):
    base: DealDefinition
    scenarios: List[ScenarioSpec] = Field(default_factory=list)
    top_n: int = Field(default=3, ge=1)


class ScenariosResponse(BaseModel):
    results: List[ScenarioResult] = Field(default_factory=list)
    comparisons: List[ScenarioComparison] = Field(default_factory=list)


class AmortizationRequest(BaseModel):
    principal: float
    annual_rate: float = Field(default=0.0, ge=0.0)
    months: int


app = FastAPI(title="Lease Economics Engine", version=__version__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class RequestLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        request_id = (request.headers.get("x-request-id") or "").strip() or str(uuid.uuid4())[:8]
        request.state.request_id = request_id
        start = time.perf_counter()
        response = await call_next(request)
        _LOG.info(
            "request_id=%s method=%s path=%s status=%s duration_ms=%.0f",
            request_id,
            request.method,
            request.url.path,
            response.status_code,
            (time.perf_counter() - start) * 1000,
        )
        response.headers["X-Request-Id"] = request_id
        return response


app.add_middleware(RequestLogMiddleware)


def _validation_failed(request: Request, details: Any) -> JSONResponse:
    rid = getattr(request.state, "request_id", "no-rid")
    _LOG.info("VALIDATION_ERR rid=%s path=%s", rid, request.url.path)
    return JSONResponse(
        status_code=422,
        content=jsonable_encoder({"error": "validation_failed", "rid": rid, "details": details}),
    )


@app.exception_handler(RequestValidationError)
async def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return _validation_failed(request, exc.errors())


@app.exception_handler(ValidationError)
async def _model_validation_handler(request: Request, exc: ValidationError) -> JSONResponse:
    return _validation_failed(request, exc.errors(include_url=False))


@app.get("/health")
def health() -> Dict[str, str]:
    return {"status": "ok", "version": __version__}


@app.post("/normalize", response_model=NormalizeResponse)
def normalize_endpoint(deal: DealDefinition) -> NormalizeResponse:
    bundle, issues = normalize(deal)
    return NormalizeResponse(bundle=bundle, issues=issues)


@app.post("/analyze", response_model=AnalysisResult)
def analyze_endpoint(deal: DealDefinition) -> AnalysisResult:
    return analyze_deal(deal)


@app.post("/scenarios", response_model=ScenariosResponse)
def scenarios_endpoint(body: ScenariosRequest) -> ScenariosResponse:
    if not body.scenarios:
        raise HTTPException(status_code=400, detail="At least one scenario is required")
    names = [s.name for s in body.scenarios]
    if len(set(names)) != len(names):
        raise HTTPException(status_code=400, detail="Scenario names must be unique")
    # merged overrides are validated here; failures surface as 422 via the handler above
    results = analyze_scenarios(body.base, [(s.name, s.overrides) for s in body.scenarios])
    return ScenariosResponse(results=results, comparisons=compare_all(results, body.top_n))


@app.post("/amortization", response_model=List[AmortizationRow])
def amortization_endpoint(body: AmortizationRequest) -> List[AmortizationRow]:
    return build_amortization_schedule(body.principal, body.annual_rate, body.months)


def run(host: Optional[str] = None, port: Optional[int] = None) -> None:
    """Serve the app with uvicorn (development entry point)."""
    import uvicorn

    configure_logging()

    uvicorn.run(app, host=host or "127.0.0.1", port=port or 8010, log_level=get_settings().log_level.lower())
