"""
api/routes.py
REST endpoints.
"""
import time
from typing import Optional

from fastapi import APIRouter, HTTPException, Query
from fastapi.concurrency import run_in_threadpool

from api.models import (
    ExtractRequest,
    ExtractResponse,
    GuardrailReport,
    MatchRequest,
    MatchResponse,
    MatchResultOut,
    PortOut,
    ProximityResponse,
    RankRequest,
    RankResponse,
    RequirementOut,
)
from config.settings import settings
from guardrails.guardrail_layer import GuardrailLayer
from matching_engine.engine import MatchingEngine
from matching_engine.ranking import rank_listings
from monitoring import get_logger
from port_resolver.proximity import proximity_between, proximity_score, resolve_port
from port_resolver.registry import PORT_REGISTRY, list_ports as registry_ports
from requirement_extractor.extractor import RequirementExtractor

router = APIRouter()
log = get_logger(__name__)

_engine    = MatchingEngine()
_extractor = RequirementExtractor()
_guardrail = GuardrailLayer()


# POST /extract

@router.post("/extract", response_model=ExtractResponse, summary="Extract a requirement from free text")
async def extract(request: ExtractRequest) -> ExtractResponse:
    req = _extractor.extract(request.text)
    report = _guardrail.validate_requirement(req)
    return ExtractResponse(
        success=True,
        requirement=RequirementOut.from_requirement(req),
        warnings=report.warnings,
    )


# POST /match

@router.post(
    "/match",
    response_model=MatchResponse,
    summary="Find the best matching listings for a requirement",
    description="""
Return at most three listings scoring at or above the acceptance threshold.

**Two input modes:**

**1. Structured** — pass the requirement fields:
```json
{ "requirement": { "vessel_size": 76000, "target_rate": 20 }, "listings": [ ... ] }
```

**2. Free text** — pass the charter message:
```json
{ "text": "Need Panamax 76k dwt, rate 20k/day", "listings": [ ... ] }
```
""",
)
async def match(request: MatchRequest) -> MatchResponse:
    t0 = time.perf_counter()

    if request.requirement is not None:
        req = request.requirement.to_requirement()
        mode = "structured"
    else:
        req = _extractor.extract(request.text)
        mode = "text"
    log.info("Match request", request_id=req.id, mode=mode,
             listings=len(request.listings), radius_nm=request.radius_nm)

    pool = [item.to_listing() for item in request.listings]
    results = await run_in_threadpool(
        _engine.find_matching_listings, req, pool, request.radius_nm
    )

    gr = _guardrail.validate_matches(req, results, _engine.threshold_pct, _engine.result_limit)

    log.info("Match complete", request_id=req.id, returned=len(results),
             elapsed_ms=round((time.perf_counter() - t0) * 1000))

    return MatchResponse(
        success          =True,
        request_id       =req.id,
        requirement      =RequirementOut.from_requirement(req),
        results          =[MatchResultOut.from_result(r) for r in results],
        guardrail_report =GuardrailReport(**gr),
    )


# POST /rank

@router.post("/rank", response_model=RankResponse, summary="Rank a listing pool by weighted preferences")
async def rank(request: RankRequest) -> RankResponse:
    try:
        weights = request.weights.to_weights()
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc))

    pool = [item.to_listing() for item in request.listings]
    results = await run_in_threadpool(
        rank_listings, pool, weights, request.preferences.to_preferences()
    )
    gr = _guardrail.validate_ranking(results, weights)

    return RankResponse(
        success=True,
        results=[MatchResultOut.from_result(r) for r in results],
        guardrail_report=GuardrailReport(**gr),
    )


# GET /ports

@router.get("/ports", summary="List known ports")
async def list_ports() -> dict:
    return {
        "count": len(PORT_REGISTRY),
        "ports": [PortOut(name=p.name, latitude=p.latitude, longitude=p.longitude)
                  for p in registry_ports()],
    }


@router.get("/ports/resolve", response_model=PortOut, summary="Resolve a free-text port name")
async def resolve(name: str = Query(..., min_length=1)) -> PortOut:
    port = resolve_port(name)
    if port is None:
        raise HTTPException(status_code=404, detail=f"Port '{name}' not found")
    return PortOut(name=port.name, latitude=port.latitude, longitude=port.longitude)


@router.get("/ports/proximity", response_model=ProximityResponse, summary="Proximity score of two ports")
async def proximity(
    a: str = Query(..., min_length=1),
    b: str = Query(..., min_length=1),
    max_nm: Optional[float] = Query(default=None),
) -> ProximityResponse:
    max_distance = settings.proximity_max_nm if max_nm is None else max_nm
    port_a = resolve_port(a)
    port_b = resolve_port(b)
    dist = proximity_between(a, b)
    return ProximityResponse(
        port_a      =a,
        port_b      =b,
        resolved_a  =port_a.name if port_a else None,
        resolved_b  =port_b.name if port_b else None,
        distance_nm =round(dist, 1) if dist is not None else None,
        score       =proximity_score(a, b, max_distance),
        max_nm      =max_distance,
    )


# GET /health

@router.get("/health", summary="Health check")
async def health() -> dict:
    return {
        "status": "healthy",
        "ports_loaded": len(PORT_REGISTRY),
        "match_cache": {
            "entries":  len(_engine.cache),
            "capacity": _engine.cache.capacity,
        },
        "matching": {
            "threshold_pct": _engine.threshold_pct,
            "result_limit":  _engine.result_limit,
        },
    }
