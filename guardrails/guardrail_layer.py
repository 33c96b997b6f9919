"""
guardrails/guardrail_layer.py
Quality checks around the matching engine:
  1. RequirementValidator — sanity of a requirement before matching
  2. ConfidenceScorer     — holistic confidence of an extracted requirement
  3. MatchOutputValidator — bounds and ordering of compatibility results
  4. RankingValidator     — bounds and ordering of ranked results
Reports issues and warnings; never raises.
"""
from dataclasses import dataclass, field
from typing import Any, Optional, Sequence

from config.settings import settings
from matching_engine.engine import MatchResult
from matching_engine.ranking import RankingWeights
from monitoring import GUARDRAIL_FAILURES, get_logger
from port_resolver.proximity import resolve_port
from requirement_extractor.models import CONFIDENCE_KEYS, CargoRequirement

log = get_logger(__name__)

# Plausible ranges for a dry-bulk requirement
_SANITY: dict[str, tuple[float, float]] = {
    "vessel_size":    (5_000, 450_000),     # DWT
    "target_rate":    (1, 150),             # k/day
    "cargo_quantity": (1_000, 420_000),     # mt
    "max_age":        (0, 40),              # years
}

_GEAR_VALUES = {"geared", "gearless"}


@dataclass
class ValidationReport:
    passed: bool
    confidence_score: float
    issues: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


# ── 1. Requirement Validator ──────────────────────────────────────────────────

class RequirementValidator:

    def validate(self, req: CargoRequirement) -> ValidationReport:
        issues: list[str] = []
        warnings: list[str] = []
        score = 1.0

        for name, (lo, hi) in _SANITY.items():
            value = getattr(req, name)
            if value is None:
                continue
            if value < 0:
                issues.append(f"{name} cannot be negative")
                score -= 0.3
            elif not lo <= value <= hi:
                warnings.append(f"{name} {value:,.0f} is outside the usual range {lo:,.0f}–{hi:,.0f}")
                score -= 0.1

        if req.laycan_start and req.laycan_end and req.laycan_end < req.laycan_start:
            warnings.append("laycan_end is before laycan_start — no listing window can fall inside it")
            score -= 0.1

        if req.gear_requirement is not None and req.gear_requirement.lower() not in _GEAR_VALUES:
            warnings.append(f"gear_requirement '{req.gear_requirement}' is neither geared nor gearless")

        for port_field in ("load_port", "discharge_port"):
            port = getattr(req, port_field)
            if port and resolve_port(port) is None:
                warnings.append(f"{port_field} '{port}' is not in the port registry — proximity unknown")

        if req.confidence_scores is not None:
            for name in req.populated_fields():
                key = CONFIDENCE_KEYS[name]
                if not req.confidence_scores.get(key):
                    issues.append(f"{name} is populated but has no confidence score")
                    score -= 0.2

        if req.is_empty():
            warnings.append("Requirement has no matchable fields — nothing can clear the threshold")

        return ValidationReport(
            passed=len(issues) == 0,
            confidence_score=round(max(0.0, score), 3),
            issues=issues,
            warnings=warnings,
        )


# ── 2. Confidence Scorer ──────────────────────────────────────────────────────

class ConfidenceScorer:

    def score(self, req: CargoRequirement) -> float:
        """Mean field confidence for extracted records; authored records score 1."""
        if req.confidence_scores is None:
            return 1.0
        values = list(req.confidence_scores.values())
        if not values:
            return 0.0
        return round(sum(values) / len(values), 3)


# ── 3. Match Output Validator ─────────────────────────────────────────────────

class MatchOutputValidator:

    def validate(self, results: Sequence[MatchResult], threshold_pct: float,
                 limit: int) -> ValidationReport:
        issues: list[str] = []

        if len(results) > limit:
            issues.append(f"{len(results)} results returned, limit is {limit}")
        for r in results:
            if not 0 <= r.score <= 100:
                issues.append(f"{r.listing.id}: score {r.score} outside 0–100")
            elif r.score < threshold_pct:
                issues.append(f"{r.listing.id}: score {r.score} below threshold {threshold_pct}")

        return ValidationReport(
            passed=len(issues) == 0,
            confidence_score=1.0 if not issues else 0.5,
            issues=issues,
        )


# ── 4. Ranking Validator ──────────────────────────────────────────────────────

class RankingValidator:

    def validate(self, results: Sequence[MatchResult],
                 weights: RankingWeights) -> ValidationReport:
        issues: list[str] = []
        warnings: list[str] = []

        if weights.total() == 0:
            warnings.append("All ranking weights are zero — every listing scores neutral")
        for r in results:
            if not 0 <= r.score <= 100:
                issues.append(f"{r.listing.id}: score {r.score} outside 0–100")
        scores = [r.score for r in results]
        if scores != sorted(scores, reverse=True):
            issues.append("Ranked results are not in descending score order")

        return ValidationReport(
            passed=len(issues) == 0,
            confidence_score=1.0 if not issues else 0.5,
            issues=issues,
            warnings=warnings,
        )


# ── Guardrail Orchestrator ────────────────────────────────────────────────────

class GuardrailLayer:
    """
    Runs the guardrail components and returns serialisable summaries.
    """

    def __init__(self) -> None:
        self._requirement_validator = RequirementValidator()
        self._confidence_scorer     = ConfidenceScorer()
        self._match_validator       = MatchOutputValidator()
        self._ranking_validator     = RankingValidator()

    def validate_requirement(self, req: CargoRequirement) -> ValidationReport:
        report = self._requirement_validator.validate(req)
        if not report.passed:
            log.warning("Requirement validation failed", request_id=req.id, issues=report.issues)
        return report

    def validate_matches(
        self,
        req: CargoRequirement,
        results: Sequence[MatchResult],
        threshold_pct: Optional[float] = None,
        limit: Optional[int] = None,
    ) -> dict[str, Any]:
        threshold = settings.match_threshold_pct if threshold_pct is None else threshold_pct
        cap = settings.match_result_limit if limit is None else limit

        req_report = self._requirement_validator.validate(req)
        out_report = self._match_validator.validate(results, threshold, cap)
        confidence = self._confidence_scorer.score(req)
        passed = req_report.passed and out_report.passed

        log.info(
            "Guardrail match check",
            request_id=req.id,
            passed=passed,
            confidence=confidence,
            warnings=len(req_report.warnings),
        )
        if not passed:
            GUARDRAIL_FAILURES.labels(check_type="match").inc()

        return {
            "passed": passed,
            "confidence_score": confidence,
            "issues": req_report.issues + out_report.issues,
            "warnings": req_report.warnings,
        }

    def validate_ranking(
        self, results: Sequence[MatchResult], weights: RankingWeights
    ) -> dict[str, Any]:
        report = self._ranking_validator.validate(results, weights)
        if not report.passed:
            GUARDRAIL_FAILURES.labels(check_type="ranking").inc()
        return {
            "passed": report.passed,
            "confidence_score": report.confidence_score,
            "issues": report.issues,
            "warnings": report.warnings,
        }
