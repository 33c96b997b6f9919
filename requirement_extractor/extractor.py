"""
requirement_extractor/extractor.py
Turns unstructured broker message text into a CargoRequirement.

Each field has an ordered pattern list (see patterns.py); the first pattern
that matches wins.  Fields are extracted independently, so one missing or
garbled field never prevents the others from being found.  Extraction never
raises: an unparseable value simply leaves its field unset.
"""
import re
from datetime import datetime
from typing import Optional, Sequence, Union

from monitoring import EXTRACTIONS, get_logger
from requirement_extractor import patterns as P
from requirement_extractor.models import CONFIDENCE_KEYS, CargoRequirement

log = get_logger(__name__)


def first_match(text: str, pattern_list: Sequence[re.Pattern]) -> Optional[re.Match]:
    for pattern in pattern_list:
        match = pattern.search(text)
        if match:
            return match
    return None


def extract_with_patterns(
    text: str,
    pattern_list: Sequence[re.Pattern],
    return_groups: bool = False,
) -> Union[str, tuple, None]:
    """
    Apply patterns in order and return the first capture group of the first
    match, or all of its groups when ``return_groups`` is set.
    """
    match = first_match(text, pattern_list)
    if match is None:
        return None
    if return_groups:
        return match.groups()
    return match.group(1)


def month_index(name: str, default: int) -> int:
    """
    Resolve a month name to 1–12.  Direct lookup on full and abbreviated
    names, then substring in either direction, then ``default``.
    """
    key = (name or "").lower().strip().rstrip(".")
    if not key:
        return default
    if key in P.MONTHS:
        return P.MONTHS[key]
    for month, idx in P.MONTHS.items():
        if key in month or month in key:
            return idx
    return default


class RequirementExtractor:
    """
    Pattern-priority extractor for charter requirements.

    ``now`` may be injected for deterministic year resolution of laycans.
    """

    def extract(self, text: str, now: Optional[datetime] = None) -> CargoRequirement:
        if not isinstance(text, str):
            text = ""
        now = now or datetime.now()

        req = CargoRequirement(raw_text=text)
        if not text.strip():
            req.confidence_scores = {}
            EXTRACTIONS.labels(outcome="empty").inc()
            return req

        req.vessel_type = self._vessel_type(text)
        req.vessel_size = self._vessel_size(text)
        req.load_port, req.discharge_port = self._route(text)
        req.laycan_start, req.laycan_end = self._laycan(text, now)
        req.target_rate = self._target_rate(text)
        req.max_age, req.build_year = self._age(text, now.year)
        req.gear_requirement = self._gear(text)
        req.ice_class_requirement = self._ice_class(text)
        req.flag_preference = self._clean(extract_with_patterns(text, P.FLAG_PATTERNS))
        req.special_clauses = self._clean(extract_with_patterns(text, P.SPECIAL_CLAUSE_PATTERNS))
        req.charterer_preference = self._clean(extract_with_patterns(text, P.CHARTERER_PATTERNS))
        req.cargo_quantity = self._cargo_quantity(text)
        req.cargo_type = self._clean(extract_with_patterns(text, P.CARGO_TYPE_PATTERNS))

        req.confidence_scores = self._confidence(req)

        populated = req.populated_fields()
        EXTRACTIONS.labels(outcome="populated" if populated else "empty").inc()
        log.info("Requirement extracted", request_id=req.id, chars=len(text), fields=populated)
        return req

    # ── Field extractors ──────────────────────────────────────────────────────

    @staticmethod
    def _vessel_type(text: str) -> Optional[str]:
        raw = extract_with_patterns(text, P.VESSEL_TYPE_PATTERNS)
        if not raw:
            return None
        return P.CATEGORY_CANONICAL.get(raw.lower(), raw)

    @staticmethod
    def _vessel_size(text: str) -> Optional[float]:
        raw = extract_with_patterns(text, P.VESSEL_SIZE_PATTERNS)
        if not raw:
            return None
        return float(raw) * 1000

    def _route(self, text: str) -> tuple[Optional[str], Optional[str]]:
        groups = extract_with_patterns(text, P.ROUTE_PATTERNS, return_groups=True)
        if not groups or len(groups) < 2:
            return None, None
        return self._clean_port(groups[0]), self._clean_port(groups[1])

    @staticmethod
    def _laycan(text: str, now: datetime) -> tuple[Optional[datetime], Optional[datetime]]:
        match = first_match(text, P.LAYCAN_PATTERNS)
        if match is None:
            return None, None

        month = month_index(match.group("month"), default=now.month)
        start_day = int(match.group("start"))
        end_day = int(match.group("end"))
        try:
            start = datetime(now.year, month, start_day)
            end = datetime(now.year, month, end_day)
            if start < now:
                start = datetime(now.year + 1, month, start_day)
                end = datetime(now.year + 1, month, end_day)
        except ValueError as exc:
            log.debug("Laycan not extracted", reason=str(exc), month=month,
                      start=start_day, end=end_day)
            return None, None
        return start, end

    @staticmethod
    def _target_rate(text: str) -> Optional[float]:
        raw = extract_with_patterns(text, P.TARGET_RATE_PATTERNS)
        return float(raw) if raw else None

    @staticmethod
    def _age(text: str, current_year: int) -> tuple[Optional[int], Optional[int]]:
        """Returns (max_age, build_year); a 4-digit capture is a build year."""
        raw = extract_with_patterns(text, P.AGE_PATTERNS)
        if not raw:
            return None, None
        if len(raw) == 4:
            build_year = int(raw)
            return current_year - build_year, build_year
        max_age = int(raw)
        return max_age, current_year - max_age

    @staticmethod
    def _gear(text: str) -> Optional[str]:
        raw = extract_with_patterns(text, P.GEAR_PATTERNS)
        if not raw:
            return None
        lowered = raw.lower()
        if lowered == "gearless":
            return "gearless"
        if lowered == "geared" or any(tok in lowered for tok in ("crane", "gear", "grab")):
            return "geared"
        return None

    @staticmethod
    def _ice_class(text: str) -> Optional[str]:
        raw = extract_with_patterns(text, P.ICE_CLASS_PATTERNS)
        if not raw:
            return None
        return " ".join(raw.split()).upper()

    @staticmethod
    def _cargo_quantity(text: str) -> Optional[float]:
        raw = extract_with_patterns(text, P.CARGO_QUANTITY_PATTERNS)
        if not raw:
            return None
        cleaned = raw.replace(",", "").lower()
        multiplier = 1000 if "k" in cleaned else 1
        number = cleaned.replace("k", "").strip()
        try:
            return float(number) * multiplier
        except ValueError:
            return None

    # ── Helpers ───────────────────────────────────────────────────────────────

    @staticmethod
    def _clean(raw: Optional[str]) -> Optional[str]:
        if raw is None:
            return None
        value = " ".join(raw.split())
        return value or None

    @staticmethod
    def _clean_port(raw: Optional[str]) -> Optional[str]:
        """
        Trim, drop leading vessel-category words swept up with the port, and
        title-case names written all in one case ("SANTOS", "santos").
        """
        if not raw:
            return None
        words = raw.split()
        while len(words) > 1 and words[0].lower() in P.CATEGORY_CANONICAL:
            words = words[1:]
        name = " ".join(words)
        if name.islower() or name.isupper():
            name = name.title()
        return name or None

    @staticmethod
    def _confidence(req: CargoRequirement) -> dict[str, float]:
        scores: dict[str, float] = {}
        for name in req.populated_fields():
            key = CONFIDENCE_KEYS[name]
            scores[key] = P.FIELD_CONFIDENCE[key]
        return scores


_default_extractor = RequirementExtractor()


def extract_requirement(text: str, now: Optional[datetime] = None) -> CargoRequirement:
    """Module-level convenience wrapper around a shared RequirementExtractor."""
    return _default_extractor.extract(text, now=now)
