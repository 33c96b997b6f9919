"""
matching_engine/scorers.py
Per-dimension scorers for compatibility retrieval.

Every scorer is independent and stateless.  A scorer only runs when the
requirement specifies its dimension; it then either awards points out of its
maximum or hard-rejects the listing.  Absent requirement fields add nothing
to either side of the ratio.
"""
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Optional

from config.settings import settings
from requirement_extractor.models import CargoRequirement, VesselListing

# Points awarded per tier: (full, close, acceptable)
BANDED_POINTS: tuple[int, int, int] = (15, 12, 8)
GRADED_POINTS: tuple[int, int, int] = (10, 7, 5)
EXACT_POINTS = 10

# Relative tolerance per tier: (full, close, acceptable); beyond → reject
SIZE_BANDS: tuple[float, float, float] = (0.05, 0.10, 0.20)
RATE_BANDS: tuple[float, float, float] = (0.05, 0.10, 0.15)
QUANTITY_BANDS: tuple[float, float, float] = (0.05, 0.10, 0.15)

# Years over the maximum age per tier: (within, close, acceptable)
AGE_ALLOWANCE: tuple[int, int, int] = (0, 2, 5)

# Tokens shared by vessel categories, e.g. Supramax / Handymax
_CATEGORY_TOKENS = ("max", "size")


@dataclass(frozen=True)
class DimensionScore:
    dimension: str
    points: float
    max_points: float
    rejected: bool = False


def region_for_port(port: str) -> Optional[str]:
    """Region lookup for port-pair credit.  No region table exists yet."""
    return None


class _Base:
    """Shared base: requirement presence check and result construction."""

    dimension: str = ""
    requirement_field: str = ""
    listing_field: str = ""
    max_points: float = 0

    def applies(self, requirement: CargoRequirement) -> bool:
        value = getattr(requirement, self.requirement_field)
        if isinstance(value, str):
            return bool(value.strip())
        return value is not None

    def score(self, requirement: CargoRequirement, listing: VesselListing,
              current_year: int) -> DimensionScore:
        raise NotImplementedError

    def _award(self, points: float) -> DimensionScore:
        return DimensionScore(self.dimension, points, self.max_points)

    def _reject(self) -> DimensionScore:
        return DimensionScore(self.dimension, 0, self.max_points, rejected=True)

    def _values(self, requirement: CargoRequirement, listing: VesselListing) -> tuple[Any, Any]:
        return (
            getattr(requirement, self.requirement_field),
            getattr(listing, self.listing_field),
        )


class _GradedTextScorer(_Base):
    """Exact → full, substring either way → 70%, shared category token → 50%, else 0."""

    max_points = GRADED_POINTS[0]

    def score(self, requirement, listing, current_year):
        wanted, offered = self._values(requirement, listing)
        wanted = str(wanted).lower().strip()
        offered = (offered or "").lower().strip()

        if offered == wanted:
            return self._award(GRADED_POINTS[0])
        if offered and (offered in wanted or wanted in offered):
            return self._award(GRADED_POINTS[1])
        if any(tok in offered and tok in wanted for tok in _CATEGORY_TOKENS):
            return self._award(GRADED_POINTS[2])
        return self._award(0)


class _BandScorer(_Base):
    """Relative tolerance bands around the requested value; beyond the widest → reject."""

    max_points = BANDED_POINTS[0]
    bands: tuple[float, float, float] = (0.0, 0.0, 0.0)

    def score(self, requirement, listing, current_year):
        wanted, offered = self._values(requirement, listing)
        if offered is None:
            return self._reject()
        for tolerance, points in zip(self.bands, BANDED_POINTS):
            if wanted * (1 - tolerance) <= offered <= wanted * (1 + tolerance):
                return self._award(points)
        return self._reject()


class _PortScorer(_Base):
    """Exact → full, substring → 70%, same region → 50%.  Never rejects."""

    max_points = GRADED_POINTS[0]

    def score(self, requirement, listing, current_year):
        wanted, offered = self._values(requirement, listing)
        wanted_l = wanted.lower().strip()
        offered_l = (offered or "").lower().strip()

        if offered_l == wanted_l:
            return self._award(GRADED_POINTS[0])
        if offered_l and (offered_l in wanted_l or wanted_l in offered_l):
            return self._award(GRADED_POINTS[1])
        offered_region = region_for_port(offered or "")
        wanted_region = region_for_port(wanted)
        if offered_region and wanted_region and offered_region == wanted_region:
            return self._award(GRADED_POINTS[2])
        return self._award(0)


class _ExactScorer(_Base):
    """Case-insensitive equality or hard reject."""

    max_points = EXACT_POINTS

    def score(self, requirement, listing, current_year):
        wanted, offered = self._values(requirement, listing)
        if (offered or "").lower().strip() == str(wanted).lower().strip():
            return self._award(EXACT_POINTS)
        return self._reject()


# ─────────────────────────────────────────────────────────────────────────────
# Concrete dimensions
# ─────────────────────────────────────────────────────────────────────────────

class VesselTypeScorer(_GradedTextScorer):
    dimension = "vessel_type"
    requirement_field = "vessel_type"
    listing_field = "vessel_type"


class VesselSizeScorer(_BandScorer):
    dimension = "vessel_size"
    requirement_field = "vessel_size"
    listing_field = "dwt"
    bands = SIZE_BANDS


class LoadPortScorer(_PortScorer):
    dimension = "load_port"
    requirement_field = "load_port"
    listing_field = "load_port"


class DischargePortScorer(_PortScorer):
    dimension = "discharge_port"
    requirement_field = "discharge_port"
    listing_field = "discharge_port"


class LaycanScorer(_Base):
    """
    Listing window inside the requested window → full; any overlap → 80%;
    overlap only with the buffered window → ~53%; otherwise reject.
    Inverted windows never raise, they simply fail to overlap.
    """

    dimension = "laycan"
    max_points = BANDED_POINTS[0]

    def __init__(self, buffer_days: Optional[int] = None) -> None:
        self.buffer_days = settings.laycan_buffer_days if buffer_days is None else buffer_days

    def applies(self, requirement):
        return requirement.laycan_start is not None and requirement.laycan_end is not None

    def score(self, requirement, listing, current_year):
        if listing.laycan_start is None or listing.laycan_end is None:
            return self._reject()

        req_start, req_end = requirement.laycan_start, requirement.laycan_end
        offer_start, offer_end = listing.laycan_start, listing.laycan_end
        if req_start > req_end or offer_start > offer_end:
            return self._reject()
        buffer = timedelta(days=self.buffer_days)

        if offer_start >= req_start and offer_end <= req_end:
            return self._award(BANDED_POINTS[0])
        if not (offer_end < req_start or offer_start > req_end):
            return self._award(BANDED_POINTS[1])
        if not (offer_end < req_start - buffer or offer_start > req_end + buffer):
            return self._award(BANDED_POINTS[2])
        return self._reject()


class RateScorer(_BandScorer):
    dimension = "target_rate"
    requirement_field = "target_rate"
    listing_field = "freight_rate"
    bands = RATE_BANDS


class AgeScorer(_Base):
    dimension = "max_age"
    requirement_field = "max_age"
    max_points = GRADED_POINTS[0]

    def score(self, requirement, listing, current_year):
        age = listing.vessel_age(current_year)
        if age is None:
            return self._reject()
        for allowance, points in zip(AGE_ALLOWANCE, GRADED_POINTS):
            if age <= requirement.max_age + allowance:
                return self._award(points)
        return self._reject()


class GearScorer(_ExactScorer):
    dimension = "gear_requirement"
    requirement_field = "gear_requirement"
    listing_field = "gear"


class IceClassScorer(_ExactScorer):
    dimension = "ice_class_requirement"
    requirement_field = "ice_class_requirement"
    listing_field = "ice_class"


class FlagScorer(_ExactScorer):
    dimension = "flag_preference"
    requirement_field = "flag_preference"
    listing_field = "flag"


class SpecialClausesScorer(_ExactScorer):
    dimension = "special_clauses"
    requirement_field = "special_clauses"
    listing_field = "special_clauses"


class ChartererScorer(_ExactScorer):
    dimension = "charterer_preference"
    requirement_field = "charterer_preference"
    listing_field = "charterer"


class CargoQuantityScorer(_BandScorer):
    dimension = "cargo_quantity"
    requirement_field = "cargo_quantity"
    listing_field = "cargo_quantity"
    bands = QUANTITY_BANDS


class CargoTypeScorer(_GradedTextScorer):
    dimension = "cargo_type"
    requirement_field = "cargo_type"
    listing_field = "cargo_type"
