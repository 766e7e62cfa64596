# scoring/health_scan.py — Business Health Scan scorer
# - 5 sub-scores (finance / sales / ops / founder dependency / growth)
# - total → band, q13 hard stop, q1 short-history flag
# - band + flags → one message + one CTA
from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Tuple


class Band(str, Enum):
    BAND_1 = "BAND_1"
    BAND_2 = "BAND_2"
    BAND_3 = "BAND_3"
    BAND_4 = "BAND_4"


NO_USE_OF_FUNDS_PLAN = "NO_USE_OF_FUNDS_PLAN"
SHORT_HISTORY = "SHORT_HISTORY"

# CTA destination keys
SOLUTIONS = "solutions"
FINANCE = "finance_clarity"
READINESS = "funding_readiness"
SESSION = "strategy_session"

DEFAULT_CTA_URLS: Mapping[str, str] = MappingProxyType({
    SOLUTIONS: "https://boltzmenn.com/solutions",
    FINANCE:   "https://boltzmenn.com/finance-clarity",
    READINESS: "https://boltzmenn.com/funding-readiness",
    SESSION:   "https://boltzmenn.com/strategy-session",
})

# ─────────────────────────────────────────────────────────────
# Point tables (label → points). Missing label = 0.
# ─────────────────────────────────────────────────────────────
POINTS: Mapping[str, Mapping[str, int]] = MappingProxyType({
    # Finance & cash flow /30
    "q3": MappingProxyType({"Yes, clearly": 10, "Rough idea": 5, "Not really": 2, "No": 0}),
    "q4": MappingProxyType({
        "Proper accounting software": 10,
        "Spreadsheets": 6,
        "Bank alerts only": 2,
        "I don't track consistently": 0,
    }),
    "q5": MappingProxyType({"Yes": 10, "Maybe": 5, "No": 0}),
    # Sales consistency /25
    "q6": MappingProxyType({
        "Very predictable": 10,
        "Somewhat predictable": 6,
        "Inconsistent": 2,
        "Completely unpredictable": 0,
    }),
    "q7": MappingProxyType({
        "Repeat customers": 5,
        "Referrals": 4,
        "Marketing campaigns": 3,
        "Walk-ins / random": 1,
    }),
    "q8": MappingProxyType({
        "Yes, documented": 10,
        "Informal but consistent": 6,
        "In my head": 2,
        "No": 0,
    }),
    # Operations & team /20
    "q9": MappingProxyType({
        "Can run without me": 10,
        "Needs me occasionally": 6,
        "Needs me daily": 2,
        "Completely depends on me": 0,
    }),
    "q10": MappingProxyType({"Yes": 5, "Somewhat": 3, "No": 0}),
    "q11": MappingProxyType({"Rarely": 5, "Sometimes": 3, "Often": 0}),
    # Growth intent /10
    "q12": MappingProxyType({"Yes": 5, "Maybe": 3, "No": 1}),
    "q13": MappingProxyType({"Yes, clearly": 5, "Rough idea": 3, "No": 0}),
})

MAX_SCORES: Mapping[str, int] = MappingProxyType({
    "financial_clarity": 30,
    "sales_consistency": 25,
    "operations_and_team": 20,
    "founder_dependency_derived": 15,
    "growth_intent": 10,
})

# (upper bound inclusive, band); anything above the last bound is BAND_4
BAND_THRESHOLDS: Tuple[Tuple[int, Band], ...] = (
    (39, Band.BAND_1),
    (59, Band.BAND_2),
    (74, Band.BAND_3),
)


def _points(answers: Mapping[str, str], qid: str) -> int:
    return POINTS[qid].get(answers.get(qid, ""), 0)


def score_financial_clarity(a: Mapping[str, str]) -> int:
    return _points(a, "q3") + _points(a, "q4") + _points(a, "q5")


def score_sales_consistency(a: Mapping[str, str]) -> int:
    return _points(a, "q6") + _points(a, "q7") + _points(a, "q8")


def score_operations_and_team(a: Mapping[str, str]) -> int:
    return _points(a, "q9") + _points(a, "q10") + _points(a, "q11")


def score_founder_dependency_derived(a: Mapping[str, str]) -> int:
    """
    q9(의존도) × q11(누락 빈도) 조합 보너스. 위에서부터 첫 매칭이 이긴다.
    """
    q9 = a.get("q9", "")
    q11 = a.get("q11", "")

    low_dep = q9 == "Can run without me"
    med_dep = q9 == "Needs me occasionally"
    high_dep = q9 in ("Needs me daily", "Completely depends on me")

    rare = q11 == "Rarely"
    some = q11 == "Sometimes"
    often = q11 == "Often"

    if low_dep and rare:
        return 15
    if (med_dep and some) or (med_dep and rare) or (low_dep and some):
        return 8
    if high_dep:
        return 0
    if (med_dep and often) or (low_dep and often):
        return 0
    return 0


def score_growth_intent(a: Mapping[str, str]) -> int:
    return _points(a, "q12") + _points(a, "q13")


@dataclass(frozen=True)
class ScoreComponents:
    financial_clarity: int
    sales_consistency: int
    operations_and_team: int
    founder_dependency_derived: int
    growth_intent: int

    @property
    def total(self) -> int:
        return (self.financial_clarity + self.sales_consistency + self.operations_and_team
                + self.founder_dependency_derived + self.growth_intent)

    def as_dict(self) -> Dict[str, int]:
        return {k: getattr(self, k) for k in MAX_SCORES}


@dataclass(frozen=True)
class RecommendationResult:
    total: int
    band: Band
    message: str
    cta_text: str
    cta_url: str
    components: ScoreComponents
    hard_stops: Tuple[str, ...] = field(default_factory=tuple)
    flags: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def hard_stop(self) -> bool:
        return bool(self.hard_stops)


def score_components(answers: Mapping[str, str]) -> ScoreComponents:
    return ScoreComponents(
        financial_clarity=score_financial_clarity(answers),
        sales_consistency=score_sales_consistency(answers),
        operations_and_team=score_operations_and_team(answers),
        founder_dependency_derived=score_founder_dependency_derived(answers),
        growth_intent=score_growth_intent(answers),
    )


def band_for_total(total: int) -> Band:
    for hi, band in BAND_THRESHOLDS:
        if total <= hi:
            return band
    return Band.BAND_4


def hard_stops_for(answers: Mapping[str, str]) -> Tuple[str, ...]:
    stops = []
    if answers.get("q13") == "No":
        stops.append(NO_USE_OF_FUNDS_PLAN)
    return tuple(stops)


def flags_for(answers: Mapping[str, str]) -> Tuple[str, ...]:
    flags = []
    if answers.get("q1") == "Less than 1 year":
        flags.append(SHORT_HISTORY)
    return tuple(flags)


# ─────────────────────────────────────────────────────────────
# Routing: (message, CTA text, CTA destination key)
# ─────────────────────────────────────────────────────────────
ROUTE_HARD_STOP = (
    "Taking funding right now would put your business under pressure. Financial clarity comes first.",
    "Prepare for Funding →",
    FINANCE,
)
ROUTE_BY_BAND = {
    Band.BAND_1: (
        "Your next step isn’t funding or scale. It’s clarity and structure.",
        "Book a Strategy Session →",
        SESSION,
    ),
    Band.BAND_2: (
        "Your business isn’t broken — but it is unstructured. "
        "Fixing systems should come before growth or funding.",
        "See How We Fix This →",
        SOLUTIONS,
    ),
    Band.BAND_3: (
        "Your business shows signs of readiness, pending deeper checks.",
        "Run the Funding Readiness Check →",
        READINESS,
    ),
}
ROUTE_BAND_4_SHORT_HISTORY = (
    "Your business looks strong, but we need a deeper readiness check before any capital conversation.",
    "Run the Funding Readiness Check →",
    READINESS,
)
# No dedicated capital-assessment URL yet; shares the readiness destination.
ROUTE_BAND_4 = (
    "Your business may be ready for structured funding — pending a deeper assessment.",
    "Start the Capital Assessment →",
    READINESS,
)


def _route(band: Band, hard_stops: Tuple[str, ...], flags: Tuple[str, ...]) -> Tuple[str, str, str]:
    if NO_USE_OF_FUNDS_PLAN in hard_stops:
        return ROUTE_HARD_STOP
    if band in ROUTE_BY_BAND:
        return ROUTE_BY_BAND[band]
    if SHORT_HISTORY in flags:
        return ROUTE_BAND_4_SHORT_HISTORY
    return ROUTE_BAND_4


def compute_result(answers: Mapping[str, str],
                   cta_urls: Optional[Mapping[str, str]] = None) -> RecommendationResult:
    """
    답변 스냅샷 → RecommendationResult. 순수 함수, 예외 없음.
    cta_urls 에 없는 목적지는 DEFAULT_CTA_URLS 로 채운다.
    """
    urls = dict(DEFAULT_CTA_URLS)
    if cta_urls:
        urls.update({k: v for k, v in cta_urls.items() if v})

    components = score_components(answers)
    total = components.total
    band = band_for_total(total)
    stops = hard_stops_for(answers)
    flags = flags_for(answers)

    message, cta_text, dest = _route(band, stops, flags)
    return RecommendationResult(
        total=total,
        band=band,
        message=message,
        cta_text=cta_text,
        cta_url=urls[dest],
        components=components,
        hard_stops=stops,
        flags=flags,
    )
