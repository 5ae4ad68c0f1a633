"""Probability x impact risk scoring and mitigation ranking."""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence, Tuple

from ..models.risk import MitigationPlan, RiskAssessment, RiskItem, RiskLevel, ScoredRisk

LOW_THRESHOLD = 6
MEDIUM_THRESHOLD = 14
MATRIX_SIZE = 3
DEFAULT_TOP_K = 2

DEFAULT_RISKS: Tuple[Tuple[str, int, int], ...] = (
    ("Market risk", 3, 4),
    ("Financial risk", 3, 3),
    ("Funding risk", 2, 4),
    ("Technology risk", 2, 3),
    ("Legal/regulatory risk", 2, 3),
    ("Execution risk", 3, 4),
)

MITIGATION_SUGGESTIONS: Dict[str, List[str]] = {
    "Market risk": [
        "Diversify target markets",
        "Secure pre-sales or long-term offtake contracts",
        "Track competitors and price dynamically",
    ],
    "Financial risk": [
        "Tighten cash flow control",
        "Hold an emergency liquidity reserve",
        "Reduce fixed costs",
    ],
    "Funding risk": [
        "Prepare an alternative funding plan",
        "Negotiate with several funding sources",
        "Phase the project",
    ],
    "Technology risk": [
        "Build a rapid prototype",
        "Run a pilot test",
        "Line up backup technical support or suppliers",
    ],
    "Legal/regulatory risk": [
        "Have contracts reviewed by legal counsel",
        "Monitor regulatory changes",
        "Obtain required permits early",
    ],
    "Execution risk": [
        "Maintain a detailed schedule",
        "Enforce quality control",
        "Set KPIs for contractors",
    ],
}
GENERIC_SUGGESTIONS = ["Share or transfer the risk", "Monitor continuously", "Use clear contracts"]


def default_risks() -> List[RiskItem]:
    """Fresh copies of the default risk register."""
    return [RiskItem(name=name, probability=p, impact=i) for name, p, i in DEFAULT_RISKS]


def classify(score: float) -> RiskLevel:
    if score <= LOW_THRESHOLD:
        return RiskLevel.LOW
    if score <= MEDIUM_THRESHOLD:
        return RiskLevel.MEDIUM
    return RiskLevel.HIGH


def score_item(item: RiskItem) -> Tuple[int, RiskLevel]:
    """Return ``(probability * impact, level)`` for a single item."""
    score = item.probability * item.impact
    return score, classify(score)


def aggregate(items: Sequence[RiskItem]) -> Tuple[Optional[float], Optional[RiskLevel]]:
    """Mean item score and its level; ``(None, None)`` when there are no items."""
    if not items:
        return None, None
    project_score = sum(score_item(item)[0] for item in items) / len(items)
    return project_score, classify(project_score)


def bucket(rating: int) -> int:
    """Map a 1..5 rating onto the low/medium/high matrix axis."""
    if rating <= 2:
        return 0
    if rating == 3:
        return 1
    return 2


def build_matrix(items: Sequence[RiskItem]) -> List[List[List[str]]]:
    """3x3 grid indexed ``[probability_bucket][impact_bucket]`` of item names."""
    cells: List[List[List[str]]] = [[[] for _ in range(MATRIX_SIZE)] for _ in range(MATRIX_SIZE)]
    for item in items:
        cells[bucket(item.probability)][bucket(item.impact)].append(item.name)
    return cells


def rank_mitigations(items: Sequence[RiskItem], top_k: int = DEFAULT_TOP_K) -> List[MitigationPlan]:
    """Highest scoring items first (ties keep input order) with suggested actions."""
    ranked = sorted(items, key=lambda item: score_item(item)[0], reverse=True)
    plans: List[MitigationPlan] = []
    for item in ranked[: max(int(top_k), 0)]:
        score, level = score_item(item)
        suggestions = MITIGATION_SUGGESTIONS.get(item.name, GENERIC_SUGGESTIONS)
        plans.append(MitigationPlan(name=item.name, score=score, level=level, suggestions=list(suggestions)))
    return plans


def assess(items: Sequence[RiskItem], top_k: int = DEFAULT_TOP_K) -> RiskAssessment:
    """Score every item and bundle the matrix and mitigation ranking."""
    scored = []
    for item in items:
        score, level = score_item(item)
        scored.append(ScoredRisk(name=item.name, score=score, level=level))
    project_score, project_level = aggregate(items)
    return RiskAssessment(
        items=scored,
        project_score=project_score,
        project_level=project_level,
        matrix=build_matrix(items),
        mitigations=rank_mitigations(items, top_k),
    )


__all__ = [
    "DEFAULT_RISKS",
    "MITIGATION_SUGGESTIONS",
    "GENERIC_SUGGESTIONS",
    "default_risks",
    "classify",
    "score_item",
    "aggregate",
    "bucket",
    "build_matrix",
    "rank_mitigations",
    "assess",
]
