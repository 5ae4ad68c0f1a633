"""Narrative commentary for valuation results, with a local fallback."""

from __future__ import annotations

import hashlib
import json
import logging
import math
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Protocol

from pydantic import BaseModel, ConfigDict, Field

from ..integration.advisor_client import AdvisorClient, AdvisorResponse

LOGGER = logging.getLogger(__name__)

CACHE_KEY_PREFIX = "capwise_ai_cache_"


class Verdict(str, Enum):
    ACCEPT = "Recommended"
    NEEDS_OPTIMIZATION = "Needs optimisation"
    REJECT = "Not recommended"


class NarrativeSource(str, Enum):
    CACHE = "cache"
    ADVISOR = "advisor"
    FALLBACK = "fallback"


class AdvisorPayload(BaseModel):
    """Structured inputs handed to the text-generation collaborator."""

    model_config = ConfigDict(frozen=True)

    project_name: str = Field(..., description="Display name of the project")
    initial_investment: float = Field(..., description="Year-0 outlay (positive amount)")
    discount_rate: float = Field(..., description="Effective discount rate applied")
    npv: float
    irr: float = Field(..., description="Internal rate of return; NaN when unavailable")


class Narrative(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str
    source: NarrativeSource
    error: Optional[str] = None


class AdvisorCache(Protocol):
    """Key/value store owned by the caller."""

    def get(self, key: str) -> Optional[str]:
        ...

    def put(self, key: str, value: str) -> None:
        ...


class InMemoryAdvisorCache:
    """Process-local cache; entries live as long as the instance."""

    def __init__(self) -> None:
        self._entries: Dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self._entries.get(key)

    def put(self, key: str, value: str) -> None:
        self._entries[key] = value

    def __len__(self) -> int:
        return len(self._entries)


def _canonical(value: Any) -> Any:
    if isinstance(value, float) and not math.isfinite(value):
        return repr(value)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Mapping):
        return {str(k): _canonical(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_canonical(v) for v in value]
    return value


def make_cache_key(params: Mapping[str, Any]) -> str:
    """Order-independent key derived from the input parameters."""
    canonical = json.dumps(_canonical(params), sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    digest = hashlib.sha256(canonical.encode("utf-8")).hexdigest()
    return CACHE_KEY_PREFIX + digest


def verdict(npv: float, irr: float, rate: float) -> Verdict:
    good_npv = npv > 0
    good_irr = math.isfinite(irr) and irr > rate
    if good_npv and good_irr:
        return Verdict.ACCEPT
    if good_npv or good_irr:
        return Verdict.NEEDS_OPTIMIZATION
    return Verdict.REJECT


def build_prompt(payload: AdvisorPayload) -> str:
    return (
        "You are an engineering economics consultant. "
        "Analyse this project in plain language:\n\n"
        f"Project name: {payload.project_name}\n"
        f"Initial investment: {payload.initial_investment}\n"
        f"Effective discount rate: {payload.discount_rate}\n"
        f"NPV: {payload.npv}\n"
        f"IRR: {payload.irr}\n\n"
        "1) Is it worth doing?\n"
        "2) Why?\n"
        "3) Give two suggestions to improve the project.\n"
    )


def fallback_analysis(payload: AdvisorPayload) -> str:
    """Deterministic commentary built only from the payload."""
    result = verdict(payload.npv, payload.irr, payload.discount_rate)
    rate_pct = payload.discount_rate * 100
    if payload.npv > 0:
        npv_reason = (
            f"NPV is positive (about {payload.npv:,.0f}): the present value of "
            "net inflows exceeds the initial outlay."
        )
    else:
        npv_reason = (
            f"NPV is negative (about {payload.npv:,.0f}): at the current discount "
            "rate the project does not pay for itself."
        )
    if not math.isfinite(payload.irr):
        irr_reason = "IRR could not be computed for this cash flow shape."
    elif payload.irr > payload.discount_rate:
        irr_reason = f"IRR is about {payload.irr * 100:.2f}%, above the {rate_pct:.2f}% discount rate."
    else:
        irr_reason = f"IRR is about {payload.irr * 100:.2f}%, below the {rate_pct:.2f}% discount rate."

    tips = [
        "If NPV is negative: cut the initial cost, raise annual revenue, or reduce "
        "project risk so a lower discount rate applies.",
        "Take the pessimistic scenario seriously: a project that fails on a 10% "
        "revenue drop is risky.",
        "To improve IRR: shorten the payback period by bringing revenue forward.",
    ]
    lines = [
        f"Internal analysis (no advisor) for project '{payload.project_name}'",
        "",
        f"Verdict: {result.value}",
        "",
        "Reasons:",
        f"- {npv_reason}",
        f"- {irr_reason}",
        "",
        "Suggestions:",
    ]
    lines.extend(f"- {tip}" for tip in tips)
    return "\n".join(lines)


class AdvisorService:
    """Resolve commentary from the cache, the advisor, or the local fallback."""

    def __init__(self, client: Optional[AdvisorClient] = None, cache: Optional[AdvisorCache] = None) -> None:
        self.client = client
        self.cache = cache

    def analyse(self, payload: AdvisorPayload, cache_params: Optional[Mapping[str, Any]] = None) -> Narrative:
        key = make_cache_key(cache_params if cache_params is not None else payload.model_dump())
        if self.cache is not None:
            cached = self.cache.get(key)
            if cached is not None:
                LOGGER.debug("Advisor cache hit for %s.", key)
                return Narrative(text=cached, source=NarrativeSource.CACHE)

        response: Optional[AdvisorResponse] = None
        if self.client is not None:
            response = self.client.generate(build_prompt(payload))
            if response.ok:
                if self.cache is not None:
                    self.cache.put(key, response.text)
                return Narrative(text=response.text, source=NarrativeSource.ADVISOR)
            LOGGER.warning("Advisor unavailable (%s); using local analysis.", response.error)

        return Narrative(
            text=fallback_analysis(payload),
            source=NarrativeSource.FALLBACK,
            error=response.error if response is not None else None,
        )


__all__ = [
    "AdvisorPayload",
    "AdvisorCache",
    "AdvisorService",
    "InMemoryAdvisorCache",
    "Narrative",
    "NarrativeSource",
    "Verdict",
    "build_prompt",
    "fallback_analysis",
    "make_cache_key",
    "verdict",
]
