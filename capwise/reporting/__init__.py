"""Narrative reporting for valuation results."""

from .narrative import AdvisorPayload, AdvisorService, InMemoryAdvisorCache, fallback_analysis

__all__ = ["AdvisorPayload", "AdvisorService", "InMemoryAdvisorCache", "fallback_analysis"]
