"""Coordination services: fallback, batching, revisions and derived metrics."""

from marketlens.core.services.batch import BatchResult, BatchScheduler
from marketlens.core.services.correlation import QuoteMetrics, correlation_matrix, proxy_correlation
from marketlens.core.services.fallback import (
    DEFAULT_FALLBACK_TABLE,
    FallbackCoordinator,
    FallbackTable,
    SubstituteDescriptor,
)
from marketlens.core.services.revisions import RevisionAnalyzer
from marketlens.core.services.screening import ScreeningCriteria

__all__ = [
    "BatchResult",
    "BatchScheduler",
    "DEFAULT_FALLBACK_TABLE",
    "FallbackCoordinator",
    "FallbackTable",
    "QuoteMetrics",
    "RevisionAnalyzer",
    "ScreeningCriteria",
    "SubstituteDescriptor",
    "correlation_matrix",
    "proxy_correlation",
]
