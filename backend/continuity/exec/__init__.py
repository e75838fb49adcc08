"""Enrichment execution with bounded timeouts."""

from .enrichment import EnrichmentExecutor
from .types import EnrichmentProvider, EnrichmentResult

__all__ = ["EnrichmentExecutor", "EnrichmentProvider", "EnrichmentResult"]
