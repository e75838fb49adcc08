"""Metrics for continuity analysis and gap filling."""

from .core import record_enrichment_call, record_fill_summary
from .registry import MetricsClient

__all__ = ["MetricsClient", "record_enrichment_call", "record_fill_summary"]
