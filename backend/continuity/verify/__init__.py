"""Itinerary review."""

from .review import build_summary, review_itinerary

__all__ = ["build_summary", "review_itinerary"]
