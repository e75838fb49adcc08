"""Segment dependency graph."""

from .dependency_graph import DependencyGraph

__all__ = ["DependencyGraph"]
