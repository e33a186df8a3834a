"""Concrete browser job types."""

from .resource_exploration import ResourceExploration

__all__ = ["ResourceExploration"]
