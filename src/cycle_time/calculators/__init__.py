"""Calculators for release cycle time."""

from .cycle_time import CycleTimeCalculator, ReleaseSource, mean, summarize

__all__ = ["CycleTimeCalculator", "ReleaseSource", "mean", "summarize"]
