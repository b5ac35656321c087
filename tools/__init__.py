"""Utility helpers for simulator tooling."""

from .fuzz_scenarios import ScenarioFuzzer

__all__ = ["ScenarioFuzzer"]
