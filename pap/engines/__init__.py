"""Core business-logic engines."""

from pap.engines import heuristic_analyzer

__all__ = ["heuristic_analyzer"]
