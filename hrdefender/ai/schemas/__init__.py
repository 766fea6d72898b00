"""AI Schemas package - Structured result schemas."""

from hrdefender.ai.schemas.results import (
    AnalysisResult,
    PatternResult,
    StrategyResult,
    RecommendedActions,
)

__all__ = [
    "AnalysisResult",
    "PatternResult",
    "StrategyResult",
    "RecommendedActions",
]
