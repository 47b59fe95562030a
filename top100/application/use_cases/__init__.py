"""Application use cases."""

from .generate_rankings import (
    GenerateRankingsCommand,
    GenerateRankingsUseCase,
    RankingRunResult,
)

__all__ = [
    "GenerateRankingsCommand",
    "GenerateRankingsUseCase",
    "RankingRunResult",
]
