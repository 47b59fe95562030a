"""Leaderboard ordering, competition ranking and eligibility."""

from .algorithms import (
    DEFAULT_TOP_N,
    RankingEngine,
    assign_competition_ranks,
    sort_for_ranking,
)
from .eligibility import UploadWindow, filter_by_upload_window, parse_label_month

__all__ = [
    "DEFAULT_TOP_N",
    "RankingEngine",
    "UploadWindow",
    "assign_competition_ranks",
    "filter_by_upload_window",
    "parse_label_month",
    "sort_for_ranking",
]
