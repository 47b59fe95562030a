"""Application services coordinating domain logic with external catalogs."""

from .matcher import TrackMatcher

__all__ = ["TrackMatcher"]
