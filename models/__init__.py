"""
Models package for SeasonKeeper.

This package contains Pydantic-based models for series, seasons, episodes, and catalog events.
"""

from .series import Series
from .season import Season
from .episode import Episode
from .events import EpisodesAdded, EpisodesUpdated, EpisodesDeleted, SeriesDeleted

__all__ = ["Series", "Season", "Episode", "EpisodesAdded", "EpisodesUpdated", "EpisodesDeleted", "SeriesDeleted"]
