"""
Catalog lifecycle events published on the EventAggregator.

Episode events are produced by the episode service whenever the ingestion pipeline
adds, updates or deletes episodes. SeriesDeleted is produced by the series service
once the series row is gone.
"""
from typing import List
from pydantic import BaseModel, ConfigDict, Field
from models.episode import Episode
from models.series import Series


class EpisodeBatchEvent(BaseModel):
    """Base class for events carrying a batch of episodes, possibly spanning several series."""

    model_config = ConfigDict(frozen=True)

    episodes: List[Episode] = Field(default_factory=list)

    @property
    def partition_key(self) -> int:
        return self.episodes[0].series_id if self.episodes else 0


class EpisodesAdded(EpisodeBatchEvent):
    pass


class EpisodesUpdated(EpisodeBatchEvent):
    pass


class EpisodesDeleted(EpisodeBatchEvent):
    pass


class SeriesDeleted(BaseModel):
    model_config = ConfigDict(frozen=True)

    series: Series

    @property
    def partition_key(self) -> int:
        return self.series.id or 0
