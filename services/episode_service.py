"""
Episode Service Module

Owns the episode lifecycle for SeasonKeeper. Every persisted batch of added,
updated or deleted episodes is announced on the EventAggregator so that season
records can be reconciled.
"""

import logging
from typing import List
from services.db_implementations.db_interface import DatabaseInterface, EpisodeNotFoundError
from services.event_aggregator import EventAggregator
from models.episode import Episode
from models.events import EpisodesAdded, EpisodesUpdated, EpisodesDeleted, SeriesDeleted

logger = logging.getLogger(__name__)


class EpisodeService:
    """
    Service class for episode storage and episode lifecycle events.

    Attributes:
        db: Episode store
        events: Aggregator the episode events are published on
    """

    def __init__(self, db: DatabaseInterface, events: EventAggregator):
        self.db = db
        self.events = events

    def register_handlers(self, events: EventAggregator) -> None:
        events.subscribe_async(SeriesDeleted, self.handle_series_deleted)

    def add_episodes(self, episodes: List[Episode]) -> List[Episode]:
        """
        Persist new episodes and publish EpisodesAdded.

        Args:
            episodes: Episodes reported by the ingestion pipeline.

        Returns:
            List[Episode]: The stored episodes carrying their database IDs.
        """
        if not episodes:
            logger.debug("No episodes to add")
            return []

        stored = self.db.add_episodes(episodes)
        logger.info(f"Added {len(stored)} episodes")
        self.events.publish(EpisodesAdded(episodes=stored))
        return stored

    def update_episodes(self, episodes: List[Episode]) -> List[Episode]:
        """
        Persist changed episodes (including season reassignments) and publish EpisodesUpdated.

        Only the episodes whose row still exists are announced; updates for episodes
        deleted in the meantime are dropped.

        Returns:
            List[Episode]: The episodes that were actually updated.
        """
        if not episodes:
            logger.debug("No episodes to update")
            return []

        updated = self.db.update_episodes(episodes)
        if len(updated) < len(episodes):
            logger.debug(f"Skipped {len(episodes) - len(updated)} episodes that are no longer stored")
        if not updated:
            return []

        logger.info(f"Updated {len(updated)} episodes")
        self.events.publish(EpisodesUpdated(episodes=updated))
        return updated

    def delete_episodes(self, episodes: List[Episode]) -> None:
        """Delete episodes and publish EpisodesDeleted."""
        if not episodes:
            logger.debug("No episodes to delete")
            return

        self.db.delete_episodes(episodes)
        logger.info(f"Deleted {len(episodes)} episodes")
        self.events.publish(EpisodesDeleted(episodes=episodes))

    def get_episode(self, episode_id: int) -> Episode:
        """
        Get an episode by its database ID.

        Raises:
            EpisodeNotFoundError: If no episode has this ID.
        """
        episode = self.db.get_episode_by_id(episode_id)
        if episode is None:
            raise EpisodeNotFoundError(f"Episode not found: id={episode_id}")
        return episode

    def get_episodes_by_series(self, series_id: int) -> List[Episode]:
        return self.db.get_episodes_by_series(series_id)

    def get_episodes_by_season(self, series_id: int, season_number: int) -> List[Episode]:
        return self.db.get_episodes_by_season(series_id, season_number)

    def set_episode_monitored_by_season(self, series_id: int, season_number: int, monitored: bool) -> None:
        logger.debug(f"Setting episodes of Series:{series_id} Season:{season_number} to monitored={monitored}")
        self.db.set_episode_monitored_by_season(series_id, season_number, monitored)

    def handle_series_deleted(self, event: SeriesDeleted) -> None:
        # Seasons are removed by the season service's own handler, so no EpisodesDeleted here
        self.db.delete_episodes_by_series(event.series.id)
