"""
Season Service Module

Keeps season records consistent with the episodes reported by the ingestion
pipeline and propagates monitoring intent from seasons down to their episodes.

A season exists exactly as long as at least one episode with the same
(series_id, season_number) exists: seasons are created when episodes for an
unseen season number are added or updated, and removed once the last episode of
a season is deleted or its series goes away.

Dependencies:
    - DatabaseInterface: Season store
    - EpisodeService: Per-season episode lookup and bulk monitored-flag updates
    - EventAggregator: Delivers episode and series lifecycle events
"""

import logging
from typing import Dict, Iterable, List
from services.db_implementations.db_interface import DatabaseInterface, SeasonNotFoundError
from services.episode_service import EpisodeService
from services.event_aggregator import EventAggregator
from models.season import Season
from models.episode import Episode
from models.events import EpisodesAdded, EpisodesUpdated, EpisodesDeleted, SeriesDeleted

logger = logging.getLogger(__name__)


def group_season_numbers(episodes: Iterable[Episode]) -> Dict[int, List[int]]:
    """
    Build a series_id -> distinct season numbers mapping, both in first-seen order.

    Args:
        episodes: Episodes, possibly spanning several series.

    Returns:
        dict: Season numbers present in the batch, keyed by series ID.
    """
    grouped: Dict[int, List[int]] = {}
    for episode in episodes:
        season_numbers = grouped.setdefault(episode.series_id, [])
        if episode.season_number not in season_numbers:
            season_numbers.append(episode.season_number)
    return grouped


class SeasonService:
    """
    Service class reconciling seasons with episodes and managing season monitoring.

    Holds no state of its own; every operation reads from and writes to the stores.

    Attributes:
        db: Season store
        episode_service: Episode collaborator used for propagation and orphan checks
    """

    def __init__(self, db: DatabaseInterface, episode_service: EpisodeService):
        self.db = db
        self.episode_service = episode_service

    def register_handlers(self, events: EventAggregator) -> None:
        """Subscribe the reconciliation handlers to episode and series events."""
        events.subscribe(EpisodesAdded, self.handle_episodes_added)
        events.subscribe(EpisodesUpdated, self.handle_episodes_updated)
        events.subscribe(EpisodesDeleted, self.handle_episodes_deleted)
        events.subscribe_async(SeriesDeleted, self.handle_series_deleted)

    def set_monitored(self, series_id: int, season_number: int, monitored: bool) -> None:
        """
        Set the monitored flag on a season and on all of its episodes.

        Args:
            series_id: ID of the series.
            season_number: Season number within the series.
            monitored: New monitored flag.

        Raises:
            SeasonNotFoundError: If the series has no such season. Nothing is written.
        """
        season = self.db.get_season(series_id, season_number)
        if season is None:
            raise SeasonNotFoundError(f"Season not found: Series:{series_id} Season:{season_number}")

        logger.debug(f"Setting monitored flag on Series:{series_id} Season:{season_number} to {monitored}")

        season.monitored = monitored
        self.episode_service.set_episode_monitored_by_season(series_id, season_number, monitored)
        self.db.update_season(season)

        logger.info(f"Monitored flag for Series:{series_id} Season:{season_number} successfully set to {monitored}")

    def set_season_pass(self, series_id: int, season_number: int) -> List[Season]:
        """
        Monitor every season from season_number onwards and unmonitor every season before it.

        The threshold season itself is monitored. Each season's flag is propagated
        to its episodes and all seasons are persisted in one bulk update.

        Args:
            series_id: ID of the series.
            season_number: First season to monitor.

        Returns:
            List[Season]: All seasons of the series, updated, in store order.
        """
        logger.debug(f"Setting up Season Pass for Series:{series_id} starting with season: {season_number}")

        seasons = self.get_seasons_by_series(series_id)

        for season in seasons:
            monitored = season.season_number >= season_number
            logger.debug(f"Setting monitored flag on Series:{series_id} Season:{season.season_number} to {monitored}")
            season.monitored = monitored
            self.episode_service.set_episode_monitored_by_season(series_id, season.season_number, monitored)

        self.db.update_seasons(seasons)
        logger.info(f"Season Pass set for Series:{series_id} starting with season: {season_number}")

        return seasons

    def get_seasons_by_series(self, series_id: int) -> List[Season]:
        return self.db.get_seasons_by_series(series_id)

    def get_all_seasons(self) -> List[Season]:
        return self.db.get_all_seasons()

    def get(self, season_id: int) -> Season:
        """
        Get a season by its database ID.

        Raises:
            SeasonNotFoundError: If no season has this ID.
        """
        season = self.db.get_season_by_id(season_id)
        if season is None:
            raise SeasonNotFoundError(f"Season not found: id={season_id}")
        return season

    def _ensure_seasons(self, episodes: Iterable[Episode]) -> None:
        """Create a monitored season for every season number in the batch that is not tracked yet."""
        for series_id, season_numbers in group_season_numbers(episodes).items():
            existing_seasons = self.db.get_season_numbers(series_id)
            missing_seasons = [number for number in season_numbers if number not in existing_seasons]

            if not missing_seasons:
                logger.debug(f"All seasons {season_numbers} already tracked for Series:{series_id}")
                continue

            seasons_to_add = [
                Season(series_id=series_id, season_number=number, monitored=True)
                for number in missing_seasons
            ]
            self.db.add_seasons(seasons_to_add)
            logger.info(f"Added seasons {missing_seasons} for Series:{series_id}")

    def _remove_orphaned_seasons(self, episodes: Iterable[Episode]) -> None:
        """Delete the seasons of the batch that no longer have any episode."""
        for series_id, deleted_episodes_seasons in group_season_numbers(episodes).items():
            seasons = {season.season_number: season for season in self.db.get_seasons_by_series(series_id)}
            orphaned = []

            for season_number in deleted_episodes_seasons:
                if self.episode_service.get_episodes_by_season(series_id, season_number):
                    continue

                season = seasons.get(season_number)
                if season is None:
                    logger.debug(f"Series:{series_id} Season:{season_number} already removed")
                    continue

                orphaned.append(season)

            if orphaned:
                self.db.delete_seasons(orphaned)
                logger.info(f"Removed orphaned seasons {[s.season_number for s in orphaned]} for Series:{series_id}")

    def handle_episodes_added(self, event: EpisodesAdded) -> None:
        self._ensure_seasons(event.episodes)

    def handle_episodes_updated(self, event: EpisodesUpdated) -> None:
        # An update may move episodes to a season number that is not tracked yet
        self._ensure_seasons(event.episodes)

    def handle_episodes_deleted(self, event: EpisodesDeleted) -> None:
        self._remove_orphaned_seasons(event.episodes)

    def handle_series_deleted(self, event: SeriesDeleted) -> None:
        seasons = self.get_seasons_by_series(event.series.id)
        self.db.delete_seasons(seasons)
        logger.info(f"Deleted {len(seasons)} seasons of deleted series {event.series.title} (id={event.series.id})")
