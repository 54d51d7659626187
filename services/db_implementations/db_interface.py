from abc import ABC, abstractmethod
from typing import List, Optional, Set
import logging
from models.series import Series
from models.season import Season
from models.episode import Episode

logger = logging.getLogger(__name__)


class RecordNotFoundError(LookupError):
    """Raised when a requested record does not exist in the database."""


class SeriesNotFoundError(RecordNotFoundError):
    pass


class SeasonNotFoundError(RecordNotFoundError):
    pass


class EpisodeNotFoundError(RecordNotFoundError):
    pass


class DatabaseInterface(ABC):
    """
    Abstract base class defining the interface for database operations in SeasonKeeper.

    All subclasses must implement methods for initializing the database and for storing
    series, seasons and episodes. Lookups return None (or an empty collection) for absent
    records; raising RecordNotFoundError is left to the services.

    Methods:
        initialize(): Initialize the database schema.
        is_read_only(): Check if database is in read-only mode.
        add_series(series): Add a series and return it with its ID.
        get_series_by_id(series_id): Get a series by its database ID.
        get_all_series(): Get all series.
        delete_series(series_id): Delete a series row.
        get_season(series_id, season_number): Get a season by its natural key.
        get_season_by_id(season_id): Get a season by its database ID.
        get_seasons_by_series(series_id): Get all seasons of a series.
        get_season_numbers(series_id): Get the tracked season numbers of a series.
        get_all_seasons(): Get all seasons.
        add_seasons(seasons): Insert seasons, ignoring keys that already exist.
        update_season(season): Persist one season.
        update_seasons(seasons): Persist many seasons.
        delete_season(season): Delete one season.
        delete_seasons(seasons): Delete many seasons.
        add_episodes(episodes): Insert episodes and return them with IDs.
        update_episodes(episodes): Persist many episodes, returning those still stored.
        delete_episodes(episodes): Delete many episodes.
        get_episode_by_id(episode_id): Get an episode by its database ID.
        get_episodes_by_series(series_id): Get all episodes of a series.
        get_episodes_by_season(series_id, season_number): Get the episodes of a season.
        set_episode_monitored_by_season(series_id, season_number, monitored): Bulk flag update.
        delete_episodes_by_series(series_id): Delete every episode of a series.
    """

    @abstractmethod
    def initialize(self) -> None:
        """Initialize the database schema."""
        pass

    @abstractmethod
    def is_read_only(self) -> bool:
        """Check if database is in read-only mode."""
        pass

    # Series

    @abstractmethod
    def add_series(self, series: Series) -> Series:
        """Add a series to the database and return it with its assigned ID."""
        pass

    @abstractmethod
    def get_series_by_id(self, series_id: int) -> Optional[Series]:
        pass

    @abstractmethod
    def get_all_series(self) -> List[Series]:
        pass

    @abstractmethod
    def delete_series(self, series_id: int) -> None:
        """Delete the series row only. Seasons and episodes are removed by event handlers."""
        pass

    # Seasons

    @abstractmethod
    def get_season(self, series_id: int, season_number: int) -> Optional[Season]:
        """Get a season by series ID and season number."""
        pass

    @abstractmethod
    def get_season_by_id(self, season_id: int) -> Optional[Season]:
        pass

    @abstractmethod
    def get_seasons_by_series(self, series_id: int) -> List[Season]:
        """Get all seasons for a series, ordered by season number."""
        pass

    @abstractmethod
    def get_season_numbers(self, series_id: int) -> Set[int]:
        pass

    @abstractmethod
    def get_all_seasons(self) -> List[Season]:
        pass

    @abstractmethod
    def add_seasons(self, seasons: List[Season]) -> None:
        """Insert seasons. A season whose (series_id, season_number) already exists is skipped."""
        pass

    @abstractmethod
    def update_season(self, season: Season) -> None:
        pass

    @abstractmethod
    def update_seasons(self, seasons: List[Season]) -> None:
        pass

    @abstractmethod
    def delete_season(self, season: Season) -> None:
        pass

    @abstractmethod
    def delete_seasons(self, seasons: List[Season]) -> None:
        pass

    # Episodes

    @abstractmethod
    def add_episodes(self, episodes: List[Episode]) -> List[Episode]:
        """Insert episodes and return copies carrying their assigned IDs."""
        pass

    @abstractmethod
    def update_episodes(self, episodes: List[Episode]) -> List[Episode]:
        """Persist episodes by ID and return the ones that matched a stored row."""
        pass

    @abstractmethod
    def delete_episodes(self, episodes: List[Episode]) -> None:
        pass

    @abstractmethod
    def get_episode_by_id(self, episode_id: int) -> Optional[Episode]:
        pass

    @abstractmethod
    def get_episodes_by_series(self, series_id: int) -> List[Episode]:
        pass

    @abstractmethod
    def get_episodes_by_season(self, series_id: int, season_number: int) -> List[Episode]:
        pass

    @abstractmethod
    def set_episode_monitored_by_season(self, series_id: int, season_number: int, monitored: bool) -> None:
        """Set the monitored flag on every episode of a season."""
        pass

    @abstractmethod
    def delete_episodes_by_series(self, series_id: int) -> None:
        pass
