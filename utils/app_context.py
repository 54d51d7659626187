"""
Builds the SeasonKeeper service graph from a loaded configuration.
"""
import logging
from typing import Any, Dict
from services.db_factory import create_db_service
from services.event_aggregator import EventAggregator
from services.episode_service import EpisodeService
from services.season_service import SeasonService
from services.series_service import SeriesService
from utils.seasonkeeper_config import get_config_value

logger = logging.getLogger(__name__)

DEFAULT_ASYNC_WORKERS = 4

def create_app_context(config: Dict[str, Dict[str, Any]], read_only: bool = False) -> Dict[str, Any]:
    """
    Create the database, event aggregator and services, and wire the event handlers.

    Args:
        config: Normalized configuration dict.
        read_only: Open the database read-only and skip schema initialization.

    Returns:
        dict: Context with keys config, db, events, episode_service, season_service,
        series_service and read_only. Call ``events.shutdown()`` when done.
    """
    db = create_db_service(config, read_only=read_only)
    db.initialize()
    logger.info(f"✓ Database service initialized: {db}")

    async_workers = get_config_value(config, "events", "async_workers", fallback=DEFAULT_ASYNC_WORKERS, value_type=int)
    events = EventAggregator(async_workers=async_workers)

    episode_service = EpisodeService(db, events)
    season_service = SeasonService(db, episode_service)
    series_service = SeriesService(db, events)

    episode_service.register_handlers(events)
    season_service.register_handlers(events)
    logger.info(f"✓ Services initialized ({async_workers} deferred event workers)")

    return {
        "config": config,
        "db": db,
        "events": events,
        "episode_service": episode_service,
        "season_service": season_service,
        "series_service": series_service,
        "read_only": read_only,
    }
