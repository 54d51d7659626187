"""
Series Service Module

Adds, looks up and deletes series. Deleting a series publishes SeriesDeleted once
the series row is gone; its seasons and episodes are cleaned up by deferred handlers.
"""

import logging
from typing import List
from services.db_implementations.db_interface import DatabaseInterface, SeriesNotFoundError
from services.event_aggregator import EventAggregator
from models.series import Series
from models.events import SeriesDeleted

logger = logging.getLogger(__name__)


class SeriesService:
    def __init__(self, db: DatabaseInterface, events: EventAggregator):
        self.db = db
        self.events = events

    def add_series(self, series: Series) -> Series:
        stored = self.db.add_series(series)
        logger.info(f"Added series {stored.title} (id={stored.id})")
        return stored

    def get_series(self, series_id: int) -> Series:
        """
        Get a series by its database ID.

        Raises:
            SeriesNotFoundError: If no series has this ID.
        """
        series = self.db.get_series_by_id(series_id)
        if series is None:
            raise SeriesNotFoundError(f"Series not found: id={series_id}")
        return series

    def get_all_series(self) -> List[Series]:
        return self.db.get_all_series()

    def delete_series(self, series_id: int) -> None:
        """
        Delete a series and announce it.

        The delete transaction has committed by the time SeriesDeleted is published.

        Raises:
            SeriesNotFoundError: If no series has this ID.
        """
        series = self.get_series(series_id)
        self.db.delete_series(series_id)
        logger.info(f"Deleted series {series.title} (id={series_id})")
        self.events.publish(SeriesDeleted(series=series))
