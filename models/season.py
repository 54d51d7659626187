"""
Season model for SeasonKeeper, representing one season of a series and its monitoring state.
"""
import logging
from typing import Optional
from pydantic import BaseModel, Field, ConfigDict

logger = logging.getLogger(__name__)

class Season(BaseModel):
    """
    Represents a season of a series.

    A season record exists exactly as long as at least one episode with the same
    (series_id, season_number) pair exists.

    Attributes:
        id (Optional[int]): Database ID, None until persisted.
        series_id (int): ID of the owning series.
        season_number (int): Season number, unique within the series (0 = specials).
        monitored (bool): Whether content for this season should be tracked.

    Methods:
        to_db_tuple(): Serialize for DB insertion.
        from_db_record(): Construct from a DB record.
    """

    model_config = ConfigDict(
        from_attributes=True,
        validate_assignment=True,
        extra='forbid'
    )

    id: Optional[int] = Field(None, gt=0, description="Database ID of the season")
    series_id: int = Field(..., gt=0, description="ID of the owning series")
    season_number: int = Field(..., ge=0, description="Season number within the series")
    monitored: bool = Field(True, description="Whether the season is monitored")

    def to_db_tuple(self) -> tuple:
        """
        Serialize the Season object as a tuple for database insertion.

        Returns:
            tuple: Values for DB insertion.
        """
        return (
            self.series_id,
            self.season_number,
            self.monitored
        )

    @classmethod
    def from_db_record(cls, record: dict) -> "Season":
        """
        Construct a Season object from a database record.

        Args:
            record (dict): Database record for the season.

        Returns:
            Season: Instantiated Season object.
        """
        return cls(
            id=record["id"],
            series_id=record["series_id"],
            season_number=record["season_number"],
            monitored=bool(record["monitored"])
        )

    def __str__(self) -> str:
        return f"Series:{self.series_id} Season:{self.season_number}"
