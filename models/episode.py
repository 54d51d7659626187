"""
Episode model for SeasonKeeper, representing episode metadata and database serialization logic.
"""
import datetime
import logging
from typing import Optional
from pydantic import BaseModel, Field, ConfigDict

logger = logging.getLogger(__name__)

class Episode(BaseModel):
    """
    Represents a TV episode as reported by the ingestion pipeline.

    Attributes:
        id (Optional[int]): Database ID, None until persisted.
        series_id (int): ID of the owning series.
        season_number (int): Season number the episode belongs to.
        episode_number (int): Episode number within the season.
        title (str): Episode title.
        air_date (Optional[datetime.datetime]): Air date.
        monitored (bool): Whether the episode is monitored.

    Methods:
        to_db_tuple(): Serialize for DB insertion.
        from_db_record(): Construct from a DB record.
    """

    model_config = ConfigDict(
        from_attributes=True,
        validate_assignment=True,
        extra='forbid'
    )

    id: Optional[int] = Field(None, gt=0, description="Database ID of the episode")
    series_id: int = Field(..., gt=0, description="ID of the owning series")
    season_number: int = Field(..., ge=0, description="Season number")
    episode_number: int = Field(..., ge=0, description="Episode number")
    title: str = Field("", description="Episode title")
    air_date: Optional[datetime.datetime] = Field(None, description="Air date")
    monitored: bool = Field(True, description="Whether the episode is monitored")

    def to_db_tuple(self) -> tuple:
        """
        Serialize the Episode object as a tuple for database insertion.

        Returns:
            tuple: Values for DB insertion.
        """
        return (
            self.series_id,
            self.season_number,
            self.episode_number,
            self.title,
            self.air_date,
            self.monitored
        )

    @classmethod
    def from_db_record(cls, record: dict) -> "Episode":
        """
        Construct an Episode object from a database record.

        Args:
            record (dict): Database record for the episode.

        Returns:
            Episode: Instantiated Episode object.
        """
        return cls(
            id=record["id"],
            series_id=record["series_id"],
            season_number=record["season_number"],
            episode_number=record["episode_number"],
            title=record["title"] or "",
            air_date=record["air_date"],
            monitored=bool(record["monitored"])
        )

    def __str__(self) -> str:
        return f"S{self.season_number:02d}E{self.episode_number:02d} - {self.title}"
