"""
Series model for SeasonKeeper.
"""
import datetime
from typing import Optional
from pydantic import BaseModel, Field, ConfigDict

class Series(BaseModel):
    """
    Represents a series, the root of the Series -> Season -> Episode hierarchy.

    Attributes:
        id (Optional[int]): Database ID, None until persisted.
        title (str): Series title.
        monitored (bool): Whether the series is monitored.
        added_at (datetime.datetime): Record creation timestamp.
    """

    model_config = ConfigDict(
        from_attributes=True,
        validate_assignment=True,
        extra='forbid'
    )

    id: Optional[int] = Field(None, gt=0, description="Database ID of the series")
    title: str = Field(..., min_length=1, description="Series title")
    monitored: bool = Field(True, description="Whether the series is monitored")
    added_at: datetime.datetime = Field(default_factory=datetime.datetime.now, description="Record creation timestamp")

    def to_db_tuple(self) -> tuple:
        """Serialize the Series object as a tuple for database insertion."""
        return (
            self.title,
            self.monitored,
            self.added_at
        )

    @classmethod
    def from_db_record(cls, record: dict) -> "Series":
        """Construct a Series object from a database record."""
        # Handle None added_at by using default factory
        added_at = record["added_at"] if record["added_at"] is not None else datetime.datetime.now()

        return cls(
            id=record["id"],
            title=record["title"],
            monitored=bool(record["monitored"]),
            added_at=added_at
        )
