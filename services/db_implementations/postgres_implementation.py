import psycopg2
import logging
from typing import List, Optional, Set
from contextlib import contextmanager
from psycopg2.extras import RealDictCursor
from models.series import Series
from models.season import Season
from models.episode import Episode
from services.db_implementations.db_interface import DatabaseInterface

logger = logging.getLogger(__name__)

class PostgresDBService(DatabaseInterface):
    """
    PostgreSQL implementation of the DatabaseInterface for SeasonKeeper.

    Provides the series, season and episode stores using PostgreSQL as the backend.

    Attributes:
        connection_string (str): PostgreSQL connection string.
        read_only (bool): Whether write transactions are refused.
    """

    def __init__(self, connection_string: str, read_only: bool = False) -> None:
        """Initialize the repository with a connection string.

        Args:
            connection_string: PostgreSQL connection string
            read_only: If True, sessions are opened read-only
        """
        self.connection_string = connection_string
        self.read_only = read_only

    @contextmanager
    def _connection(self):
        """Context manager to get a connection to the database."""
        conn = psycopg2.connect(self.connection_string)
        if self.read_only:
            conn.set_session(readonly=True)
        try:
            yield conn
            conn.commit()
        except psycopg2.Error as e:
            logger.exception(f"Error in database operation: {e}")
            conn.rollback()
            raise
        finally:
            conn.close()

    def __str__(self):
        return "PostgresDBService()"

    def _create_table_series(self, cursor) -> None:
        cursor.execute('''CREATE TABLE IF NOT EXISTS series (
            id SERIAL PRIMARY KEY,
            title TEXT NOT NULL,
            monitored BOOLEAN NOT NULL DEFAULT TRUE,
            added_at TIMESTAMP
        )''')

    def _create_table_seasons(self, cursor) -> None:
        cursor.execute('''CREATE TABLE IF NOT EXISTS seasons (
            id SERIAL PRIMARY KEY,
            series_id INTEGER NOT NULL,
            season_number INTEGER NOT NULL,
            monitored BOOLEAN NOT NULL DEFAULT TRUE,
            UNIQUE (series_id, season_number)
        )''')

    def _create_table_episodes(self, cursor) -> None:
        cursor.execute('''CREATE TABLE IF NOT EXISTS episodes (
            id SERIAL PRIMARY KEY,
            series_id INTEGER NOT NULL,
            season_number INTEGER NOT NULL,
            episode_number INTEGER NOT NULL,
            title TEXT,
            air_date TIMESTAMP,
            monitored BOOLEAN NOT NULL DEFAULT TRUE,
            UNIQUE (series_id, season_number, episode_number)
        )''')
        cursor.execute('''CREATE INDEX IF NOT EXISTS idx_episodes_season ON episodes (series_id, season_number)''')

    def initialize(self) -> None:
        """Initialize the database schema."""
        if self.read_only:
            logger.info("Skipping database initialization in read-only mode")
            return
        with self._connection() as conn:
            cursor = conn.cursor()
            self._create_table_series(cursor)
            self._create_table_seasons(cursor)
            self._create_table_episodes(cursor)
            logger.info("Database initialized successfully")

    def is_read_only(self) -> bool:
        return self.read_only

    def _fetch_all(self, query: str, params: tuple = ()) -> List[dict]:
        with self._connection() as conn:
            with conn.cursor(cursor_factory=RealDictCursor) as cursor:
                cursor.execute(query, params)
                return [dict(row) for row in cursor.fetchall()]

    def _fetch_one(self, query: str, params: tuple = ()) -> Optional[dict]:
        with self._connection() as conn:
            with conn.cursor(cursor_factory=RealDictCursor) as cursor:
                cursor.execute(query, params)
                row = cursor.fetchone()
                return dict(row) if row else None

    # Series

    def add_series(self, series: Series) -> Series:
        with self._connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "INSERT INTO series (title, monitored, added_at) VALUES (%s, %s, %s) RETURNING id",
                series.to_db_tuple(),
            )
            stored = series.model_copy(update={"id": cursor.fetchone()[0]})
            logger.info(f"Inserted series: {series.title} (id={stored.id})")
            return stored

    def get_series_by_id(self, series_id: int) -> Optional[Series]:
        row = self._fetch_one("SELECT * FROM series WHERE id = %s", (series_id,))
        return Series.from_db_record(row) if row else None

    def get_all_series(self) -> List[Series]:
        return [Series.from_db_record(row) for row in self._fetch_all("SELECT * FROM series ORDER BY id")]

    def delete_series(self, series_id: int) -> None:
        with self._connection() as conn:
            conn.cursor().execute("DELETE FROM series WHERE id = %s", (series_id,))
            logger.info(f"Deleted series id={series_id}")

    # Seasons

    def get_season(self, series_id: int, season_number: int) -> Optional[Season]:
        row = self._fetch_one(
            "SELECT * FROM seasons WHERE series_id = %s AND season_number = %s",
            (series_id, season_number),
        )
        return Season.from_db_record(row) if row else None

    def get_season_by_id(self, season_id: int) -> Optional[Season]:
        row = self._fetch_one("SELECT * FROM seasons WHERE id = %s", (season_id,))
        return Season.from_db_record(row) if row else None

    def get_seasons_by_series(self, series_id: int) -> List[Season]:
        rows = self._fetch_all(
            "SELECT * FROM seasons WHERE series_id = %s ORDER BY season_number",
            (series_id,),
        )
        return [Season.from_db_record(row) for row in rows]

    def get_season_numbers(self, series_id: int) -> Set[int]:
        rows = self._fetch_all("SELECT season_number FROM seasons WHERE series_id = %s", (series_id,))
        return {row["season_number"] for row in rows}

    def get_all_seasons(self) -> List[Season]:
        rows = self._fetch_all("SELECT * FROM seasons ORDER BY series_id, season_number")
        return [Season.from_db_record(row) for row in rows]

    def add_seasons(self, seasons: List[Season]) -> None:
        if not seasons:
            return

        with self._connection() as conn:
            with conn.cursor() as cursor:
                cursor.executemany('''
                    INSERT INTO seasons (series_id, season_number, monitored)
                    VALUES (%s, %s, %s)
                    ON CONFLICT (series_id, season_number) DO NOTHING
                ''', [season.to_db_tuple() for season in seasons])
                logger.info(f"Inserted {len(seasons)} seasons.")

    def update_season(self, season: Season) -> None:
        self.update_seasons([season])

    def update_seasons(self, seasons: List[Season]) -> None:
        if not seasons:
            return

        with self._connection() as conn:
            with conn.cursor() as cursor:
                cursor.executemany(
                    "UPDATE seasons SET monitored = %s WHERE series_id = %s AND season_number = %s",
                    [(season.monitored, season.series_id, season.season_number) for season in seasons],
                )

    def delete_season(self, season: Season) -> None:
        self.delete_seasons([season])

    def delete_seasons(self, seasons: List[Season]) -> None:
        if not seasons:
            return

        with self._connection() as conn:
            with conn.cursor() as cursor:
                cursor.executemany(
                    "DELETE FROM seasons WHERE series_id = %s AND season_number = %s",
                    [(season.series_id, season.season_number) for season in seasons],
                )
                logger.info(f"Deleted {len(seasons)} seasons.")

    # Episodes

    def add_episodes(self, episodes: List[Episode]) -> List[Episode]:
        """Insert or update episodes in the database."""
        if not episodes:
            return []

        query = """
            INSERT INTO episodes (
                series_id, season_number, episode_number, title, air_date, monitored
            )
            VALUES (%s, %s, %s, %s, %s, %s)
            ON CONFLICT (series_id, season_number, episode_number) DO UPDATE SET
                title = EXCLUDED.title,
                air_date = EXCLUDED.air_date
            RETURNING id
        """

        stored = []
        with self._connection() as conn:
            with conn.cursor() as cursor:
                for ep in episodes:
                    cursor.execute(query, ep.to_db_tuple())
                    stored.append(ep.model_copy(update={"id": cursor.fetchone()[0]}))
                logger.info(f"Inserted {len(episodes)} episodes.")
        return stored

    def update_episodes(self, episodes: List[Episode]) -> List[Episode]:
        """Update episodes by ID. Episodes whose row no longer exists are skipped."""
        if not episodes:
            return []

        query = '''
            UPDATE episodes
            SET series_id = %s, season_number = %s, episode_number = %s, title = %s, air_date = %s, monitored = %s
            WHERE id = %s
        '''

        updated = []
        with self._connection() as conn:
            with conn.cursor() as cursor:
                for ep in episodes:
                    if ep.id is None:
                        continue
                    cursor.execute(query, ep.to_db_tuple() + (ep.id,))
                    if cursor.rowcount:
                        updated.append(ep)
                logger.info(f"Updated {len(updated)} of {len(episodes)} episodes.")
        return updated

    def delete_episodes(self, episodes: List[Episode]) -> None:
        if not episodes:
            return

        with self._connection() as conn:
            with conn.cursor() as cursor:
                cursor.executemany("DELETE FROM episodes WHERE id = %s", [(ep.id,) for ep in episodes])
                logger.info(f"Deleted {len(episodes)} episodes.")

    def get_episode_by_id(self, episode_id: int) -> Optional[Episode]:
        row = self._fetch_one("SELECT * FROM episodes WHERE id = %s", (episode_id,))
        return Episode.from_db_record(row) if row else None

    def get_episodes_by_series(self, series_id: int) -> List[Episode]:
        rows = self._fetch_all(
            "SELECT * FROM episodes WHERE series_id = %s ORDER BY season_number, episode_number",
            (series_id,),
        )
        return [Episode.from_db_record(row) for row in rows]

    def get_episodes_by_season(self, series_id: int, season_number: int) -> List[Episode]:
        rows = self._fetch_all(
            "SELECT * FROM episodes WHERE series_id = %s AND season_number = %s ORDER BY episode_number",
            (series_id, season_number),
        )
        return [Episode.from_db_record(row) for row in rows]

    def set_episode_monitored_by_season(self, series_id: int, season_number: int, monitored: bool) -> None:
        with self._connection() as conn:
            with conn.cursor() as cursor:
                cursor.execute(
                    "UPDATE episodes SET monitored = %s WHERE series_id = %s AND season_number = %s",
                    (monitored, series_id, season_number),
                )
                logger.debug(f"Set monitored={monitored} on {cursor.rowcount} episodes of Series:{series_id} Season:{season_number}")

    def delete_episodes_by_series(self, series_id: int) -> None:
        with self._connection() as conn:
            with conn.cursor() as cursor:
                cursor.execute("DELETE FROM episodes WHERE series_id = %s", (series_id,))
                logger.info(f"Deleted {cursor.rowcount} episodes for series_id={series_id}")
