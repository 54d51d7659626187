# db_implementations/sqlite_implementation.py
import os
import sqlite3
import datetime
import logging
from typing import List, Optional, Set
from contextlib import contextmanager
from models.series import Series
from models.season import Season
from models.episode import Episode
from services.db_implementations.db_interface import DatabaseInterface

logger = logging.getLogger(__name__)

class SQLiteDBService(DatabaseInterface):
    """
    SQLite implementation of the DatabaseInterface for SeasonKeeper.

    Provides the series, season and episode stores using SQLite as the backend.
    Every public method opens its own connection; the transaction commits when the
    method returns and rolls back on error.

    Attributes:
        db_file (str): Path to the SQLite database file.
        read_only (bool): Whether the database is opened in read-only mode.
    """

    def __init__(self, db_file: str, read_only: bool = False) -> None:
        """Initialize the repository with a database file path.

        Args:
            db_file: Path to the SQLite database file
            read_only: If True, database will be opened in read-only mode
        """
        self.db_file = db_file
        self.read_only = read_only
        self._register_sqlite_datetime_adapters()

    @contextmanager
    def _connection(self):
        """Context manager to get a connection to the database."""
        try:
            if self.read_only:
                # mode=ro never creates the file; a missing database is an error
                uri = f"file:{self.db_file}?mode=ro"
                conn = sqlite3.connect(uri, uri=True, detect_types=sqlite3.PARSE_DECLTYPES, timeout=10.0)
            else:
                conn = sqlite3.connect(self.db_file, detect_types=sqlite3.PARSE_DECLTYPES, timeout=10.0)
        except sqlite3.Error as e:
            logger.exception(f"Failed to connect to database {self.db_file}: {e}")
            raise

        conn.row_factory = sqlite3.Row
        try:
            yield conn
            if not self.read_only:
                conn.commit()
        except sqlite3.Error as e:
            logger.exception(f"Error in database operation: {e}")
            if not self.read_only:
                conn.rollback()
            raise
        finally:
            conn.close()

    def __str__(self):
        """Return a string representation of the repository."""
        return f"SQLiteDBService(db_file={self.db_file})"

    @staticmethod
    def _datetime_to_iso(dt):
        """Convert a datetime object to ISO format string."""
        return dt.isoformat()

    @staticmethod
    def _iso_to_datetime(iso_str):
        """Convert an ISO format string to a datetime object."""
        if isinstance(iso_str, bytes):
            try:
                iso_str = iso_str.decode("utf-8")
            except UnicodeDecodeError:
                raise ValueError("Invalid byte sequence for datetime conversion")
        return datetime.datetime.fromisoformat(iso_str)

    def _register_sqlite_datetime_adapters(self):
        """Register SQLite adapter and converter for datetime handling."""
        try:
            sqlite3.register_adapter(datetime.datetime, self._datetime_to_iso)
            sqlite3.register_converter("DATETIME", self._iso_to_datetime)
        except sqlite3.Error as e:
            logger.exception(f"Error registering SQLite adapters: {e}")

    def _check_database_path(self):
        """Create the directory holding the database file if it does not exist yet."""
        logger.debug(f"Resolved DB path: {os.path.abspath(self.db_file)}")

        db_dir = os.path.dirname(self.db_file)
        if db_dir and not os.path.exists(db_dir):
            try:
                os.makedirs(db_dir, exist_ok=True)
                logger.info(f"Created database directory: {db_dir}")
            except OSError as ose:
                logger.exception(f"Error creating database directory: {ose}")
                raise
        return True

    def _create_table_series(self, conn: sqlite3.Connection) -> None:
        conn.execute('''CREATE TABLE IF NOT EXISTS series (
                            id INTEGER PRIMARY KEY AUTOINCREMENT,
                            title TEXT NOT NULL,
                            monitored BOOLEAN NOT NULL DEFAULT 1,
                            added_at DATETIME)''')

    def _create_table_seasons(self, conn: sqlite3.Connection) -> None:
        conn.execute('''CREATE TABLE IF NOT EXISTS seasons (
                            id INTEGER PRIMARY KEY AUTOINCREMENT,
                            series_id INTEGER NOT NULL,
                            season_number INTEGER NOT NULL,
                            monitored BOOLEAN NOT NULL DEFAULT 1,
                            UNIQUE (series_id, season_number))''')

    def _create_table_episodes(self, conn: sqlite3.Connection) -> None:
        conn.execute('''CREATE TABLE IF NOT EXISTS episodes (
                            id INTEGER PRIMARY KEY AUTOINCREMENT,
                            series_id INTEGER NOT NULL,
                            season_number INTEGER NOT NULL,
                            episode_number INTEGER NOT NULL,
                            title TEXT,
                            air_date DATETIME,
                            monitored BOOLEAN NOT NULL DEFAULT 1,
                            UNIQUE (series_id, season_number, episode_number))''')
        conn.execute("CREATE INDEX IF NOT EXISTS idx_episodes_season ON episodes(series_id, season_number)")

    def _initialize_database(self):
        """Initialize the database schema by creating necessary tables if they don't exist."""
        _ = self._check_database_path()
        with self._connection() as conn:
            self._create_table_series(conn)
            self._create_table_seasons(conn)
            self._create_table_episodes(conn)
            logger.info("Database initialized successfully")

    def initialize(self) -> None:
        """Initialize the database schema."""
        if self.read_only:
            logger.info("Skipping database initialization in read-only mode")
            return
        self._initialize_database()

    def is_read_only(self) -> bool:
        return self.read_only

    # ────────────────────────────────────────────────
    # SERIES
    # ────────────────────────────────────────────────

    def add_series(self, series: Series) -> Series:
        """Add a series to the database."""
        with self._connection() as conn:
            cursor = conn.execute('''
                INSERT INTO series (title, monitored, added_at) VALUES (?, ?, ?)
            ''', series.to_db_tuple())
            stored = series.model_copy(update={"id": cursor.lastrowid})
            logger.info(f"Inserted series: {series.title} (id={stored.id})")
            return stored

    def get_series_by_id(self, series_id: int) -> Optional[Series]:
        with self._connection() as conn:
            row = conn.execute("SELECT * FROM series WHERE id = ?", (series_id,)).fetchone()
            return Series.from_db_record(dict(row)) if row else None

    def get_all_series(self) -> List[Series]:
        with self._connection() as conn:
            rows = conn.execute("SELECT * FROM series ORDER BY id").fetchall()
            logger.debug(f"Fetched {len(rows)} series")
            return [Series.from_db_record(dict(row)) for row in rows]

    def delete_series(self, series_id: int) -> None:
        with self._connection() as conn:
            conn.execute("DELETE FROM series WHERE id = ?", (series_id,))
            logger.info(f"Deleted series id={series_id}")

    # ────────────────────────────────────────────────
    # SEASONS
    # ────────────────────────────────────────────────

    def get_season(self, series_id: int, season_number: int) -> Optional[Season]:
        with self._connection() as conn:
            row = conn.execute(
                "SELECT * FROM seasons WHERE series_id = ? AND season_number = ?",
                (series_id, season_number),
            ).fetchone()
            return Season.from_db_record(dict(row)) if row else None

    def get_season_by_id(self, season_id: int) -> Optional[Season]:
        with self._connection() as conn:
            row = conn.execute("SELECT * FROM seasons WHERE id = ?", (season_id,)).fetchone()
            return Season.from_db_record(dict(row)) if row else None

    def get_seasons_by_series(self, series_id: int) -> List[Season]:
        with self._connection() as conn:
            rows = conn.execute(
                "SELECT * FROM seasons WHERE series_id = ? ORDER BY season_number",
                (series_id,),
            ).fetchall()
            return [Season.from_db_record(dict(row)) for row in rows]

    def get_season_numbers(self, series_id: int) -> Set[int]:
        with self._connection() as conn:
            rows = conn.execute("SELECT season_number FROM seasons WHERE series_id = ?", (series_id,)).fetchall()
            return {row["season_number"] for row in rows}

    def get_all_seasons(self) -> List[Season]:
        with self._connection() as conn:
            rows = conn.execute("SELECT * FROM seasons ORDER BY series_id, season_number").fetchall()
            logger.debug(f"Fetched {len(rows)} seasons")
            return [Season.from_db_record(dict(row)) for row in rows]

    def add_seasons(self, seasons: List[Season]) -> None:
        """Insert seasons, skipping any (series_id, season_number) that is already tracked."""
        if not seasons:
            return

        with self._connection() as conn:
            conn.executemany('''
                INSERT INTO seasons (series_id, season_number, monitored)
                VALUES (?, ?, ?)
                ON CONFLICT(series_id, season_number) DO NOTHING
            ''', [season.to_db_tuple() for season in seasons])
            logger.info(f"Inserted {len(seasons)} seasons.")

    def update_season(self, season: Season) -> None:
        self.update_seasons([season])

    def update_seasons(self, seasons: List[Season]) -> None:
        if not seasons:
            return

        with self._connection() as conn:
            conn.executemany(
                "UPDATE seasons SET monitored = ? WHERE series_id = ? AND season_number = ?",
                [(season.monitored, season.series_id, season.season_number) for season in seasons],
            )
            logger.debug(f"Updated {len(seasons)} seasons.")

    def delete_season(self, season: Season) -> None:
        self.delete_seasons([season])

    def delete_seasons(self, seasons: List[Season]) -> None:
        if not seasons:
            return

        with self._connection() as conn:
            conn.executemany(
                "DELETE FROM seasons WHERE series_id = ? AND season_number = ?",
                [(season.series_id, season.season_number) for season in seasons],
            )
            logger.info(f"Deleted {len(seasons)} seasons.")

    # ────────────────────────────────────────────────
    # EPISODES
    # ────────────────────────────────────────────────

    def add_episodes(self, episodes: List[Episode]) -> List[Episode]:
        """Insert or update episodes in the database."""
        if not episodes:
            return []

        query = """
            INSERT INTO episodes (
                series_id, season_number, episode_number, title, air_date, monitored
            )
            VALUES (?, ?, ?, ?, ?, ?)
            ON CONFLICT(series_id, season_number, episode_number) DO UPDATE SET
                title = excluded.title,
                air_date = excluded.air_date
            RETURNING id
        """

        stored = []
        with self._connection() as conn:
            for ep in episodes:
                row = conn.execute(query, ep.to_db_tuple()).fetchone()
                stored.append(ep.model_copy(update={"id": row["id"]}))
            logger.info(f"Inserted {len(episodes)} episodes.")
        return stored

    def update_episodes(self, episodes: List[Episode]) -> List[Episode]:
        """Update episodes by ID. Episodes whose row no longer exists are skipped."""
        if not episodes:
            return []

        query = '''
            UPDATE episodes
            SET series_id = ?, season_number = ?, episode_number = ?, title = ?, air_date = ?, monitored = ?
            WHERE id = ?
        '''

        updated = []
        with self._connection() as conn:
            for ep in episodes:
                if ep.id is None:
                    continue
                if conn.execute(query, ep.to_db_tuple() + (ep.id,)).rowcount:
                    updated.append(ep)
            logger.info(f"Updated {len(updated)} of {len(episodes)} episodes.")
        return updated

    def delete_episodes(self, episodes: List[Episode]) -> None:
        if not episodes:
            return

        with self._connection() as conn:
            conn.executemany("DELETE FROM episodes WHERE id = ?", [(ep.id,) for ep in episodes])
            logger.info(f"Deleted {len(episodes)} episodes.")

    def get_episode_by_id(self, episode_id: int) -> Optional[Episode]:
        with self._connection() as conn:
            row = conn.execute("SELECT * FROM episodes WHERE id = ?", (episode_id,)).fetchone()
            return Episode.from_db_record(dict(row)) if row else None

    def get_episodes_by_series(self, series_id: int) -> List[Episode]:
        with self._connection() as conn:
            rows = conn.execute(
                "SELECT * FROM episodes WHERE series_id = ? ORDER BY season_number, episode_number",
                (series_id,),
            ).fetchall()
            logger.debug(f"Fetched {len(rows)} episodes for series_id={series_id}")
            return [Episode.from_db_record(dict(row)) for row in rows]

    def get_episodes_by_season(self, series_id: int, season_number: int) -> List[Episode]:
        with self._connection() as conn:
            rows = conn.execute(
                "SELECT * FROM episodes WHERE series_id = ? AND season_number = ? ORDER BY episode_number",
                (series_id, season_number),
            ).fetchall()
            return [Episode.from_db_record(dict(row)) for row in rows]

    def set_episode_monitored_by_season(self, series_id: int, season_number: int, monitored: bool) -> None:
        with self._connection() as conn:
            cursor = conn.execute(
                "UPDATE episodes SET monitored = ? WHERE series_id = ? AND season_number = ?",
                (monitored, series_id, season_number),
            )
            logger.debug(f"Set monitored={monitored} on {cursor.rowcount} episodes of Series:{series_id} Season:{season_number}")

    def delete_episodes_by_series(self, series_id: int) -> None:
        with self._connection() as conn:
            cursor = conn.execute("DELETE FROM episodes WHERE series_id = ?", (series_id,))
            logger.info(f"Deleted {cursor.rowcount} episodes for series_id={series_id}")
