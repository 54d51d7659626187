import os
import pytest
import psycopg2

from services.db_implementations.postgres_implementation import PostgresDBService
from models.season import Season


PG_CONN = os.getenv(
    "SEASONKEEPER_TEST_POSTGRES",
    "host=localhost port=5432 dbname=seasonkeeper user=postgres password=postgres",
)


@pytest.fixture
def mock_connect(mocker):
    conn = mocker.MagicMock()
    mocker.patch("services.db_implementations.postgres_implementation.psycopg2.connect", return_value=conn)
    return conn


def test_add_seasons_commits(mock_connect):
    db = PostgresDBService("postgresql://user:pw@localhost:5432/db")

    db.add_seasons([Season(series_id=1, season_number=2)])

    cursor = mock_connect.cursor.return_value.__enter__.return_value
    query, params = cursor.executemany.call_args.args
    assert "ON CONFLICT (series_id, season_number) DO NOTHING" in query
    assert params == [(1, 2, True)]
    mock_connect.commit.assert_called_once()
    mock_connect.close.assert_called_once()


def test_database_error_rolls_back(mock_connect):
    cursor = mock_connect.cursor.return_value.__enter__.return_value
    cursor.executemany.side_effect = psycopg2.Error("boom")
    db = PostgresDBService("postgresql://user:pw@localhost:5432/db")

    with pytest.raises(psycopg2.Error):
        db.delete_seasons([Season(series_id=1, season_number=2)])

    mock_connect.rollback.assert_called_once()
    mock_connect.commit.assert_not_called()
    mock_connect.close.assert_called_once()


def test_read_only_session(mock_connect):
    db = PostgresDBService("postgresql://user:pw@localhost:5432/db", read_only=True)

    db.initialize()
    assert mock_connect.set_session.call_count == 0

    db.get_all_seasons()
    mock_connect.set_session.assert_called_once_with(readonly=True)


def test_update_episodes_skips_missing_rows(mock_connect, make_episodes):
    cursor = mock_connect.cursor.return_value.__enter__.return_value
    kept, gone = make_episodes((1, 1, 1), (1, 1, 2))
    kept = kept.model_copy(update={"id": 1})
    gone = gone.model_copy(update={"id": 2})
    rowcounts = iter([1, 0])
    cursor.execute.side_effect = lambda query, params: setattr(cursor, "rowcount", next(rowcounts))
    db = PostgresDBService("postgresql://user:pw@localhost:5432/db")

    assert db.update_episodes([kept, gone]) == [kept]
    assert cursor.execute.call_count == 2


@pytest.mark.postgres
def test_pg_season_store_round_trip():
    try:
        db = PostgresDBService(PG_CONN)
        db.initialize()
    except Exception:
        pytest.skip("Postgres not available for tests; set SEASONKEEPER_TEST_POSTGRES to enable")

    series_id = 424242
    db.delete_seasons(db.get_seasons_by_series(series_id))

    db.add_seasons([Season(series_id=series_id, season_number=1), Season(series_id=series_id, season_number=2)])
    db.add_seasons([Season(series_id=series_id, season_number=1, monitored=False)])
    assert db.get_season_numbers(series_id) == {1, 2}

    season = db.get_season(series_id, 1)
    assert season.monitored is True
    season.monitored = False
    db.update_season(season)
    assert db.get_season_by_id(season.id).monitored is False

    db.delete_seasons(db.get_seasons_by_series(series_id))
    assert db.get_seasons_by_series(series_id) == []
