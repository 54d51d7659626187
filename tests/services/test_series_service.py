import pytest
from services.series_service import SeriesService
from services.event_aggregator import EventAggregator
from services.db_implementations.db_interface import SeriesNotFoundError
from models.series import Series
from models.events import SeriesDeleted


@pytest.fixture
def mock_events(mocker):
    return mocker.Mock(spec=EventAggregator)


def test_add_and_get_series(series_service):
    stored = series_service.add_series(Series(title="Show"))

    assert stored.id is not None
    assert series_service.get_series(stored.id).title == "Show"
    assert [s.id for s in series_service.get_all_series()] == [stored.id]


def test_get_missing_series_raises(series_service):
    with pytest.raises(SeriesNotFoundError):
        series_service.get_series(99)


def test_delete_series_publishes_after_delete(mock_db, mock_events, mocker):
    series = Series(id=3, title="Three")
    mock_db.get_series_by_id.return_value = series
    parent = mocker.Mock()
    parent.attach_mock(mock_db.delete_series, "delete_series")
    parent.attach_mock(mock_events.publish, "publish")

    SeriesService(mock_db, mock_events).delete_series(3)

    assert [c[0] for c in parent.mock_calls] == ["delete_series", "publish"]
    assert mock_events.publish.call_args.args[0] == SeriesDeleted(series=series)


def test_delete_missing_series_publishes_nothing(mock_db, mock_events):
    mock_db.get_series_by_id.return_value = None

    with pytest.raises(SeriesNotFoundError):
        SeriesService(mock_db, mock_events).delete_series(3)

    mock_db.delete_series.assert_not_called()
    mock_events.publish.assert_not_called()
