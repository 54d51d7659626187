import pytest
from services.episode_service import EpisodeService
from services.event_aggregator import EventAggregator
from services.db_implementations.db_interface import EpisodeNotFoundError
from models.events import EpisodesAdded, EpisodesUpdated, EpisodesDeleted, SeriesDeleted
from models.series import Series


@pytest.fixture
def mock_events(mocker):
    return mocker.Mock(spec=EventAggregator)


@pytest.fixture
def service(mock_db, mock_events):
    return EpisodeService(mock_db, mock_events)


def test_add_episodes_publishes_stored_episodes(service, mock_db, mock_events, make_episodes):
    episodes = make_episodes((1, 1, 1), (1, 1, 2))
    stored = [ep.model_copy(update={"id": i + 1}) for i, ep in enumerate(episodes)]
    mock_db.add_episodes.return_value = stored

    assert service.add_episodes(episodes) == stored

    mock_db.add_episodes.assert_called_once_with(episodes)
    event = mock_events.publish.call_args.args[0]
    assert isinstance(event, EpisodesAdded)
    assert event.episodes == stored


def test_update_episodes_publishes_event(service, mock_db, mock_events, make_episodes):
    episodes = make_episodes((1, 2, 1), id=3)
    mock_db.update_episodes.return_value = episodes

    assert service.update_episodes(episodes) == episodes

    mock_db.update_episodes.assert_called_once_with(episodes)
    event = mock_events.publish.call_args.args[0]
    assert isinstance(event, EpisodesUpdated)
    assert event.episodes == episodes


def test_update_episodes_publishes_only_stored_rows(service, mock_db, mock_events, make_episodes):
    kept, gone = make_episodes((1, 2, 1), (1, 7, 1))
    mock_db.update_episodes.return_value = [kept]

    assert service.update_episodes([kept, gone]) == [kept]

    assert mock_events.publish.call_args.args[0].episodes == [kept]


def test_update_episodes_without_stored_rows_publishes_nothing(service, mock_db, mock_events, make_episodes):
    mock_db.update_episodes.return_value = []

    assert service.update_episodes(make_episodes((1, 7, 1))) == []

    mock_events.publish.assert_not_called()


def test_delete_episodes_publishes_event(service, mock_db, mock_events, make_episodes):
    episodes = make_episodes((1, 2, 1))

    service.delete_episodes(episodes)

    mock_db.delete_episodes.assert_called_once_with(episodes)
    assert isinstance(mock_events.publish.call_args.args[0], EpisodesDeleted)


@pytest.mark.parametrize("method", ["add_episodes", "update_episodes", "delete_episodes"])
def test_empty_batches_publish_nothing(service, mock_db, mock_events, method):
    getattr(service, method)([])

    mock_events.publish.assert_not_called()
    getattr(mock_db, method).assert_not_called()


def test_get_episode_missing_raises(service, mock_db):
    mock_db.get_episode_by_id.return_value = None

    with pytest.raises(EpisodeNotFoundError):
        service.get_episode(3)


def test_set_episode_monitored_by_season_delegates(service, mock_db):
    service.set_episode_monitored_by_season(1, 2, False)
    mock_db.set_episode_monitored_by_season.assert_called_once_with(1, 2, False)


def test_series_deleted_removes_episodes_without_event(service, mock_db, mock_events):
    service.handle_series_deleted(SeriesDeleted(series=Series(id=4, title="Four")))

    mock_db.delete_episodes_by_series.assert_called_once_with(4)
    mock_events.publish.assert_not_called()


def test_register_handlers_defers_series_deleted(service, mock_events):
    service.register_handlers(mock_events)
    mock_events.subscribe_async.assert_called_once_with(SeriesDeleted, service.handle_series_deleted)
