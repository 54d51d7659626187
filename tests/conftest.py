import os
import sys
import pytest

# Add project root to sys.path for local imports
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from utils.seasonkeeper_config import load_configuration, write_temp_config
from utils.config.config_normalizer import ConfigNormalizer
from services.db_factory import create_db_service
from services.db_implementations.db_interface import DatabaseInterface
from services.event_aggregator import EventAggregator
from services.episode_service import EpisodeService
from services.season_service import SeasonService
from services.series_service import SeriesService
from models.episode import Episode

# ────────────────────────────────────────────────
# ENVIRONMENT
# ────────────────────────────────────────────────

@pytest.fixture(autouse=True)
def clear_seasonkeeper_env(monkeypatch):
    """Keep SEASONKEEPER_* variables of the developer's shell out of the tests."""
    for env_var in ConfigNormalizer.ENV_VAR_MAPPING:
        monkeypatch.delenv(env_var, raising=False)

# ────────────────────────────────────────────────
# CONFIGURATION FIXTURES
# ────────────────────────────────────────────────

@pytest.fixture
def test_config_path(tmp_path):
    """Create a temporary configuration file pointing at a per-test SQLite database."""
    return write_temp_config(
        {
            "Database": {"type": "sqlite"},
            "SQLite": {"db_file": str(tmp_path / "db" / "test.db")},
            "Events": {"async_workers": "2"},
        },
        str(tmp_path),
    )


@pytest.fixture
def config(test_config_path):
    """Load the configuration from the test config path."""
    return load_configuration(str(test_config_path))

# ────────────────────────────────────────────────
# DATABASE AND SERVICE FIXTURES
# ────────────────────────────────────────────────

@pytest.fixture
def db_service(config):
    """Return a database service initialized with the test database."""
    db = create_db_service(config)
    db.initialize()
    return db


@pytest.fixture
def events():
    aggregator = EventAggregator(async_workers=2)
    yield aggregator
    aggregator.shutdown(wait=True)


@pytest.fixture
def episode_service(db_service, events):
    service = EpisodeService(db_service, events)
    service.register_handlers(events)
    return service


@pytest.fixture
def season_service(db_service, episode_service, events):
    service = SeasonService(db_service, episode_service)
    service.register_handlers(events)
    return service


@pytest.fixture
def series_service(db_service, events):
    return SeriesService(db_service, events)

# ────────────────────────────────────────────────
# MOCK FIXTURES
# ────────────────────────────────────────────────

@pytest.fixture
def mock_db(mocker):
    """Mocked database with empty stores."""
    mock = mocker.Mock(spec=DatabaseInterface)
    mock.get_season.return_value = None
    mock.get_season_by_id.return_value = None
    mock.get_seasons_by_series.return_value = []
    mock.get_season_numbers.return_value = set()
    mock.get_all_seasons.return_value = []
    return mock


@pytest.fixture
def mock_episode_service(mocker):
    """Mocked EpisodeService reporting no remaining episodes."""
    mock = mocker.Mock(spec=EpisodeService)
    mock.get_episodes_by_season.return_value = []
    return mock

# ────────────────────────────────────────────────
# DATA HELPERS
# ────────────────────────────────────────────────

@pytest.fixture
def make_episodes():
    """Build Episode objects from (series_id, season_number, episode_number) triples."""
    def _make(*keys, **kwargs):
        return [
            Episode(
                series_id=series_id,
                season_number=season_number,
                episode_number=episode_number,
                title=f"Episode {episode_number}",
                **kwargs
            )
            for series_id, season_number, episode_number in keys
        ]
    return _make
