"""
Tests for the RaceSetting cache: lazy creation, lockstep updates.
"""
import pytest

from core.config import RaceConfigStore, current_season, race_config
from core.models import RaceSetting

pytestmark = pytest.mark.django_db


def test_first_access_creates_defaults():
    assert not RaceSetting.objects.exists()
    config = race_config.current
    setting = RaceSetting.objects.get()
    assert setting.season == current_season() == config.season
    assert config.goal_radius == 50.0
    assert config.rank_limit == 3
    assert config.senior_year == 1975
    assert not setting.is_counting_down


def test_one_setting_per_season():
    race_config.load()
    race_config.invalidate()
    race_config.load()
    assert RaceSetting.objects.count() == 1


def test_update_persists_then_caches():
    config = race_config.update(goal_radius=35.0, rank_limit=8)
    assert (config.goal_radius, config.rank_limit) == (35.0, 8)
    assert race_config.current is config

    # a fresh store reading the database agrees with the cache
    reloaded = RaceConfigStore().current
    assert reloaded == config


def test_update_rejects_unknown_fields():
    with pytest.raises(ValueError):
        race_config.update(start_time=None)
    assert not RaceSetting.objects.filter(start_time__isnull=False).exists()


def test_season_override(settings):
    settings.RACE_SEASON = 2019
    assert race_config.current.season == 2019
    assert RaceSetting.objects.filter(season=2019).exists()


def test_payload():
    payload = race_config.current.as_payload()
    assert payload == {
        "goalRadius": 50.0,
        "rankLimit": 3,
        "seniorYear": 1975,
        "finishLine": {"lat": 37.5665, "lng": 126.9780},
    }
