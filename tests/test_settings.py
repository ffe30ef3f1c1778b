import pytest
from pydantic import ValidationError

from zi import config
from zi.errors import InvalidInput
from zi.factory import get_learning_service
from zi.settings import LearningSettings
from zi.srs.constants import AccessTier, QualityPolicy


def test_defaults():
    settings = LearningSettings()

    assert settings.selected_levels == [1, 2]
    assert settings.session_length == 20
    assert settings.daily_free_limit == 20
    assert settings.quality_policy(AccessTier.FREE) == QualityPolicy.BINARY
    assert settings.quality_policy(AccessTier.PREMIUM) == QualityPolicy.RESPONSE_TIME


@pytest.mark.parametrize("requested,expected", [(1, 5), (5, 5), (37, 37), (100, 100), (500, 100)])
def test_session_length_is_clamped(requested, expected):
    assert LearningSettings(session_length=requested).session_length == expected


def test_levels_are_sorted_and_deduplicated():
    assert LearningSettings(selected_levels=[4, 1, 4, 2]).selected_levels == [1, 2, 4]


@pytest.mark.parametrize("levels", [[0], [7], [1, 9]])
def test_unknown_levels_rejected(levels):
    with pytest.raises(ValidationError):
        LearningSettings(selected_levels=levels)


def test_negative_daily_limit_rejected():
    with pytest.raises(ValidationError):
        LearningSettings(daily_free_limit=-1)


def test_eligible_levels_by_tier():
    settings = LearningSettings(selected_levels=[2, 3, 6])

    assert settings.eligible_levels(AccessTier.PREMIUM) == [2, 3, 6]
    assert settings.eligible_levels(AccessTier.FREE) == [2]
    assert settings.eligible_levels("free") == [2]


def test_database_url_default(monkeypatch):
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.delenv("TEST_MODE", raising=False)

    assert config.get_database_url() == config.DEFAULT_DATABASE_URL


def test_test_mode_switches_database(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "postgresql://localhost/zi_learning")
    monkeypatch.setenv("TEST_MODE", "true")

    assert config.get_database_url() == "postgresql://localhost/test_zi_learning"


def test_rng_seed(monkeypatch):
    monkeypatch.delenv("ZI_RNG_SEED", raising=False)
    assert config.get_rng_seed() is None

    monkeypatch.setenv("ZI_RNG_SEED", "17")
    assert config.get_rng_seed() == 17

    monkeypatch.setenv("ZI_RNG_SEED", "seventeen")
    with pytest.raises(InvalidInput):
        config.get_rng_seed()


def test_factory_builds_service(monkeypatch):
    monkeypatch.setenv("ZI_PREMIUM", "true")
    monkeypatch.setenv("ZI_RNG_SEED", "3")

    service = get_learning_service("sqlite://")

    assert service.current_tier() == AccessTier.PREMIUM
    assert service.start_session().session is None
