"""
Unit tests for Settings.
"""

import pytest
from pydantic import ValidationError

from stepwise.config import Settings, get_settings


@pytest.fixture(autouse=True)
def clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestSettings:
    def test_defaults(self):
        settings = Settings(_env_file=None)

        assert settings.mastery_threshold == 2
        assert settings.step_max == 5
        assert settings.completion_threshold == 0.8
        assert settings.default_session_size == 12

    def test_environment_override(self, monkeypatch, tmp_path):
        monkeypatch.setenv("STEPWISE_MASTERY_THRESHOLD", "3")
        monkeypatch.setenv("STEPWISE_PROFILE_DIR", str(tmp_path))
        monkeypatch.setenv("STEPWISE_LOG_LEVEL", "debug")

        settings = get_settings()

        assert settings.mastery_threshold == 3
        assert settings.profile_dir == tmp_path
        assert settings.log_level == "DEBUG"

    def test_invalid_threshold_rejected(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, completion_threshold=1.5)

    def test_cached(self):
        assert get_settings() is get_settings()


class TestBuilders:
    def test_mastery_config(self):
        config = Settings(_env_file=None, mastery_threshold=4, revision_demotion_step=2).mastery_config()
        assert (config.mastery_threshold, config.revision_step) == (4, 2)

    def test_orchestrator_config_keeps_bounds_ordered(self):
        config = Settings(_env_file=None, min_session_size=10, max_session_size=5).orchestrator_config()
        assert config.max_session_size == 10

    def test_selection_weights(self):
        weights = Settings(_env_file=None, weight_new=0.9).selection_weights()
        assert weights.new == 0.9

    def test_guidance_config(self):
        config = Settings(_env_file=None, reveal_ceiling=5).guidance_config()
        assert config.reveal_ceiling == 5
