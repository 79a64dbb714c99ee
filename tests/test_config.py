"""Tests for settings loading and the fail-safe threshold groups."""

from app.core.config import ClassifierSettings, ScoringSettings, SearchSettings, Settings


class TestFailSafeSettings:
    def test_out_of_range_value_falls_back(self):
        assert SearchSettings(restarts=0).restarts == 2

    def test_malformed_value_falls_back(self):
        assert ScoringSettings(floor="abc").floor == -10.0

    def test_valid_values_kept(self):
        settings = SearchSettings(restarts=4, cooling_rate=0.99)
        assert settings.restarts == 4
        assert settings.cooling_rate == 0.99

    def test_other_fields_survive_a_bad_one(self):
        settings = ClassifierSettings(min_text_length=-5, short_text_length=40)
        assert settings.min_text_length == 20
        assert settings.short_text_length == 40

    def test_nested_weights(self):
        settings = ClassifierSettings(ic_high_weights={"monoalphabetic": "lots", "caesar": 2.0})
        assert settings.ic_high_weights.monoalphabetic == 0.0
        assert settings.ic_high_weights.caesar == 2.0


class TestSettings:
    def test_defaults(self):
        settings = Settings()
        assert settings.api_v1_prefix == "/api/v1"
        assert settings.scoring.window_low == -10.0
        assert settings.orchestrator.early_exit_confidence == 0.9

    def test_nested_environment_variables(self, monkeypatch):
        monkeypatch.setenv("SEARCH__RESTARTS", "5")
        monkeypatch.setenv("CLASSIFIER__MIN_TEXT_LENGTH", "30")
        settings = Settings()
        assert settings.search.restarts == 5
        assert settings.classifier.min_text_length == 30

    def test_bad_environment_value_falls_back(self, monkeypatch):
        """Test that a malformed environment value keeps the default."""
        monkeypatch.setenv("SEARCH__RESTARTS", "zero")
        assert Settings().search.restarts == 2

    def test_bad_top_level_value_falls_back(self):
        assert Settings(log_level="LOUD").log_level == "INFO"

    def test_environment_flags(self):
        assert Settings(app_env="production").is_production
        assert Settings().is_development
