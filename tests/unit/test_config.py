"""Unit tests for configuration schema."""

import pytest
from pydantic import ValidationError

from civic_dedup.config import (
    DEFAULT_KEYWORDS,
    Config,
    DetectionConfig,
    get_config,
    reload_config,
)

pytestmark = [pytest.mark.unit, pytest.mark.config]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep the developer's environment out of the settings under test."""
    for name in (
        "SUPABASE_URL", "SUPABASE_ANON_KEY", "SUPABASE_TIMEOUT",
        "GOOGLE_VISION_API_KEY", "LOG_LEVEL",
        "DUPLICATE_TIMEOUT_SECONDS", "DUPLICATE_DUPLICATE_THRESHOLD",
        "DUPLICATE_IMAGE_SIMILARITY_ENABLED", "DUPLICATE_IMAGE_WEIGHT",
    ):
        monkeypatch.delenv(name, raising=False)


class TestDetectionConfig:
    """Test detection tunables."""

    def test_defaults(self):
        config = DetectionConfig(_env_file=None)

        assert config.location_weight == 0.5
        assert config.text_weight == 0.4
        assert config.category_weight == 0.1
        assert config.duplicate_threshold == 0.7
        assert config.max_results == 2
        assert config.proximity_radius_km == 0.05
        assert config.category_bonus == 0.3
        assert config.window_days == 7
        assert config.max_candidates == 20
        assert config.excluded_status == "resolved"
        assert config.timeout_seconds == 5.0
        assert config.image_similarity_enabled is False
        assert config.keywords == DEFAULT_KEYWORDS

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("DUPLICATE_TIMEOUT_SECONDS", "2.5")
        monkeypatch.setenv("DUPLICATE_DUPLICATE_THRESHOLD", "0.8")

        config = DetectionConfig(_env_file=None)

        assert config.timeout_seconds == 2.5
        assert config.duplicate_threshold == 0.8

    def test_weights_must_not_exceed_one(self):
        with pytest.raises(ValidationError):
            DetectionConfig(location_weight=0.6, text_weight=0.4, category_weight=0.1)

    def test_image_weight_counts_only_when_enabled(self):
        config = DetectionConfig(image_weight=0.2)
        assert "image" not in config.weights()

        with pytest.raises(ValidationError):
            DetectionConfig(image_weight=0.2, image_similarity_enabled=True)

    def test_weights_with_image(self):
        config = DetectionConfig(
            location_weight=0.4, text_weight=0.3, category_weight=0.1,
            image_weight=0.2, image_similarity_enabled=True,
        )
        assert config.weights() == {"location": 0.4, "text": 0.3, "category": 0.1, "image": 0.2}

    def test_range_validation(self):
        with pytest.raises(ValidationError):
            DetectionConfig(duplicate_threshold=1.5)
        with pytest.raises(ValidationError):
            DetectionConfig(timeout_seconds=0)
        with pytest.raises(ValidationError):
            DetectionConfig(max_candidates=50)
        with pytest.raises(ValidationError):
            DetectionConfig(proximity_radius_km=0)

    def test_keywords_normalized(self):
        config = DetectionConfig(keywords=(" Pothole ", "LEAK", ""))
        assert config.keywords == ("pothole", "leak")

    def test_excluded_status(self):
        assert DetectionConfig(excluded_status=" Resolved ").excluded_status == "resolved"
        with pytest.raises(ValidationError):
            DetectionConfig(excluded_status="  ")

    def test_frozen(self):
        config = DetectionConfig()
        with pytest.raises(ValidationError):
            config.duplicate_threshold = 0.1


class TestConfig:
    """Test deployment configuration."""

    def test_defaults(self):
        config = Config(_env_file=None)

        assert config.supabase_url == ""
        assert config.supabase_issues_table == "issues"
        assert config.log_level == "INFO"
        assert config.store_configured() is False

    def test_url_trailing_slash_stripped(self):
        config = Config(supabase_url="https://abc.supabase.co/", supabase_anon_key="key", _env_file=None)
        assert config.supabase_url == "https://abc.supabase.co"
        assert config.store_configured() is True

    def test_log_level_validation(self):
        assert Config(log_level="debug", _env_file=None).log_level == "DEBUG"
        with pytest.raises(ValidationError):
            Config(log_level="LOUD", _env_file=None)

    def test_detection_reads_environment(self, monkeypatch):
        monkeypatch.setenv("DUPLICATE_TIMEOUT_SECONDS", "3")
        assert Config(_env_file=None).detection().timeout_seconds == 3.0


class TestValidateConfiguration:
    """Test cross-field configuration checks."""

    def test_valid_configuration(self):
        config = Config(supabase_url="https://abc.supabase.co", supabase_anon_key="key", _env_file=None)
        assert config.validate_configuration(DetectionConfig()) == []

    def test_bad_url_scheme(self):
        config = Config(supabase_url="abc.supabase.co", supabase_anon_key="key", _env_file=None)
        issues = config.validate_configuration(DetectionConfig())
        assert any("http(s)" in issue for issue in issues)

    def test_url_without_key(self):
        config = Config(supabase_url="https://abc.supabase.co", _env_file=None)
        issues = config.validate_configuration(DetectionConfig())
        assert any("SUPABASE_ANON_KEY" in issue for issue in issues)

    def test_image_similarity_requires_vision_key(self):
        detection = DetectionConfig(
            location_weight=0.4, text_weight=0.3, category_weight=0.1,
            image_weight=0.2, image_similarity_enabled=True,
        )
        issues = Config(_env_file=None).validate_configuration(detection)
        assert any("GOOGLE_VISION_API_KEY" in issue for issue in issues)

    def test_image_similarity_with_zero_weight(self):
        detection = DetectionConfig(image_similarity_enabled=True)
        config = Config(google_vision_api_key="key", _env_file=None)
        issues = config.validate_configuration(detection)
        assert any("DUPLICATE_IMAGE_WEIGHT" in issue for issue in issues)

    def test_store_timeout_must_fit_deadline(self):
        config = Config(
            supabase_url="https://abc.supabase.co", supabase_anon_key="key",
            supabase_timeout=6.0, _env_file=None,
        )
        issues = config.validate_configuration(DetectionConfig())
        assert any("SUPABASE_TIMEOUT" in issue for issue in issues)

    def test_low_threshold_warning(self):
        issues = Config(_env_file=None).validate_configuration(DetectionConfig(duplicate_threshold=0.3))
        assert any("DUPLICATE_THRESHOLD" in issue for issue in issues)


class TestGlobalConfig:
    """Test global configuration accessors."""

    def test_get_config_is_cached(self):
        reload_config()
        assert get_config() is get_config()

    def test_reload_config_picks_up_environment(self, monkeypatch):
        monkeypatch.setenv("SUPABASE_ISSUES_TABLE", "reports")
        assert reload_config().supabase_issues_table == "reports"
        monkeypatch.delenv("SUPABASE_ISSUES_TABLE")
        reload_config()
