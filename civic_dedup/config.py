"""Configuration management using Pydantic BaseSettings.

Two layers live here:

* ``DetectionConfig`` groups every tunable of the duplicate-detection engine
  (signal weights, thresholds, deadlines, candidate window, keyword list) into
  one injectable value. Tests build it directly to exercise boundary values.
* ``Config`` carries the deployment settings (issue store, vision endpoint,
  logging) and hands out a ``DetectionConfig`` via :meth:`Config.detection`.
"""
from typing import Dict, List, Tuple

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings


DEFAULT_KEYWORDS: Tuple[str, ...] = (
    "broken", "damaged", "pothole", "streetlight", "trash", "garbage", "water", "leak",
    "flooding", "drainage", "blocked", "overflowing", "faulty", "repair",
    "maintenance", "urgent", "dangerous", "safety", "hazard",
)

_ENV_SETTINGS = {
    "env_file": ".env",
    "env_file_encoding": "utf-8",
    "case_sensitive": False,
    "extra": "ignore",
}


class DetectionConfig(BaseSettings):
    """Tunables for one duplicate-detection engine.

    Every field can be overridden with a ``DUPLICATE_``-prefixed environment
    variable, e.g. ``DUPLICATE_TIMEOUT_SECONDS=2.5``.
    """

    # Signal weights
    location_weight: float = Field(0.5, ge=0.0, le=1.0, description="Weight of co-location")
    text_weight: float = Field(0.4, ge=0.0, le=1.0, description="Weight of description overlap")
    category_weight: float = Field(0.1, ge=0.0, le=1.0, description="Weight of category equality")
    image_weight: float = Field(0.0, ge=0.0, le=1.0, description="Weight of image similarity (when enabled)")

    # Decision
    duplicate_threshold: float = Field(0.7, ge=0.0, le=1.0, description="Composite score a candidate must exceed")
    max_results: int = Field(2, ge=1, le=20, description="Ranked candidates returned to the caller")

    # Location signal
    proximity_radius_km: float = Field(0.05, gt=0.0, le=10.0, description="Distance at which location similarity reaches 0")

    # Category signal
    category_bonus: float = Field(0.3, ge=0.0, le=1.0, description="Sub-score when both categories are equal")

    # Text signal
    min_token_length: int = Field(3, ge=1, le=20, description="Shorter tokens are ignored")
    keyword_weight: float = Field(2.0, ge=1.0, le=10.0, description="Weight of a domain keyword token")
    keywords: Tuple[str, ...] = Field(DEFAULT_KEYWORDS, description="Domain keywords weighted above plain tokens")

    # Candidate retrieval
    window_days: int = Field(7, ge=1, le=90, description="Only issues created within this window are candidates")
    max_candidates: int = Field(20, ge=1, le=20, description="Candidates fetched per check")
    excluded_status: str = Field("resolved", description="Issue status that never counts as a candidate")

    # Timeout guard
    timeout_seconds: float = Field(5.0, gt=0.0, le=60.0, description="Deadline for fetch + scoring")

    # Image extension point
    image_similarity_enabled: bool = Field(False, description="Score candidate photos (slow, calls the vision API)")

    model_config = {**_ENV_SETTINGS, "env_prefix": "DUPLICATE_", "frozen": True}

    @field_validator("keywords")
    @classmethod
    def normalize_keywords(cls, v):
        return tuple(k.strip().lower() for k in v if k and k.strip())

    @field_validator("excluded_status")
    @classmethod
    def validate_excluded_status(cls, v):
        if not v.strip():
            raise ValueError("excluded_status must not be empty")
        return v.strip().lower()

    @model_validator(mode="after")
    def validate_weights(self):
        total = self.location_weight + self.text_weight + self.category_weight
        if self.image_similarity_enabled:
            total += self.image_weight
        if total > 1.0 + 1e-9:
            raise ValueError(f"signal weights must sum to at most 1.0 (got {total:.3f})")
        return self

    def weights(self) -> Dict[str, float]:
        """Weight per signal name, as consumed by the score combiner."""
        weights = {
            "location": self.location_weight,
            "text": self.text_weight,
            "category": self.category_weight,
        }
        if self.image_similarity_enabled:
            weights["image"] = self.image_weight
        return weights


class Config(BaseSettings):
    """Deployment configuration for the duplicate checker."""

    # Issue store (Supabase PostgREST)
    supabase_url: str = Field("", description="Supabase project URL")
    supabase_anon_key: str = Field("", description="Supabase anon or service key")
    supabase_issues_table: str = Field("issues", description="Table holding reported issues")
    supabase_timeout: float = Field(4.0, gt=0.0, le=30.0, description="HTTP timeout for store requests in seconds")

    # Vision API (image similarity extension)
    google_vision_api_key: str = Field("", description="Google Vision API key")
    vision_endpoint: str = Field("https://vision.googleapis.com/v1/images:annotate", description="Image annotation endpoint")
    vision_timeout: float = Field(10.0, gt=0.0, le=60.0, description="HTTP timeout for vision requests in seconds")
    vision_max_labels: int = Field(10, ge=1, le=50, description="Labels requested per image")

    # Logging
    log_level: str = Field("INFO", description="Logging level")

    model_config = dict(_ENV_SETTINGS)

    @field_validator("log_level")
    @classmethod
    def validate_level(cls, v):
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in valid_levels:
            raise ValueError(f'Invalid log level: {v}. Valid options: {valid_levels}')
        return v.upper()

    @field_validator("supabase_url")
    @classmethod
    def strip_trailing_slash(cls, v):
        return v.rstrip("/")

    def detection(self) -> DetectionConfig:
        """Build the detection tunables from the environment."""
        return DetectionConfig()

    def store_configured(self) -> bool:
        return bool(self.supabase_url and self.supabase_anon_key)

    def validate_configuration(self, detection: DetectionConfig = None) -> List[str]:
        """Validate the complete configuration and return any issues."""
        issues = []
        detection = detection or self.detection()

        if self.supabase_url and not self.supabase_url.startswith(("http://", "https://")):
            issues.append("SUPABASE_URL must be an http(s) URL")
        if self.supabase_url and not self.supabase_anon_key:
            issues.append("SUPABASE_ANON_KEY is required when SUPABASE_URL is set")

        if detection.image_similarity_enabled:
            if not self.google_vision_api_key:
                issues.append("GOOGLE_VISION_API_KEY is required when DUPLICATE_IMAGE_SIMILARITY_ENABLED=true")
            if detection.image_weight == 0.0:
                issues.append("DUPLICATE_IMAGE_WEIGHT is 0, image similarity will not affect scores")

        if self.store_configured() and self.supabase_timeout >= detection.timeout_seconds:
            issues.append("SUPABASE_TIMEOUT should be lower than DUPLICATE_TIMEOUT_SECONDS")

        if detection.duplicate_threshold < 0.5:
            issues.append("DUPLICATE_THRESHOLD is very low, legitimate reports may be flagged")

        return issues

    def log_configuration(self, detection: DetectionConfig = None) -> None:
        """Log the current configuration (sanitized)."""
        from civic_dedup.utils.logger import log_info

        detection = detection or self.detection()
        log_info("Configuration loaded",
                 store_configured=self.store_configured(),
                 issues_table=self.supabase_issues_table,
                 weights=detection.weights(),
                 threshold=detection.duplicate_threshold,
                 radius_km=detection.proximity_radius_km,
                 timeout_seconds=detection.timeout_seconds,
                 window_days=detection.window_days,
                 max_candidates=detection.max_candidates,
                 image_similarity=detection.image_similarity_enabled,
                 log_level=self.log_level)


# Global configuration instance (lazy loading)
_config = None


def get_config() -> Config:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = Config()
    return _config


def reload_config() -> Config:
    """Reload configuration from environment variables."""
    global _config
    _config = Config()
    return _config
