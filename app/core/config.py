import logging
from functools import lru_cache
from typing import Any, Literal

from pydantic import BaseModel, Field, ValidationError, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class FailSafeModel(BaseModel):
    """
    Settings group whose fields fall back to their defaults.

    A malformed or out-of-range value never aborts startup: the field keeps
    its documented default and a warning is logged instead.
    """

    @field_validator("*", mode="wrap")
    @classmethod
    def _fall_back_to_default(cls, value: Any, handler: Any, info: ValidationInfo) -> Any:
        try:
            return handler(value)
        except ValidationError:
            field = cls.model_fields[info.field_name]
            default = field.get_default(call_default_factory=True)
            logger.warning(
                "Invalid value %r for %s.%s, using default %r",
                value,
                cls.__name__,
                info.field_name,
                default,
            )
            return default


# ============================================================================
# Threshold groups
# ============================================================================


class FamilyWeights(FailSafeModel):
    """Additive contribution to each of the five family scores."""

    monoalphabetic: float = 0.0
    caesar: float = 0.0
    vigenere: float = 0.0
    transposition: float = 0.0
    random: float = 0.0


def _weights(**kwargs: float):
    return Field(default_factory=lambda: FamilyWeights(**kwargs))


class ClassifierSettings(FailSafeModel):
    """Decision-table constants for the cipher classifier."""

    min_text_length: int = Field(default=20, ge=1)
    polybius_min_pairs: int = Field(default=5, ge=1)
    polybius_min_ratio: float = Field(default=0.8, ge=0.0, le=1.0)
    polybius_low: int = Field(default=11, ge=0)
    polybius_high: int = Field(default=55, ge=0)

    # Length bands
    short_text_length: int = Field(default=50, ge=1)
    long_text_length: int = Field(default=150, ge=1)

    # Normalized IoC bands (x26) per length band
    ic_high_short: float = Field(default=1.2, gt=0.0)
    ic_high_medium: float = Field(default=1.4, gt=0.0)
    ic_high_long: float = Field(default=1.5, gt=0.0)
    ic_mid_short: float = Field(default=0.8, gt=0.0)
    ic_mid_medium: float = Field(default=1.1, gt=0.0)
    ic_mid_long: float = Field(default=1.2, gt=0.0)
    ic_high_weights: FamilyWeights = _weights(monoalphabetic=1.0, caesar=0.9, transposition=0.6)
    ic_mid_short_weights: FamilyWeights = _weights(monoalphabetic=0.7, caesar=0.8, vigenere=0.4)
    ic_mid_weights: FamilyWeights = _weights(monoalphabetic=0.3, vigenere=0.9)
    ic_low_short_weights: FamilyWeights = _weights(monoalphabetic=0.5, caesar=0.6, vigenere=0.3)
    ic_low_weights: FamilyWeights = _weights(vigenere=0.7, random=0.8)

    # Caesar test
    caesar_short_shifts: list[int] = Field(default_factory=lambda: [1, 2, 3, 4, 5, 7, 13, 21, 23, 25])
    caesar_improvement_short: float = Field(default=0.50, ge=0.0, le=1.0)
    caesar_improvement_medium: float = Field(default=0.40, ge=0.0, le=1.0)
    caesar_improvement_long: float = Field(default=0.30, ge=0.0, le=1.0)
    caesar_max_chi_per_letter: float = Field(default=1.0, gt=0.0)
    caesar_boost: float = Field(default=1.2, ge=0.0)
    caesar_mono_factor: float = Field(default=0.7, ge=0.0)
    caesar_vigenere_factor: float = Field(default=1.5, ge=0.0)
    caesar_transposition_factor: float = Field(default=0.5, ge=0.0)

    # Kasiski reliability
    kasiski_min_length: int = Field(default=60, ge=1)
    kasiski_max_ic_short: float = Field(default=1.3, gt=0.0)
    kasiski_max_ic: float = Field(default=1.6, gt=0.0)
    kasiski_floor_short: float = Field(default=0.3, ge=0.0, le=1.0)
    kasiski_floor_medium: float = Field(default=0.2, ge=0.0, le=1.0)
    kasiski_floor_long: float = Field(default=0.1, ge=0.0, le=1.0)
    kasiski_strong_score: float = Field(default=0.3, ge=0.0, le=1.0)
    kasiski_strong_weights: FamilyWeights = _weights(vigenere=1.2, monoalphabetic=-0.5, caesar=-0.5)
    kasiski_weak_weights: FamilyWeights = _weights(vigenere=0.6)
    no_kasiski_short_weights: FamilyWeights = _weights(caesar=0.6, monoalphabetic=0.5)
    no_kasiski_weights: FamilyWeights = _weights(monoalphabetic=0.5, caesar=0.4)

    # Periodic analysis
    periodic_min_length: int = Field(default=60, ge=1)
    autocorrelation_min_length: int = Field(default=80, ge=1)
    periodic_poly_weights: FamilyWeights = _weights(vigenere=0.5)
    periodic_mono_weights: FamilyWeights = _weights(monoalphabetic=0.3, caesar=0.2)

    # Entropy bands (bits)
    entropy_high: float = Field(default=4.4, gt=0.0)
    entropy_low: float = Field(default=3.8, gt=0.0)
    entropy_high_weights: FamilyWeights = _weights(random=0.5, vigenere=0.2)
    entropy_mid_weights: FamilyWeights = _weights(monoalphabetic=0.3, transposition=0.3)
    entropy_low_weights: FamilyWeights = _weights(monoalphabetic=0.3, caesar=0.3)

    # Dictionary coverage of the ciphertext itself
    dictionary_bonus_coverage: float = Field(default=0.5, ge=0.0, le=1.0)
    dictionary_penalty_coverage: float = Field(default=0.2, ge=0.0, le=1.0)
    dictionary_mono_ic: float = Field(default=1.5, gt=0.0)
    dictionary_transposition_ic: float = Field(default=1.2, gt=0.0)
    dictionary_mono_weights: FamilyWeights = _weights(monoalphabetic=0.4, caesar=0.3, random=-0.3)
    dictionary_transposition_weights: FamilyWeights = _weights(transposition=0.3, random=-0.3)
    dictionary_miss_weights: FamilyWeights = _weights(vigenere=0.2, random=0.2)

    # Further single-signal rules
    short_text_weights: FamilyWeights = _weights(random=0.1, caesar=0.3)
    long_high_ic: float = Field(default=1.4, gt=0.0)
    long_high_ic_min_length: int = Field(default=100, ge=1)
    long_high_ic_weights: FamilyWeights = _weights(caesar=0.8, monoalphabetic=0.7, vigenere=-0.6)
    no_repetition_ic: float = Field(default=1.6, gt=0.0)
    no_repetition_weights: FamilyWeights = _weights(monoalphabetic=0.3, caesar=0.2)
    frequency_correlation_threshold: float = Field(default=0.97, ge=-1.0, le=1.0)
    frequency_correlation_weights: FamilyWeights = _weights(monoalphabetic=0.1)

    # Cross-family adjustment
    transposition_chi_per_letter: float = Field(default=0.35, gt=0.0)
    transposition_max_ngram: float = Field(default=0.55, ge=0.0, le=1.0)
    transposition_max_coverage: float = Field(default=0.2, ge=0.0, le=1.0)
    transposition_bonus: float = Field(default=1.5, ge=0.0)
    transposition_suppression: float = Field(default=0.5, ge=0.0, le=1.0)
    baconian_bonus: float = Field(default=0.4, ge=0.0)
    mono_over_caesar_ratio: float = Field(default=1.05, ge=1.0)

    # Output
    min_confidence: float = Field(default=0.2, ge=0.0, le=1.0)
    fallback_confidence: float = Field(default=0.5, ge=0.0, le=1.0)


class ScoringSettings(FailSafeModel):
    """N-gram scoring constants."""

    floor: float = Field(default=-10.0, lt=0.0)
    search_floor: float = Field(default=-10.0, lt=0.0)
    window_low: float = Field(default=-10.0, lt=0.0)
    window_high: float = Field(default=-6.0, lt=0.0)


class SearchSettings(FailSafeModel):
    """Local search parameters."""

    hill_climb_iterations: int = Field(default=5000, ge=1)
    annealing_iterations: int = Field(default=20000, ge=1)
    restarts: int = Field(default=2, ge=1)
    initial_temperature: float = Field(default=20.0, gt=0.0)
    cooling_rate: float = Field(default=0.9999, gt=0.0, lt=1.0)
    min_temperature: float = Field(default=0.01, gt=0.0)
    progress_every: int = Field(default=500, ge=1)


class PolyalphabeticSettings(FailSafeModel):
    """Polyalphabetic solver parameters."""

    default_key_lengths: list[int] = Field(default_factory=lambda: [3, 4, 5])
    max_key_length: int = Field(default=20, ge=2)
    top_key_lengths: int = Field(default=3, ge=1)
    early_accept_coverage: float = Field(default=0.7, ge=0.0, le=1.0)
    beaufort_min_length: int = Field(default=50, ge=1)
    quagmire_min_length: int = Field(default=100, ge=1)
    porta_fallback_score: float = Field(default=0.5, ge=0.0, le=1.0)
    variant_tie_ratio: float = Field(default=0.05, ge=0.0, le=1.0)


class OrchestratorSettings(FailSafeModel):
    """Strategy execution and early-exit constants."""

    default_max_time_ms: int = Field(default=60_000, ge=1)
    early_exit_confidence: float = Field(default=0.9, ge=0.0, le=1.0)
    verify_min_coverage: float = Field(default=0.30, ge=0.0, le=1.0)
    verify_min_dict_confidence: float = Field(default=0.40, ge=0.0, le=1.0)


class AggregatorSettings(FailSafeModel):
    """Result aggregation and final labelling constants."""

    min_ngram_score: float = Field(default=0.6, ge=0.0, le=1.0)
    ngram_weight: float = Field(default=0.7, ge=0.0, le=1.0)
    dict_weight: float = Field(default=0.3, ge=0.0, le=1.0)
    short_text_length: int = Field(default=50, ge=1)
    short_text_pattern_weight: float = Field(default=0.7, ge=0.0, le=1.0)

    poly_long_text_length: int = Field(default=100, ge=1)
    poly_long_confidence: float = Field(default=0.50, ge=0.0, le=1.0)
    poly_long_ngram: float = Field(default=0.50, ge=0.0, le=1.0)
    poly_long_dict: float = Field(default=0.10, ge=0.0, le=1.0)
    poly_short_confidence: float = Field(default=0.45, ge=0.0, le=1.0)
    poly_short_ngram: float = Field(default=0.45, ge=0.0, le=1.0)
    poly_short_dict: float = Field(default=0.05, ge=0.0, le=1.0)

    good_result_confidence: float = Field(default=0.45, ge=0.0, le=1.0)
    transposition_score_margin: float = Field(default=0.10, ge=0.0, le=1.0)
    transposition_dict_margin: float = Field(default=0.05, ge=0.0, le=1.0)

    validation_min_coverage: float = Field(default=0.30, ge=0.0, le=1.0)
    validation_min_confidence: float = Field(default=0.40, ge=0.0, le=1.0)
    validation_weight: float = Field(default=0.4, ge=0.0, le=1.0)
    unvalidated_penalty: float = Field(default=0.8, ge=0.0, le=1.0)


class LanguageDetectionSettings(FailSafeModel):
    """Language ranking penalties and tie handling."""

    latin_penalty: float = Field(default=0.6, ge=0.0, le=1.0)
    german_penalty: float = Field(default=0.8, ge=0.0, le=1.0)
    ambiguity_margin: float = Field(default=0.05, ge=0.0, le=1.0)
    reprioritize_ratio: float = Field(default=0.98, ge=0.0, le=1.0)
    ngram_weight: float = Field(default=0.6, ge=0.0, le=1.0)


# ============================================================================
# Application settings
# ============================================================================


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Cryptanalysis Platform"
    app_env: Literal["development", "staging", "production"] = "development"
    debug: bool = False
    api_v1_prefix: str = "/api/v1"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"

    # Analysis settings
    max_ciphertext_length: int = 100_000
    default_language: str = "english"
    data_dir: str | None = None

    # Threshold groups
    classifier: ClassifierSettings = Field(default_factory=ClassifierSettings)
    scoring: ScoringSettings = Field(default_factory=ScoringSettings)
    search: SearchSettings = Field(default_factory=SearchSettings)
    polyalphabetic: PolyalphabeticSettings = Field(default_factory=PolyalphabeticSettings)
    orchestrator: OrchestratorSettings = Field(default_factory=OrchestratorSettings)
    aggregator: AggregatorSettings = Field(default_factory=AggregatorSettings)
    language_detection: LanguageDetectionSettings = Field(
        default_factory=LanguageDetectionSettings
    )

    @field_validator("*", mode="wrap")
    @classmethod
    def _fall_back_to_default(cls, value: Any, handler: Any, info: ValidationInfo) -> Any:
        try:
            return handler(value)
        except ValidationError:
            field = cls.model_fields[info.field_name]
            default = field.get_default(call_default_factory=True)
            logger.warning(
                "Invalid value %r for setting %s, using default %r",
                value,
                info.field_name,
                default,
            )
            return default

    @property
    def is_development(self) -> bool:
        return self.app_env == "development"

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
