from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# ============================================================================
# Enums
# ============================================================================


class CipherFamily(str, Enum):
    """Cipher families reported by the classifier."""

    MONOALPHABETIC = "monoalphabetic-substitution"
    CAESAR = "caesar-shift"
    VIGENERE_LIKE = "vigenere-like"
    TRANSPOSITION = "transposition"
    RANDOM = "random-unknown"
    UNKNOWN = "unknown"


class CipherType(str, Enum):
    """Cipher primitives available in the engine registry."""

    CAESAR = "caesar"
    ATBASH = "atbash"
    ROT47 = "rot47"
    SIMPLE_SUBSTITUTION = "simple_substitution"
    POLYBIUS = "polybius"
    BACONIAN = "baconian"
    VIGENERE = "vigenere"
    BEAUFORT = "beaufort"
    AUTOKEY = "autokey"
    PORTA = "porta"
    GRONSFELD = "gronsfeld"
    QUAGMIRE1 = "quagmire1"
    QUAGMIRE2 = "quagmire2"
    QUAGMIRE3 = "quagmire3"
    QUAGMIRE4 = "quagmire4"
    RAIL_FENCE = "rail_fence"
    AMSCO = "amsco"


class Language(str, Enum):
    """Supported plaintext languages."""

    ENGLISH = "english"
    SPANISH = "spanish"
    FRENCH = "french"
    GERMAN = "german"
    ITALIAN = "italian"
    PORTUGUESE = "portuguese"
    RUSSIAN = "russian"
    CHINESE = "chinese"


# ============================================================================
# Classification Schemas
# ============================================================================


class FamilyCandidate(BaseModel):
    """A ranked cipher-family hypothesis."""

    type: CipherFamily
    confidence: float = Field(ge=0.0, le=1.0)
    suggested_key_length: int | None = None
    reason: str | None = None


class KeyLengthSuggestion(BaseModel):
    """A Kasiski key-length suggestion."""

    length: int = Field(ge=2)
    score: float = Field(ge=0.0, le=1.0)


class ClassificationStats(BaseModel):
    """Statistics block returned alongside the family ranking."""

    length: int
    ic: float
    entropy: float
    has_repetitions: bool
    suggested_key_lengths: list[KeyLengthSuggestion] = []
    chi_squared: float | None = None
    repetition_score: float = 0.0
    word_coverage: float = 0.0
    frequency_correlation: float = 0.0


class ClassificationResult(BaseModel):
    """Output of the cipher classifier."""

    model_config = ConfigDict(from_attributes=True)

    candidates: list[FamilyCandidate]
    stats: ClassificationStats
    language: Language = Language.ENGLISH

    @property
    def top(self) -> FamilyCandidate:
        return self.candidates[0]


# ============================================================================
# Decryption Schemas
# ============================================================================


class ValidationReport(BaseModel):
    """Dictionary validation of a candidate plaintext."""

    word_coverage: float = Field(ge=0.0, le=1.0)
    char_coverage: float = Field(ge=0.0, le=1.0)
    avg_word_length: float = 0.0
    vocabulary_richness: float = Field(default=0.0, ge=0.0, le=1.0)
    confidence: float = Field(ge=0.0, le=1.0)
    is_valid: bool
    valid_words: int = 0
    total_words: int = 0
    summary: str = ""


class DecryptionResult(BaseModel):
    """A candidate plaintext produced by one strategy."""

    plaintext: str
    method: str
    key: str | int | list[str] | None = None
    score: float = 0.0
    ngram_score: float = Field(default=0.0, ge=0.0, le=1.0)
    word_coverage: float = Field(default=0.0, ge=0.0, le=1.0)
    dict_confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    combined_score: float = Field(default=0.0, ge=0.0, le=1.0)
    cipher_type: CipherFamily | None = None
    key_length: int | None = None
    validated: bool = False
    is_transposition: bool = False
    language: Language = Language.ENGLISH
    error: str | None = None


class ProgressUpdate(BaseModel):
    """One snapshot yielded by the step form of auto-decryption."""

    stage: str
    message: str
    progress: float = Field(ge=0.0, le=100.0)
    result: DecryptionResult | None = None


class StrategyRun(BaseModel):
    """Bookkeeping for a single executed strategy."""

    name: str
    method: str | None = None
    confidence: float = 0.0
    elapsed_ms: float = 0.0
    error: str | None = None


class AutoDecryptResult(BaseModel):
    """Complete outcome of an auto-decryption."""

    best: DecryptionResult
    candidates: list[DecryptionResult] = []
    classification: ClassificationResult | None = None
    language: Language = Language.ENGLISH
    strategies_run: list[StrategyRun] = []
    elapsed_ms: float = 0.0
    early_exit: bool = False


# ============================================================================
# Request Schemas
# ============================================================================


class AnalyzeRequest(BaseModel):
    """Request schema for /analyze endpoint."""

    ciphertext: str = Field(min_length=1)
    language: Language | None = None


class AutoDecryptRequest(BaseModel):
    """Request schema for /decrypt endpoint."""

    ciphertext: str = Field(min_length=1)
    language: Language | None = None
    detect_language: bool = False
    try_multiple: bool = True
    max_time: int = Field(default=60_000, ge=100, le=600_000)
    use_dictionary: bool = True


class KeyedDecryptRequest(BaseModel):
    """Request schema for /decrypt/keyed endpoint."""

    ciphertext: str = Field(min_length=1)
    cipher_type: str
    key: str | int | None = None


class EncryptRequest(BaseModel):
    """Request schema for /encrypt endpoint."""

    plaintext: str = Field(min_length=1)
    cipher_type: str
    key: str | int | None = None


# ============================================================================
# Response Schemas
# ============================================================================


class LanguageScore(BaseModel):
    """Score of one language in a detection ranking."""

    language: Language
    score: float


class AnalyzeResponse(BaseModel):
    """Response schema for /analyze endpoint."""

    classification: ClassificationResult
    detected_language: Language
    language_ranking: list[LanguageScore] = []


class KeyedDecryptResponse(BaseModel):
    """Response schema for /decrypt/keyed endpoint."""

    plaintext: str
    cipher_type: CipherType
    key_used: str | int | None


class EncryptResponse(BaseModel):
    """Response schema for /encrypt endpoint."""

    ciphertext: str
    cipher_type: CipherType
    key_used: str | int | None


class LanguageInfo(BaseModel):
    """Availability of language resources."""

    language: Language
    has_model: bool
    has_dictionary: bool
    expected_ioc: float | None = None


# ============================================================================
# Error Schemas
# ============================================================================


class ErrorResponse(BaseModel):
    """Standard error response."""

    error: str
    message: str
    details: dict[str, Any] = Field(default_factory=dict)
