import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, ClassVar

from app.core.config import Settings, get_settings
from app.models.schemas import CipherFamily, DecryptionResult, Language
from app.services.language.dictionary import DictionaryValidator
from app.services.language.ngram import LanguageScorer
from app.services.language.profiles import LanguageRegistry, get_language_registry
from app.services.preprocessing.normalizer import TextNormalizer

logger = logging.getLogger(__name__)


@dataclass
class Evaluation:
    """Language fit of one candidate plaintext."""

    ngram_avg: float
    ngram_score: float
    word_coverage: float

    @property
    def combined(self) -> float:
        return 0.7 * self.ngram_score + 0.3 * self.word_coverage


class Strategy(ABC):
    """
    Base class for a single attack.

    A strategy takes raw ciphertext and returns its best DecryptionResult.
    Ordinary failure (nothing plausible found) is reported as a result with
    zero confidence and an error message, never as an exception.
    """

    name: ClassVar[str]
    method: ClassVar[str]
    cipher_type: ClassVar[CipherFamily] = CipherFamily.MONOALPHABETIC

    # Word coverage tiers mapped to confidence, best first
    COVERAGE_BANDS: ClassVar[list[tuple[float, float]]] = [
        (0.8, 0.98),
        (0.7, 0.95),
        (0.6, 0.90),
        (0.5, 0.85),
    ]

    def __init__(
        self,
        language: Language | str | None = None,
        registry: LanguageRegistry | None = None,
        settings: Settings | None = None,
        dictionary: DictionaryValidator | None = None,
    ):
        self.registry = registry or get_language_registry()
        self.settings = settings or get_settings()
        self.scorer = LanguageScorer(language, self.registry, self.settings.scoring)
        self.language = self.scorer.language
        self.dictionary = dictionary or DictionaryValidator(self.language, self.registry)

    def applicable(self, ciphertext: str) -> bool:
        """Cheap check whether the attack makes sense for this input."""
        return True

    @abstractmethod
    def solve(self, ciphertext: str) -> DecryptionResult:
        """Run the attack and return the best candidate."""
        pass

    # ========================================================================
    # Helpers
    # ========================================================================

    def evaluate(self, plaintext: str, words_from: str | None = None) -> Evaluation:
        """
        Score a candidate.

        Args:
            plaintext: Candidate plaintext, any layout
            words_from: Text to take word coverage from when it differs
                from the plaintext (letters-only transposition output)
        """
        clean = TextNormalizer.clean(plaintext)
        avg = self.scorer.raw_score(clean, min(4, len(clean)) or 4)
        return Evaluation(
            ngram_avg=avg,
            ngram_score=self.scorer.normalize(avg),
            word_coverage=self.dictionary.word_score(words_from if words_from is not None else plaintext),
        )

    def confidence_for(self, evaluation: Evaluation) -> float:
        """Coverage tiers first, then the n-gram fit."""
        for threshold, confidence in self.COVERAGE_BANDS:
            if evaluation.word_coverage > threshold:
                return confidence
        if evaluation.ngram_score >= 0.95:
            return 0.8
        if evaluation.ngram_score >= 0.8:
            return 0.65
        return 0.5 * evaluation.ngram_score

    def result(
        self,
        plaintext: str,
        key: Any,
        evaluation: Evaluation,
        confidence: float | None = None,
        method: str | None = None,
        **extra: Any,
    ) -> DecryptionResult:
        if confidence is None:
            confidence = self.confidence_for(evaluation)
        return DecryptionResult(
            plaintext=plaintext,
            method=method or self.method,
            key=key,
            score=evaluation.ngram_avg,
            ngram_score=evaluation.ngram_score,
            word_coverage=evaluation.word_coverage,
            confidence=max(0.0, min(1.0, confidence)),
            cipher_type=extra.pop("cipher_type", self.cipher_type),
            language=self.language,
            **extra,
        )

    def failure(self, ciphertext: str, error: str, method: str | None = None) -> DecryptionResult:
        logger.debug("%s produced nothing: %s", self.name, error)
        return DecryptionResult(
            plaintext=ciphertext,
            method=method or self.method,
            confidence=0.0,
            score=self.settings.scoring.floor,
            cipher_type=self.cipher_type,
            language=self.language,
            error=error,
        )
