import logging
from dataclasses import dataclass, field

from app.core.config import LanguageDetectionSettings, get_settings
from app.core.exceptions import LanguageError
from app.models.schemas import Language
from app.services.language.ngram import LanguageScorer
from app.services.language.profiles import LanguageRegistry, get_language_registry
from app.services.preprocessing.normalizer import TextNormalizer

logger = logging.getLogger(__name__)


@dataclass
class LanguageDetectionResult:
    """Outcome of language detection."""

    language: Language
    confidence: float
    ranking: list[tuple[Language, float]] = field(default_factory=list)


class LanguageDetector:
    """
    Ranks candidate plaintext languages for a text.

    Each language with a model is scored by a blend of quadgram fit and
    monogram fit. Languages that are easily confused with their neighbours
    have their margin over the weakest candidate scaled down.
    """

    LATIN_GROUP = frozenset({Language.FRENCH, Language.ITALIAN, Language.PORTUGUESE})

    def __init__(
        self,
        registry: LanguageRegistry | None = None,
        settings: LanguageDetectionSettings | None = None,
    ):
        self.registry = registry or get_language_registry()
        self.settings = settings or get_settings().language_detection
        self._scorers: dict[Language, LanguageScorer] = {}

    def _scorer(self, language: Language) -> LanguageScorer:
        if language not in self._scorers:
            self._scorers[language] = LanguageScorer(language, self.registry)
        return self._scorers[language]

    def _penalty(self, language: Language) -> float:
        if language in self.LATIN_GROUP:
            return self.settings.latin_penalty
        if language == Language.GERMAN:
            return self.settings.german_penalty
        return 1.0

    def raw_scores(self, clean_text: str) -> dict[Language, float]:
        """Unpenalized blend of n-gram and monogram fit per language."""
        weight = self.settings.ngram_weight
        scores = {}
        for language in self.registry.available_languages():
            scorer = self._scorer(language)
            ngram_fit = scorer.score_normalized(clean_text)
            chi_per_letter = scorer.chi_squared(clean_text) / len(clean_text)
            monogram_fit = 1.0 / (1.0 + 5.0 * chi_per_letter)
            scores[language] = weight * ngram_fit + (1 - weight) * monogram_fit
        return scores

    def detect(self, text: str, requested: Language | str | None = None) -> LanguageDetectionResult:
        """
        Detect the most likely language of a text.

        Args:
            text: Text to examine
            requested: Language the caller asked for, promoted when it is
                competitive or has no model to compete with

        Returns:
            Detection result with the full ranking
        """
        try:
            return self._detect(text, requested)
        except (LanguageError, OSError, ValueError) as exc:
            logger.warning("Language detection failed, defaulting to english: %s", exc)
            return LanguageDetectionResult(language=Language.ENGLISH, confidence=0.0)

    def _detect(self, text: str, requested: Language | str | None) -> LanguageDetectionResult:
        clean = TextNormalizer.clean(text)
        if not clean:
            return LanguageDetectionResult(language=Language.ENGLISH, confidence=0.0)

        raw = self.raw_scores(clean)
        if not raw:
            return LanguageDetectionResult(language=Language.ENGLISH, confidence=0.0)

        baseline = min(raw.values())
        adjusted = {
            lang: baseline + (score - baseline) * self._penalty(lang)
            for lang, score in raw.items()
        }
        ranking = sorted(adjusted.items(), key=lambda item: item[1], reverse=True)

        ranking = self._resolve_near_tie(ranking)
        if requested is not None:
            ranking = self._promote_requested(ranking, self.registry.coerce(requested))

        top_language, top_score = ranking[0]
        logger.debug("Detected %s (score %.3f)", top_language.value, top_score)
        return LanguageDetectionResult(
            language=top_language,
            confidence=max(0.0, min(1.0, top_score)),
            ranking=ranking,
        )

    def _resolve_near_tie(self, ranking: list[tuple[Language, float]]) -> list[tuple[Language, float]]:
        if len(ranking) < 2:
            return ranking

        top_language, top_score = ranking[0]
        second_score = ranking[1][1]
        if top_score <= 0 or (top_score - second_score) >= self.settings.ambiguity_margin * top_score:
            return ranking
        if self._penalty(top_language) == 1.0:
            return ranking

        for idx, (language, score) in enumerate(ranking[1:], start=1):
            if self._penalty(language) == 1.0 and score > self.settings.reprioritize_ratio * top_score:
                logger.debug("Near tie, preferring %s over %s", language.value, top_language.value)
                return [ranking[idx]] + ranking[:idx] + ranking[idx + 1:]
        return ranking

    def _promote_requested(
        self,
        ranking: list[tuple[Language, float]],
        requested: Language,
    ) -> list[tuple[Language, float]]:
        if requested == self.registry.DEFAULT_LANGUAGE or ranking[0][0] == requested:
            return ranking

        top_score = ranking[0][1]
        scores = dict(ranking)
        if requested not in scores:
            # No model to compete with, trust the caller
            return [(requested, top_score)] + ranking
        if scores[requested] >= self.settings.reprioritize_ratio * top_score:
            rest = [item for item in ranking if item[0] != requested]
            return [(requested, scores[requested])] + rest
        return ranking
