import logging

from app.core.exceptions import DictionaryUnavailableError
from app.models.schemas import Language, ValidationReport
from app.services.language.profiles import LanguageRegistry, get_language_registry
from app.services.language.segmenter import WordLookup, WordSegmenter

logger = logging.getLogger(__name__)


class WordDictionary:
    """Hash-set backed word list."""

    def __init__(self, words: frozenset[str]):
        self._words = words

    def contains(self, word: str) -> bool:
        return word.upper() in self._words

    def __len__(self) -> int:
        return len(self._words)


class EmptyDictionary:
    """Stand-in used when a language ships no word list."""

    def contains(self, word: str) -> bool:
        return False

    def __len__(self) -> int:
        return 0


class DictionaryValidator:
    """
    Validates candidate plaintexts against a language word list.

    Space-free text made of one abnormally long token is segmented into
    words before it is checked.
    """

    MIN_WORD_LENGTH = 3
    SEGMENT_THRESHOLD = 20

    def __init__(
        self,
        language: Language | str | None = None,
        registry: LanguageRegistry | None = None,
        require: bool = False,
    ):
        self.registry = registry or get_language_registry()
        self.language = self.registry.coerce(language)
        self.dictionary = self._build_dictionary(require)
        self.segmenter = WordSegmenter(self.dictionary)

    def _build_dictionary(self, require: bool) -> WordLookup:
        words = self.registry.words(self.language)
        if words is not None:
            return WordDictionary(words)

        # Scripts without a list still get checked against English words
        fallback = self.registry.DEFAULT_LANGUAGE
        if self.language != fallback:
            words = self.registry.words(fallback)
            if words is not None:
                logger.warning(
                    "No dictionary for %s, validating against %s",
                    self.language.value,
                    fallback.value,
                )
                return WordDictionary(words)

        if require:
            raise DictionaryUnavailableError(sorted({self.language.value, fallback.value}))

        logger.warning("No dictionary available, word validation disabled")
        return EmptyDictionary()

    @property
    def available(self) -> bool:
        return not isinstance(self.dictionary, EmptyDictionary)

    def contains(self, word: str) -> bool:
        return self.dictionary.contains(word)

    def tokenize(self, text: str) -> list[str]:
        """
        Split text into letter-only uppercase words.

        A single space-free token longer than the segmentation threshold is
        replaced by its dictionary segmentation when one exists.
        """
        words = ["".join(c for c in token if c.isalpha()).upper() for token in text.split()]
        words = [w for w in words if w]

        if len(words) == 1 and len(words[0]) > self.SEGMENT_THRESHOLD:
            segmented = self.segmenter.segment(words[0])
            if segmented:
                return segmented

        return words

    def word_score(self, text: str) -> float:
        """
        Fraction of words (3+ letters) found in the dictionary.

        Returns:
            Word coverage in [0, 1], 0.0 when there are no words
        """
        words = [w for w in self.tokenize(text) if len(w) >= self.MIN_WORD_LENGTH]
        if not words:
            return 0.0
        return sum(1 for w in words if self.dictionary.contains(w)) / len(words)

    def validate(self, text: str) -> ValidationReport:
        """
        Full dictionary validation of a candidate plaintext.

        Like ``word_score`` only words of 3+ letters are counted.

        Confidence weighs character coverage (40%), word coverage (30%),
        average valid word length (20%, saturating at 8 letters) and
        vocabulary richness (10%).
        """
        words = [w for w in self.tokenize(text) if len(w) >= self.MIN_WORD_LENGTH]
        if not words:
            return ValidationReport(
                word_coverage=0.0,
                char_coverage=0.0,
                confidence=0.0,
                is_valid=False,
                summary="No words found",
            )

        valid = [w for w in words if self.dictionary.contains(w)]
        total_chars = sum(len(w) for w in words)
        valid_chars = sum(len(w) for w in valid)

        word_coverage = len(valid) / len(words)
        char_coverage = valid_chars / total_chars if total_chars else 0.0
        avg_word_length = valid_chars / len(valid) if valid else 0.0
        richness = len(set(valid)) / len(valid) if valid else 0.0

        confidence = min(
            1.0,
            char_coverage * 0.4
            + word_coverage * 0.3
            + min(avg_word_length / 8, 1.0) * 0.2
            + richness * 0.1,
        )

        return ValidationReport(
            word_coverage=word_coverage,
            char_coverage=char_coverage,
            avg_word_length=avg_word_length,
            vocabulary_richness=richness,
            confidence=confidence,
            is_valid=confidence > 0.5,
            valid_words=len(valid),
            total_words=len(words),
            summary=self._summary(confidence),
        )

    def _summary(self, confidence: float) -> str:
        pct = f"{confidence * 100:.0f}%"
        lang = self.language.value
        if confidence > 0.9:
            return f"Excellent match ({pct} confidence). Text appears to be valid {lang}."
        if confidence > 0.7:
            return f"Good match ({pct} confidence). Most words are valid {lang}."
        if confidence > 0.5:
            return f"Moderate match ({pct} confidence). Some valid {lang} words found."
        if confidence > 0.3:
            return f"Weak match ({pct} confidence). Few valid words found."
        return f"Poor match ({pct} confidence). Text does not appear to be valid {lang}."

    def has_valid_words(self, text: str, min_words: int = 3) -> bool:
        """Quick rejection check for obviously wrong decryptions."""
        return self.validate(text).valid_words >= min_words

    def segment_with_confidence(self, text: str) -> tuple[str, float]:
        """
        Segment text and score the segmentation.

        Returns:
            Tuple of (space separated text, 0.7 * word + 0.3 * char coverage)
        """
        clean = "".join(c for c in text if c.isalpha()).upper()
        words = self.segmenter.segment(clean) if clean else None
        segmented = " ".join(words) if words else clean
        report = self.validate(segmented)
        return segmented, 0.7 * report.word_coverage + 0.3 * report.char_coverage
