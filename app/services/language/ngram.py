import logging

from app.core.config import ScoringSettings, get_settings
from app.models.schemas import Language
from app.services.analysis.statistics import StatisticalAnalyzer
from app.services.language.profiles import LanguageProfile, LanguageRegistry, get_language_registry
from app.services.preprocessing.normalizer import TextNormalizer

logger = logging.getLogger(__name__)


class LanguageScorer:
    """
    Scores how much a text looks like a given language.

    Uses the log10 probabilities of overlapping n-grams. Unseen n-grams
    take a fixed floor so a single odd n-gram cannot dominate the score.
    """

    def __init__(
        self,
        language: Language | str | None = None,
        registry: LanguageRegistry | None = None,
        settings: ScoringSettings | None = None,
    ):
        self.registry = registry or get_language_registry()
        self.settings = settings or get_settings().scoring
        self.profile: LanguageProfile = self.registry.resolve(language)

    @property
    def language(self) -> Language:
        return self.profile.language

    def score(self, text: str, n: int = 4) -> float:
        """
        Average log10 probability per n-gram.

        Args:
            text: Text to score (cleaned internally)
            n: N-gram size (1-4)

        Returns:
            Average log probability, the floor for text shorter than n
        """
        return self.raw_score(TextNormalizer.clean(text), n)

    def raw_score(self, clean_text: str, n: int = 4) -> float:
        """Same as ``score`` for text that is already letters-only uppercase."""
        count = len(clean_text) - n + 1
        if count <= 0:
            return self.settings.floor

        table = self.profile.log_probabilities[n]
        floor = self.settings.floor
        total = 0.0
        for i in range(count):
            total += table.get(clean_text[i:i + n], floor)
        return total / count

    def score_normalized(self, text: str) -> float:
        """
        Language fit mapped to [0, 1].

        Quadgrams are used when the text is long enough, otherwise the
        largest n-gram size that fits.
        """
        clean = TextNormalizer.clean(text)
        if not clean:
            return 0.0

        n = min(4, len(clean))
        avg = self.raw_score(clean, n)
        return self.normalize(avg)

    def normalize(self, avg: float) -> float:
        """Map an average log probability from the scoring window to [0, 1]."""
        low = self.settings.window_low
        high = self.settings.window_high
        if high <= low:
            return 0.0
        return max(0.0, min(1.0, (avg - low) / (high - low)))

    def chi_squared(self, text: str) -> float:
        """Monogram chi-squared against the language table."""
        return StatisticalAnalyzer.chi_squared(TextNormalizer.clean(text), self.profile.monograms)
