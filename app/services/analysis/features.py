from dataclasses import dataclass

from app.core.config import ClassifierSettings, get_settings
from app.services.analysis.kasiski import KasiskiExaminer, KasiskiResult
from app.services.analysis.periodic import PeriodicAnalysis, PeriodicAnalyzer
from app.services.analysis.statistics import StatisticalAnalyzer
from app.services.analysis.transposition import TranspositionDetector, TranspositionEvidence
from app.services.language.dictionary import DictionaryValidator
from app.services.language.ngram import LanguageScorer


@dataclass
class FeatureVector:
    """Statistical features of one ciphertext, computed per request."""

    length: int
    ic: float
    entropy: float
    chi_squared: float
    kasiski: KasiskiResult
    periodic: PeriodicAnalysis | None
    transposition: TranspositionEvidence
    word_coverage: float
    repetition_score: float
    frequency_correlation: float

    @property
    def chi_per_letter(self) -> float:
        return self.chi_squared / self.length if self.length else 0.0


class FeatureExtractor:
    """
    Computes the feature vector the classifier works from.

    Periodic analysis and autocorrelation need enough letters to say
    anything and are skipped below their length gates.
    """

    def __init__(
        self,
        scorer: LanguageScorer,
        dictionary: DictionaryValidator | None = None,
        settings: ClassifierSettings | None = None,
    ):
        self.scorer = scorer
        self.dictionary = dictionary
        self.settings = settings or get_settings().classifier
        self.kasiski = KasiskiExaminer()
        self.periodic = PeriodicAnalyzer()
        self.transposition = TranspositionDetector(scorer, self.settings)

    def extract(self, raw_text: str, clean_text: str) -> FeatureVector:
        """
        Args:
            raw_text: Ciphertext as submitted, used for word coverage
            clean_text: Letters-only uppercase form

        Returns:
            FeatureVector for the text
        """
        profile = self.scorer.profile
        length = len(clean_text)

        periodic = None
        if length >= self.settings.periodic_min_length:
            periodic = self.periodic.analyze(
                clean_text,
                profile.expected_ioc,
                use_autocorrelation=length >= self.settings.autocorrelation_min_length,
            )

        word_coverage = self.dictionary.word_score(raw_text) if self.dictionary else 0.0

        return FeatureVector(
            length=length,
            ic=StatisticalAnalyzer.index_of_coincidence(clean_text),
            entropy=StatisticalAnalyzer.entropy(clean_text),
            chi_squared=StatisticalAnalyzer.chi_squared(clean_text, profile.monograms),
            kasiski=self.kasiski.examine(clean_text),
            periodic=periodic,
            transposition=self.transposition.evaluate(clean_text, word_coverage),
            word_coverage=word_coverage,
            repetition_score=StatisticalAnalyzer.repetition_score(clean_text),
            frequency_correlation=StatisticalAnalyzer.frequency_correlation(clean_text, profile.monograms),
        )
