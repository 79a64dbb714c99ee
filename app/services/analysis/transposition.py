from dataclasses import dataclass

from app.core.config import ClassifierSettings, get_settings
from app.services.language.ngram import LanguageScorer


@dataclass
class TranspositionEvidence:
    """How much a ciphertext looks like rearranged plaintext."""

    chi_per_letter: float
    ngram_score: float
    score: float
    is_candidate: bool


class TranspositionDetector:
    """
    Detects transposition ciphers.

    Transposition keeps the plaintext letters and only moves them, so the
    monogram fit stays close to the language while the n-gram fit collapses.
    """

    MIN_LENGTH = 20

    def __init__(self, scorer: LanguageScorer, settings: ClassifierSettings | None = None):
        self.scorer = scorer
        self.settings = settings or get_settings().classifier

    def evaluate(self, text: str, word_coverage: float = 0.0) -> TranspositionEvidence:
        """
        Score cleaned ciphertext for transposition.

        Args:
            text: Cleaned ciphertext
            word_coverage: Dictionary coverage of the ciphertext itself,
                high coverage means plaintext rather than a transposition

        Returns:
            Evidence with a score in [0, 1]
        """
        n = len(text)
        if n < self.MIN_LENGTH:
            return TranspositionEvidence(chi_per_letter=0.0, ngram_score=0.0, score=0.5, is_candidate=False)

        chi_per_letter = self.scorer.chi_squared(text) / n
        ngram_score = self.scorer.score_normalized(text)

        score = 0.5
        good_monograms = chi_per_letter <= self.settings.transposition_chi_per_letter
        if good_monograms:
            score += 0.3 if ngram_score <= self.settings.transposition_max_ngram else -0.3
        elif chi_per_letter > 3 * self.settings.transposition_chi_per_letter:
            score -= 0.4
        if word_coverage > self.settings.transposition_max_coverage:
            score -= 0.3
        if n >= 100 and score > 0.5:
            score += 0.1

        score = max(0.0, min(1.0, score))
        return TranspositionEvidence(
            chi_per_letter=chi_per_letter,
            ngram_score=ngram_score,
            score=score,
            is_candidate=score > 0.6,
        )
