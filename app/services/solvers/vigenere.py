import logging
import string
from dataclasses import dataclass

from app.models.schemas import CipherFamily, CipherType, DecryptionResult
from app.services.analysis.kasiski import KasiskiExaminer
from app.services.analysis.periodic import PeriodicAnalyzer
from app.services.analysis.statistics import StatisticalAnalyzer
from app.services.engines.registry import EngineRegistry
from app.services.preprocessing.normalizer import TextNormalizer
from app.services.solvers.base import Evaluation, Strategy

logger = logging.getLogger(__name__)

ALPHABET = string.ascii_uppercase

# Decryption tables: _UNSHIFT[s] maps a ciphertext letter back by s
_UNSHIFT = [str.maketrans(ALPHABET, ALPHABET[-s:] + ALPHABET[:-s]) for s in range(26)]


@dataclass
class VigenereCandidate:
    key: str
    plaintext: str
    evaluation: Evaluation
    score: float


def minimal_period(key: str) -> str:
    """Shortest key that repeats to ``key`` ("KEYKEY" -> "KEY")."""
    for period in range(1, len(key)):
        if len(key) % period == 0 and key == key[:period] * (len(key) // period):
            return key[:period]
    return key


class VigenereSolver(Strategy):
    """
    Vigenère key recovery.

    1. Key length hypotheses: top Kasiski suggestions (3, 4, 5 when there
       are none), extended by the Friedman periodic-IC ranking
    2. Per column: the shift whose decryption best fits the language's
       letter frequencies, with a bonus for common bigrams
    3. Coordinate ascent on the quadgram score, one key letter at a time
    4. Candidates ranked by 0.7 * n-gram + 0.3 * dictionary + 0.1 *
       Kasiski confidence; more than 70% dictionary coverage ends the
       search early

    A recovered key that repeats is reduced to its minimal period; a
    period of one is reported as a Caesar shift.
    """

    name = "vigenere-friedman"
    method = "vigenere-friedman"
    cipher_type = CipherFamily.VIGENERE_LIKE
    MIN_LETTERS = 20
    TOP_BIGRAMS = 30
    BIGRAM_WEIGHT = 0.4
    REFINE_PASSES = 2

    def __init__(self, *args, key_length_hint: int | None = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.key_length_hint = key_length_hint
        self.poly = self.settings.polyalphabetic
        self.kasiski = KasiskiExaminer(max_key_length=self.poly.max_key_length)
        self.periodic = PeriodicAnalyzer(max_period=self.poly.max_key_length)
        common = self.scorer.profile.top_ngrams(2, self.TOP_BIGRAMS)
        self.bigram_weights = {b: (len(common) - i) / len(common) for i, b in enumerate(common)}

    def applicable(self, ciphertext: str) -> bool:
        return len(TextNormalizer.clean(ciphertext)) >= self.MIN_LETTERS

    # ========================================================================
    # Key length
    # ========================================================================

    def kasiski_lengths(self, clean: str) -> dict[int, float]:
        """Top Kasiski key lengths with their scores, defaults when none."""
        suggestions = self.kasiski.suggest_key_lengths(clean)[: self.poly.top_key_lengths]
        if not suggestions:
            return {length: 0.0 for length in self.poly.default_key_lengths}
        return {s.length: s.score for s in suggestions}

    def key_length_hypotheses(self, clean: str) -> tuple[list[int], dict[int, float]]:
        """
        Returns:
            Tuple of (ordered key lengths, Kasiski confidence per length)
        """
        kasiski = self.kasiski_lengths(clean)
        friedman = self.periodic.friedman_key_lengths(
            clean,
            self.scorer.profile.expected_ioc,
            self.poly.max_key_length,
            top=self.poly.top_key_lengths,
        )
        hint = [self.key_length_hint] if self.key_length_hint and self.key_length_hint >= 2 else []
        lengths = list(dict.fromkeys([*hint, *kasiski, *friedman]))
        return [length for length in lengths if length <= len(clean) // 2], kasiski

    # ========================================================================
    # Key recovery
    # ========================================================================

    def _bigram_rate(self, text: str) -> float:
        """Rank-weighted share of common bigrams in a column."""
        if len(text) < 2:
            return 0.0
        return sum(self.bigram_weights.get(text[i:i + 2], 0.0) for i in range(len(text) - 1)) / (len(text) - 1)

    def column_shift(self, column: str) -> int:
        """Best shift for one column: chi-squared scaled down by bigram evidence."""
        monograms = self.scorer.profile.monograms
        best_shift, best_score = 0, float("inf")

        for shift in range(26):
            shifted = column.translate(_UNSHIFT[shift])
            chi = StatisticalAnalyzer.chi_squared(shifted, monograms)
            adjusted = chi * (1 - self._bigram_rate(shifted) * self.BIGRAM_WEIGHT)
            if adjusted < best_score:
                best_shift, best_score = shift, adjusted

        return best_shift

    def find_key(self, clean: str, length: int) -> str:
        """Initial key from independent per-column frequency fits."""
        return "".join(
            ALPHABET[self.column_shift(column)] if len(column) >= 3 else "A"
            for column in PeriodicAnalyzer.columns(clean, length)
        )

    def decrypt(self, text: str, key: str) -> str:
        return EngineRegistry().require(CipherType.VIGENERE).decrypt(text, key)

    def refine_key(self, clean: str, key: str) -> str:
        """Coordinate ascent on the quadgram score."""
        best_score = self.scorer.raw_score(self.decrypt(clean, key))

        for _ in range(self.REFINE_PASSES):
            improved = False
            for position in range(len(key)):
                for letter in ALPHABET:
                    if letter == key[position]:
                        continue
                    candidate = key[:position] + letter + key[position + 1:]
                    score = self.scorer.raw_score(self.decrypt(clean, candidate))
                    if score > best_score:
                        key, best_score, improved = candidate, score, True
            if not improved:
                break

        return key

    def candidate(self, ciphertext: str, clean: str, length: int, kasiski_confidence: float = 0.0) -> VigenereCandidate:
        key = self.refine_key(clean, self.find_key(clean, length))
        plaintext = TextNormalizer.match_layout(ciphertext, self.decrypt(ciphertext, key))
        evaluation = self.evaluate(plaintext)
        score = 0.7 * evaluation.ngram_score + 0.3 * evaluation.word_coverage + 0.1 * kasiski_confidence
        return VigenereCandidate(key=key, plaintext=plaintext, evaluation=evaluation, score=score)

    def best_candidate(self, ciphertext: str, lengths: list[int] | None = None) -> VigenereCandidate | None:
        clean = TextNormalizer.clean(ciphertext)
        hypotheses, kasiski = self.key_length_hypotheses(clean)
        if lengths is not None:
            hypotheses = [length for length in lengths if length <= len(clean) // 2]

        best: VigenereCandidate | None = None
        for length in hypotheses:
            current = self.candidate(ciphertext, clean, length, kasiski.get(length, 0.0))
            logger.debug("Key length %d gave %s (%.3f)", length, current.key, current.score)
            if best is None or (current.score, current.evaluation.ngram_avg) > (best.score, best.evaluation.ngram_avg):
                best = current
            if current.evaluation.word_coverage > self.poly.early_accept_coverage:
                break

        return best

    def to_result(self, best: VigenereCandidate, method: str, confidence: float | None = None) -> DecryptionResult:
        key = minimal_period(best.key)
        if len(key) == 1:
            return self.result(
                best.plaintext,
                ALPHABET.index(key),
                best.evaluation,
                confidence=confidence,
                method="caesar-shift",
                cipher_type=CipherFamily.CAESAR,
                key_length=1,
            )
        return self.result(best.plaintext, key, best.evaluation, confidence=confidence, method=method, key_length=len(key))

    def solve(self, ciphertext: str) -> DecryptionResult:
        if not self.applicable(ciphertext):
            return self.failure(ciphertext, "Too short for Vigenère analysis")

        best = self.best_candidate(ciphertext)
        if best is None:
            return self.failure(ciphertext, "No key length hypothesis")
        return self.to_result(best, self.method)
