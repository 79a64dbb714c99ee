import logging
import string
from dataclasses import dataclass
from typing import Any, ClassVar

from app.models.schemas import CipherFamily, CipherType, DecryptionResult
from app.services.analysis.periodic import PeriodicAnalyzer
from app.services.analysis.statistics import StatisticalAnalyzer
from app.services.engines.registry import EngineRegistry
from app.services.preprocessing.normalizer import TextNormalizer
from app.services.solvers.base import Evaluation, Strategy
from app.services.solvers.vigenere import VigenereSolver, minimal_period

logger = logging.getLogger(__name__)

ALPHABET = string.ascii_uppercase


@dataclass
class PolyCandidate:
    """Best result of one sub-solver for one key length."""

    method: str
    key: Any
    plaintext: str
    evaluation: Evaluation
    confidence: float
    key_length: int | None

    @property
    def score(self) -> float:
        return self.evaluation.combined


class PolyalphabeticSolver(VigenereSolver):
    """
    Multi-variant polyalphabetic solver.

    Tries Vigenère, Beaufort, Porta, Gronsfeld and Quagmire I-IV for each
    key length hypothesis and returns the single best candidate.
    Precedence on equal scores follows the order of ``PRECEDENCE``.

    Success rates differ a lot between variants:

    - Vigenère and Gronsfeld: good once the key length is right
    - Beaufort: greedy key building, works on longer texts
    - Porta: keyword catalog first, column brute force as fallback
    - Quagmire: catalog of keywords, indicators and alphabets only, so it
      succeeds mostly on keys built from common words and long texts
    """

    name = "polyalphabetic"
    method = "polyalphabetic"
    cipher_type = CipherFamily.VIGENERE_LIKE

    PRECEDENCE: ClassVar[list[str]] = [
        "vigenere",
        "beaufort",
        "porta",
        "gronsfeld",
        "quagmire4",
        "quagmire3",
        "quagmire2",
        "quagmire1",
    ]
    KEYWORDS: ClassVar[list[str]] = [
        "KEY", "CODE", "LOCK", "SAFE", "ABCD", "PORTA", "CRYPTO", "CIPHER",
        "SECRET", "ENIGMA", "HIDDEN", "SECURE", "PASSWORD", "VIGENERE",
    ]
    QUAGMIRE_KEYWORDS: ClassVar[list[str]] = ["KEY", "SECRET", "CIPHER", "CODE", "CRYPTO", "ENIGMA"]
    QUAGMIRE_INDICATORS: ClassVar[list[str]] = ["A", "B", "C", "D", "E", "KEY", "ABC"]

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.engines = EngineRegistry()

    # ========================================================================
    # Shared helpers
    # ========================================================================

    def ic_confidence(self, plaintext: str) -> float:
        """Closeness of the plaintext IoC to the language's expected IoC."""
        expected = self.scorer.profile.expected_ioc
        if expected <= 0:
            return 0.0
        ic = StatisticalAnalyzer.index_of_coincidence(TextNormalizer.clean(plaintext))
        return max(0.0, min(1.0, 1 - abs(ic - expected) / expected))

    def _decrypt(self, cipher_type: CipherType, text: str, key: Any) -> str:
        return self.engines.require(cipher_type).decrypt(text, key)

    def _fitness(self, cipher_type: CipherType, clean: str, key: Any) -> float:
        return self.scorer.raw_score(self._decrypt(cipher_type, clean, key))

    def _candidate(self, method: str, cipher_type: CipherType, ciphertext: str, key: Any, key_length: int | None) -> PolyCandidate:
        plaintext = TextNormalizer.match_layout(ciphertext, self._decrypt(cipher_type, ciphertext, key))
        return PolyCandidate(
            method=method,
            key=key,
            plaintext=plaintext,
            evaluation=self.evaluate(plaintext),
            confidence=self.ic_confidence(plaintext),
            key_length=key_length,
        )

    # ========================================================================
    # Sub-solvers
    # ========================================================================

    def solve_vigenere(self, ciphertext: str) -> PolyCandidate | None:
        best = self.best_candidate(ciphertext)
        if best is None:
            return None
        key = minimal_period(best.key)
        return PolyCandidate(
            method="vigenere",
            key=key,
            plaintext=best.plaintext,
            evaluation=best.evaluation,
            confidence=self.ic_confidence(best.plaintext),
            key_length=len(key),
        )

    def solve_beaufort(self, ciphertext: str, clean: str, length: int) -> PolyCandidate | None:
        """
        Greedy key building: each position takes the best of 26 letters
        with the rest of the key held fixed (at A on the first pass), then
        every letter is nudged by +-1 and +-2.

        The per-column chi-squared key competes with the greedy one before
        the nudging, so a greedy run stuck on a shifted alphabet is not final.
        """
        if len(clean) < self.poly.beaufort_min_length:
            return None

        key = "A" * length
        for _ in range(2):
            for position in range(length):
                key = max(
                    (key[:position] + letter + key[position + 1:] for letter in ALPHABET),
                    key=lambda k: self._fitness(CipherType.BEAUFORT, clean, k),
                )

        engine = self.engines.require(CipherType.BEAUFORT)
        monograms = self.scorer.profile.monograms
        seed = "".join(
            min(
                ALPHABET,
                key=lambda k: StatisticalAnalyzer.chi_squared(engine.decrypt(column, k), monograms),
            )
            for column in PeriodicAnalyzer.columns(clean, length)
        )
        key = max((key, seed), key=lambda k: self._fitness(CipherType.BEAUFORT, clean, k))

        best_score = self._fitness(CipherType.BEAUFORT, clean, key)
        for position in range(length):
            original = ALPHABET.index(key[position])
            for delta in (-2, -1, 1, 2):
                candidate = key[:position] + ALPHABET[(original + delta) % 26] + key[position + 1:]
                score = self._fitness(CipherType.BEAUFORT, clean, candidate)
                if score > best_score:
                    key, best_score = candidate, score

        key = minimal_period(key)
        return self._candidate("beaufort", CipherType.BEAUFORT, ciphertext, key, len(key))

    def solve_porta(self, ciphertext: str, clean: str, length: int) -> PolyCandidate | None:
        """Keyword catalog first, column brute force when nothing reads well."""
        best: PolyCandidate | None = None
        for keyword in (k for k in self.KEYWORDS if len(k) == length):
            candidate = self._candidate("porta", CipherType.PORTA, ciphertext, keyword, length)
            if best is None or candidate.score > best.score:
                best = candidate

        if best is not None and best.score >= self.poly.porta_fallback_score:
            return best

        # Letters sharing a pair (AB, CD, ...) give the same alphabet
        engine = self.engines.require(CipherType.PORTA)
        monograms = self.scorer.profile.monograms
        key = "".join(
            min(
                ALPHABET[::2],
                key=lambda k: StatisticalAnalyzer.chi_squared(engine.decrypt(column, k), monograms),
            )
            for column in PeriodicAnalyzer.columns(clean, length)
        )
        brute = self._candidate("porta", CipherType.PORTA, ciphertext, key, length)
        if best is None or brute.score > best.score:
            best = brute
        return best

    def solve_gronsfeld(self, ciphertext: str, clean: str, length: int) -> PolyCandidate | None:
        """Vigenère restricted to the shifts 0-9."""
        monograms = self.scorer.profile.monograms
        engine = self.engines.require(CipherType.GRONSFELD)
        digits = "".join(
            min(
                "0123456789",
                key=lambda d: StatisticalAnalyzer.chi_squared(engine.decrypt(column, d), monograms),
            )
            for column in PeriodicAnalyzer.columns(clean, length)
        )
        return self._candidate("gronsfeld", CipherType.GRONSFELD, ciphertext, digits, length)

    def solve_quagmire(self, ciphertext: str) -> PolyCandidate | None:
        """
        Catalog enumeration for Quagmire I-IV.

        When two variants score within ``variant_tie_ratio`` of each other
        the higher-numbered variant wins.
        """
        if len(TextNormalizer.clean(ciphertext)) < self.poly.quagmire_min_length:
            return None

        variants = [
            ("quagmire1", CipherType.QUAGMIRE1),
            ("quagmire2", CipherType.QUAGMIRE2),
            ("quagmire3", CipherType.QUAGMIRE3),
            ("quagmire4", CipherType.QUAGMIRE4),
        ]
        best_per_variant: list[PolyCandidate] = []

        for method, cipher_type in variants:
            best: PolyCandidate | None = None
            for key in self._quagmire_keys(cipher_type):
                candidate = self._candidate(method, cipher_type, ciphertext, key, len(key.split(":")[1]))
                if best is None or candidate.score > best.score:
                    best = candidate
            best_per_variant.append(best)

        ranked = sorted(best_per_variant, key=lambda c: c.score, reverse=True)
        winner = ranked[0]
        for other in ranked[1:]:
            close = abs(winner.score - other.score) <= self.poly.variant_tie_ratio * max(abs(winner.score), 1e-9)
            if close and other.method > winner.method:
                winner = other
        return winner

    def _quagmire_keys(self, cipher_type: CipherType) -> list[str]:
        keys = [
            f"{keyword}:{indicator}"
            for keyword in self.QUAGMIRE_KEYWORDS
            for indicator in self.QUAGMIRE_INDICATORS
        ]
        if cipher_type == CipherType.QUAGMIRE4:
            keys = [
                f"{key}:{cipher_word}"
                for key in keys
                for cipher_word in self.QUAGMIRE_KEYWORDS
                if cipher_word != key.split(":")[0]
            ]
        return keys

    # ========================================================================
    # Entry point
    # ========================================================================

    def candidates(self, ciphertext: str) -> list[PolyCandidate]:
        """Every sub-solver result over every key length hypothesis."""
        clean = TextNormalizer.clean(ciphertext)
        lengths = [length for length in self.kasiski_lengths(clean) if length <= len(clean) // 2]

        found: list[PolyCandidate | None] = [self.solve_vigenere(ciphertext)]
        for length in lengths:
            found.append(self.solve_beaufort(ciphertext, clean, length))
            found.append(self.solve_porta(ciphertext, clean, length))
            found.append(self.solve_gronsfeld(ciphertext, clean, length))
        found.append(self.solve_quagmire(ciphertext))

        return [c for c in found if c is not None]

    def solve(self, ciphertext: str) -> DecryptionResult:
        if not self.applicable(ciphertext):
            return self.failure(ciphertext, "Too short for polyalphabetic analysis", method="none")

        found = self.candidates(ciphertext)
        if not found:
            return self.failure(ciphertext, "No usable polyalphabetic candidate", method="none")

        best = max(
            found,
            key=lambda c: (round(c.score, 6), -self.PRECEDENCE.index(c.method), c.evaluation.ngram_avg),
        )
        logger.debug("Polyalphabetic best: %s key=%s score=%.3f", best.method, best.key, best.score)

        if best.method == "vigenere" and len(best.key) == 1:
            return self.result(
                best.plaintext,
                ALPHABET.index(best.key),
                best.evaluation,
                confidence=best.confidence,
                method="caesar-shift",
                cipher_type=CipherFamily.CAESAR,
                key_length=1,
            )

        return self.result(
            best.plaintext,
            best.key,
            best.evaluation,
            confidence=best.confidence,
            method=best.method,
            key_length=best.key_length,
        )
