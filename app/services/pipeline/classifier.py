"""
Cipher family classifier using statistical invariants.

This module implements Phase 0 of the cryptanalysis pipeline:
classification by invariants before any decryption is attempted.

Every classical cipher preserves or destroys specific statistical structures.
Those structures leak the cipher family before decryption.
"""

import logging
import re
import string
from dataclasses import dataclass
from typing import ClassVar

from app.core.config import ClassifierSettings, FamilyWeights, get_settings
from app.core.exceptions import AnalysisError
from app.models.schemas import (
    CipherFamily,
    ClassificationResult,
    ClassificationStats,
    FamilyCandidate,
    Language,
)
from app.services.analysis.features import FeatureExtractor, FeatureVector
from app.services.analysis.periodic import PeriodicityRecommendation
from app.services.analysis.statistics import StatisticalAnalyzer
from app.services.language.dictionary import DictionaryValidator
from app.services.language.ngram import LanguageScorer
from app.services.language.profiles import LanguageProfile, LanguageRegistry, get_language_registry
from app.services.preprocessing.normalizer import TextNormalizer

logger = logging.getLogger(__name__)


@dataclass
class FamilyScores:
    """Running scores of the five competing cipher families."""

    monoalphabetic: float = 0.0
    caesar: float = 0.0
    vigenere: float = 0.0
    transposition: float = 0.0
    random: float = 0.0

    FAMILIES: ClassVar[dict[str, CipherFamily]] = {
        "monoalphabetic": CipherFamily.MONOALPHABETIC,
        "caesar": CipherFamily.CAESAR,
        "vigenere": CipherFamily.VIGENERE_LIKE,
        "transposition": CipherFamily.TRANSPOSITION,
        "random": CipherFamily.RANDOM,
    }

    def add(self, weights: FamilyWeights, scale: float = 1.0) -> None:
        for name in self.FAMILIES:
            setattr(self, name, getattr(self, name) + scale * getattr(weights, name))

    def items(self) -> list[tuple[CipherFamily, float]]:
        return [(family, getattr(self, name)) for name, family in self.FAMILIES.items()]


class CipherClassifier:
    """
    Classifies cipher families using statistical invariants.

    Decision order:
    1. Polybius-like digit pairs short-circuit to monoalphabetic
    2. Too-short text is rejected as unknown
    3. Caesar test on the monogram chi-squared
    4. Otherwise IoC bands, Kasiski, periodic IC, entropy and dictionary
       coverage accumulate into the family scores
    5. Cross-family adjustments, then normalization by the best score

    Every threshold and weight comes from ``ClassifierSettings``.
    """

    ALPHABET: ClassVar[str] = string.ascii_uppercase

    BACONIAN_PATTERN: ClassVar[re.Pattern] = re.compile(r"[ABab]{5,}|[01]{5,}")

    def __init__(
        self,
        registry: LanguageRegistry | None = None,
        settings: ClassifierSettings | None = None,
        use_dictionary: bool = True,
    ):
        self.registry = registry or get_language_registry()
        self.settings = settings or get_settings().classifier
        self.use_dictionary = use_dictionary

    def identify(self, text: str, language: Language | str | None = None) -> ClassificationResult:
        """
        Classify the cipher family of a ciphertext.

        Args:
            text: Raw ciphertext
            language: Expected plaintext language

        Returns:
            ClassificationResult with candidates sorted by confidence

        Raises:
            AnalysisError: Statistics could not be computed for the text
        """
        profile = self.registry.resolve(language)
        clean = TextNormalizer.clean(text)
        length = len(clean)

        if self._is_polybius_like(text):
            return self._single(
                CipherFamily.MONOALPHABETIC, "Polybius-like digit pairs", length, profile.language
            )

        if length < self.settings.min_text_length:
            return self._single(
                CipherFamily.UNKNOWN, "Text too short for reliable analysis", length, profile.language
            )

        scorer = LanguageScorer(profile.language, self.registry)
        dictionary = DictionaryValidator(profile.language, self.registry) if self.use_dictionary else None
        try:
            features = FeatureExtractor(scorer, dictionary, self.settings).extract(text, clean)
        except (ArithmeticError, ValueError) as exc:
            raise AnalysisError(f"Feature extraction failed: {exc}") from exc

        scores = FamilyScores()
        reasons: dict[CipherFamily, list[str]] = {family: [] for family in FamilyScores.FAMILIES.values()}

        caesar_shift = self._caesar_test(clean, profile)
        if caesar_shift is not None:
            boost = self.settings.caesar_boost
            scores.caesar += boost
            scores.monoalphabetic += boost * self.settings.caesar_mono_factor
            scores.vigenere -= boost * self.settings.caesar_vigenere_factor
            scores.transposition -= boost * self.settings.caesar_transposition_factor
            reasons[CipherFamily.CAESAR].append(f"Shift {caesar_shift} restores language letter frequencies")
        else:
            self._score_ioc(features, scores, reasons)
            self._score_kasiski(features, scores, reasons)
            self._score_periodic(features, scores, reasons)
            self._score_entropy(features, scores)
            self._score_dictionary(features, scores, reasons)
            self._score_single_signals(features, scores)

        self._cross_family(text, features, scores, reasons)

        logger.debug("Family scores for %d letters: %s", length, scores)
        return ClassificationResult(
            candidates=self._rank(scores, features, reasons),
            stats=self._stats(features),
            language=profile.language,
        )

    # ------------------------------------------------------------------
    # Short circuits
    # ------------------------------------------------------------------

    def _is_polybius_like(self, text: str) -> bool:
        pairs = re.findall(r"\d{2}", text)
        if len(pairs) < self.settings.polybius_min_pairs:
            return False
        valid = sum(1 for p in pairs if self.settings.polybius_low <= int(p) <= self.settings.polybius_high)
        return valid >= len(pairs) * self.settings.polybius_min_ratio

    def _single(self, family: CipherFamily, reason: str, length: int, language: Language) -> ClassificationResult:
        return ClassificationResult(
            candidates=[FamilyCandidate(type=family, confidence=1.0, reason=reason)],
            stats=ClassificationStats(length=length, ic=0.0, entropy=0.0, has_repetitions=False),
            language=language,
        )

    # ------------------------------------------------------------------
    # Caesar test
    # ------------------------------------------------------------------

    def _caesar_test(self, clean: str, profile: LanguageProfile) -> int | None:
        """
        Look for a single shift that restores the language frequencies.

        Returns:
            The decrypting shift, or None when no shift improves enough
            on the unshifted baseline
        """
        n = len(clean)
        if n >= self.settings.long_text_length:
            shifts = range(1, 26)
            required = self.settings.caesar_improvement_long
        else:
            shifts = [s for s in self.settings.caesar_short_shifts if 1 <= s <= 25]
            if n < self.settings.short_text_length:
                required = self.settings.caesar_improvement_short
            else:
                required = self.settings.caesar_improvement_medium

        baseline = StatisticalAnalyzer.chi_squared(clean, profile.monograms)
        if baseline <= 0 or not shifts:
            return None

        best_shift, best_chi = min(
            ((s, StatisticalAnalyzer.chi_squared(self._unshift(clean, s), profile.monograms)) for s in shifts),
            key=lambda item: item[1],
        )
        improvement = (baseline - best_chi) / baseline

        if improvement >= required and best_chi / n <= self.settings.caesar_max_chi_per_letter:
            return best_shift
        return None

    @classmethod
    def _unshift(cls, text: str, shift: int) -> str:
        table = str.maketrans(cls.ALPHABET, cls.ALPHABET[-shift:] + cls.ALPHABET[:-shift])
        return text.translate(table)

    # ------------------------------------------------------------------
    # Additive evidence
    # ------------------------------------------------------------------

    def _band(self, length: int) -> str:
        if length < self.settings.short_text_length:
            return "short"
        if length < self.settings.long_text_length:
            return "medium"
        return "long"

    def _score_ioc(self, f: FeatureVector, scores: FamilyScores, reasons: dict) -> None:
        s = self.settings
        band = self._band(f.length)
        high = {"short": s.ic_high_short, "medium": s.ic_high_medium, "long": s.ic_high_long}[band]
        mid = {"short": s.ic_mid_short, "medium": s.ic_mid_medium, "long": s.ic_mid_long}[band]

        if f.ic >= high:
            scores.add(s.ic_high_weights)
            reasons[CipherFamily.MONOALPHABETIC].append(f"IoC={f.ic:.2f} (high) preserves language statistics")
        elif f.ic >= mid:
            scores.add(s.ic_mid_short_weights if band == "short" else s.ic_mid_weights)
            reasons[CipherFamily.VIGENERE_LIKE].append(f"IoC={f.ic:.2f} (medium) suggests short-key polyalphabetic")
        else:
            scores.add(s.ic_low_short_weights if band == "short" else s.ic_low_weights)
            reasons[CipherFamily.RANDOM].append(f"IoC={f.ic:.2f} (low) suggests a flattened distribution")

    def _score_kasiski(self, f: FeatureVector, scores: FamilyScores, reasons: dict) -> None:
        s = self.settings
        band = self._band(f.length)
        floor = {"short": s.kasiski_floor_short, "medium": s.kasiski_floor_medium, "long": s.kasiski_floor_long}[band]
        max_ic = s.kasiski_max_ic_short if band == "short" else s.kasiski_max_ic
        top = f.kasiski.top

        reliable = (
            f.length >= s.kasiski_min_length
            and f.kasiski.has_repetitions
            and top is not None
            and top.length > 1
            and top.score > floor
            and f.ic < max_ic
        )

        if not reliable:
            scores.add(s.no_kasiski_short_weights if band == "short" else s.no_kasiski_weights)
            return

        if top.score > s.kasiski_strong_score:
            scores.add(s.kasiski_strong_weights)
            reasons[CipherFamily.VIGENERE_LIKE].append(
                f"Kasiski repetitions point to key length {top.length} (score {top.score:.2f})"
            )
        else:
            scores.add(s.kasiski_weak_weights)

    def _score_periodic(self, f: FeatureVector, scores: FamilyScores, reasons: dict) -> None:
        if f.periodic is None:
            return
        if f.periodic.recommendation == PeriodicityRecommendation.POLYALPHABETIC:
            scores.add(self.settings.periodic_poly_weights)
            reasons[CipherFamily.VIGENERE_LIKE].append(
                f"Column IoC recovers at period {f.periodic.best_period}"
            )
        elif f.periodic.recommendation == PeriodicityRecommendation.MONOALPHABETIC:
            scores.add(self.settings.periodic_mono_weights)

    def _score_entropy(self, f: FeatureVector, scores: FamilyScores) -> None:
        s = self.settings
        if f.entropy >= s.entropy_high:
            scores.add(s.entropy_high_weights)
        elif f.entropy >= s.entropy_low:
            scores.add(s.entropy_mid_weights)
        else:
            scores.add(s.entropy_low_weights)

    def _score_dictionary(self, f: FeatureVector, scores: FamilyScores, reasons: dict) -> None:
        s = self.settings
        if f.word_coverage > s.dictionary_bonus_coverage:
            if f.ic >= s.dictionary_mono_ic:
                scores.add(s.dictionary_mono_weights)
            elif f.ic >= s.dictionary_transposition_ic:
                scores.add(s.dictionary_transposition_weights)
            reasons[CipherFamily.MONOALPHABETIC].append(
                f"{f.word_coverage:.0%} of ciphertext tokens are dictionary words"
            )
        elif f.word_coverage < s.dictionary_penalty_coverage:
            scores.add(s.dictionary_miss_weights)

    def _score_single_signals(self, f: FeatureVector, scores: FamilyScores) -> None:
        s = self.settings
        if f.length < s.short_text_length:
            scores.add(s.short_text_weights)
        if f.ic >= s.long_high_ic and f.length >= s.long_high_ic_min_length:
            scores.add(s.long_high_ic_weights)
        if f.ic >= s.no_repetition_ic and not f.kasiski.has_repetitions:
            scores.add(s.no_repetition_weights)
        if f.frequency_correlation >= s.frequency_correlation_threshold:
            scores.add(s.frequency_correlation_weights)

    # ------------------------------------------------------------------
    # Cross-family adjustment and ranking
    # ------------------------------------------------------------------

    def _cross_family(self, text: str, f: FeatureVector, scores: FamilyScores, reasons: dict) -> None:
        s = self.settings

        if f.transposition.is_candidate:
            scores.transposition += s.transposition_bonus
            scores.monoalphabetic *= s.transposition_suppression
            scores.caesar *= s.transposition_suppression
            scores.vigenere *= s.transposition_suppression
            reasons[CipherFamily.TRANSPOSITION].append(
                "Letter frequencies match the language but n-grams do not"
            )

        if self.BACONIAN_PATTERN.search(text):
            scores.monoalphabetic += s.baconian_bonus
            reasons[CipherFamily.MONOALPHABETIC].append("Baconian A/B or binary groups")

        # Caesar is a special case of monoalphabetic substitution
        scores.monoalphabetic = max(scores.monoalphabetic, scores.caesar * s.mono_over_caesar_ratio)

    def _rank(
        self,
        scores: FamilyScores,
        f: FeatureVector,
        reasons: dict[CipherFamily, list[str]],
    ) -> list[FamilyCandidate]:
        max_score = max(score for _, score in scores.items())
        candidates = []

        for family, score in scores.items():
            confidence = score / max_score if max_score > 0 else 0.0
            if confidence < self.settings.min_confidence:
                continue
            candidates.append(
                FamilyCandidate(
                    type=family,
                    confidence=min(1.0, confidence),
                    suggested_key_length=self._key_length_hint(f) if family == CipherFamily.VIGENERE_LIKE else None,
                    reason="; ".join(reasons[family]) or None,
                )
            )

        if not candidates:
            return [
                FamilyCandidate(
                    type=CipherFamily.RANDOM,
                    confidence=self.settings.fallback_confidence,
                    reason="No family stands out",
                )
            ]

        return sorted(candidates, key=lambda c: c.confidence, reverse=True)

    @staticmethod
    def _key_length_hint(f: FeatureVector) -> int | None:
        if f.kasiski.top is not None:
            return f.kasiski.top.length
        if f.periodic and f.periodic.best_period and f.periodic.best_period > 1:
            return f.periodic.best_period
        return None

    @staticmethod
    def _stats(f: FeatureVector) -> ClassificationStats:
        return ClassificationStats(
            length=f.length,
            ic=f.ic,
            entropy=f.entropy,
            has_repetitions=f.kasiski.has_repetitions,
            suggested_key_lengths=f.kasiski.suggested_key_lengths[:3],
            chi_squared=f.chi_squared,
            repetition_score=f.repetition_score,
            word_coverage=f.word_coverage,
            frequency_correlation=f.frequency_correlation,
        )
