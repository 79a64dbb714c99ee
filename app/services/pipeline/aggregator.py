"""
Result aggregation and final validation.

Strategy results are put on one scale (normalized n-gram fit blended with
dictionary evidence), ranked, and the winning cipher family is derived
again from the evidence the solvers produced rather than trusted from the
classifier.
"""

import logging
from dataclasses import dataclass

from app.core.config import AggregatorSettings, get_settings
from app.models.schemas import CipherFamily, DecryptionResult, Language
from app.services.language.dictionary import DictionaryValidator
from app.services.language.patterns import ShortTextPatterns
from app.services.language.profiles import LanguageRegistry, get_language_registry
from app.services.preprocessing.normalizer import TextNormalizer

logger = logging.getLogger(__name__)


@dataclass
class AggregatedResults:
    """Ranked results with the re-derived family of the winner."""

    best: DecryptionResult
    ranked: list[DecryptionResult]
    cipher_type: CipherFamily


class ResultAggregator:
    """
    Ranks strategy results by ``ngram_weight * ngram + dict_weight * dict``.

    Short plaintexts with weak dictionary coverage may borrow dictionary
    evidence from the short-text pattern score.
    """

    def __init__(
        self,
        language: Language | str | None = None,
        registry: LanguageRegistry | None = None,
        settings: AggregatorSettings | None = None,
    ):
        self.registry = registry or get_language_registry()
        self.settings = settings or get_settings().aggregator
        self.language = self.registry.coerce(language)
        self.patterns = ShortTextPatterns(self.registry)

    # ========================================================================
    # Scoring
    # ========================================================================

    def dictionary_score(self, result: DecryptionResult) -> float:
        """Word coverage, lifted by short-text patterns when it is weak."""
        coverage = result.word_coverage
        clean = TextNormalizer.clean(result.plaintext)
        if len(clean) < self.settings.short_text_length and coverage < 0.3:
            pattern = self.patterns.score(result.plaintext, self.language)
            coverage = max(coverage, pattern.combined_score * self.settings.short_text_pattern_weight)
        return min(1.0, coverage)

    def score(self, result: DecryptionResult) -> DecryptionResult:
        """Return a copy carrying its aggregated dictionary and combined scores."""
        dict_score = self.dictionary_score(result)
        combined = self.settings.ngram_weight * result.ngram_score + self.settings.dict_weight * dict_score
        return result.model_copy(
            update={
                "word_coverage": dict_score,
                "combined_score": max(result.combined_score, min(1.0, combined)),
            }
        )

    def aggregate(
        self,
        results: list[DecryptionResult],
        detected: CipherFamily = CipherFamily.UNKNOWN,
    ) -> AggregatedResults | None:
        """
        Rank results and label the winner's cipher family.

        Args:
            results: Successful strategy results
            detected: Top family from classification, the last resort label

        Returns:
            Aggregated results, or None when there is nothing to rank
        """
        if not results:
            return None

        ranked = sorted(
            (self.score(r) for r in results),
            key=lambda r: (r.combined_score, r.confidence),
            reverse=True,
        )
        family = self.final_cipher_type(ranked, detected)
        best = ranked[0].model_copy(update={"cipher_type": family})
        logger.debug(
            "Aggregated %d results: %s (%.3f) labelled %s",
            len(ranked),
            best.method,
            best.combined_score,
            family.value,
        )
        return AggregatedResults(best=best, ranked=[best, *ranked[1:]], cipher_type=family)

    # ========================================================================
    # Family labelling
    # ========================================================================

    def is_strong_polyalphabetic(self, result: DecryptionResult, text_length: int) -> bool:
        """Periodic key of length two or more with thresholds by text length."""
        if result.cipher_type != CipherFamily.VIGENERE_LIKE:
            return False
        if result.key_length is None or result.key_length < 2:
            return False

        s = self.settings
        if text_length >= s.poly_long_text_length:
            limits = (s.poly_long_confidence, s.poly_long_ngram, s.poly_long_dict)
        else:
            limits = (s.poly_short_confidence, s.poly_short_ngram, s.poly_short_dict)

        return (
            result.confidence >= limits[0]
            and result.ngram_score >= limits[1]
            and result.word_coverage >= limits[2]
        )

    @staticmethod
    def _is_mono(result: DecryptionResult) -> bool:
        return not result.is_transposition and result.cipher_type in (
            CipherFamily.MONOALPHABETIC,
            CipherFamily.CAESAR,
        )

    def final_cipher_type(self, ranked: list[DecryptionResult], detected: CipherFamily) -> CipherFamily:
        """
        Hierarchical family decision.

        1. Strong polyalphabetic evidence wins outright
        2. Monoalphabetic against transposition: transposition needs a clear
           score and dictionary advantage, ties go to monoalphabetic
        3. The winner's own family when its n-gram fit is good
        4. The classifier's family, with weak vigenere-like evidence
           demoted to monoalphabetic

        Transposition output usually has no spaces, so its word coverage
        stays at zero unless the whole text tiles into words. Without that
        coverage the dictionary margin in step 2 cannot be met, and a
        solved rail fence next to a good substitution result is labelled
        monoalphabetic even when it is ranked first.
        """
        best = ranked[0]
        text_length = len(best.plaintext)

        poly = next((r for r in ranked if r.cipher_type == CipherFamily.VIGENERE_LIKE), None)
        mono = next((r for r in ranked if self._is_mono(r)), None)
        trans = next((r for r in ranked if r.is_transposition), None)

        if poly is not None and self.is_strong_polyalphabetic(poly, text_length):
            return CipherFamily.VIGENERE_LIKE

        good = self.settings.good_result_confidence
        good_mono = mono is not None and mono.confidence >= good
        good_trans = trans is not None and trans.confidence >= good

        if good_mono and good_trans:
            score_gap = trans.ngram_score - mono.ngram_score
            dict_gap = trans.word_coverage - mono.word_coverage
            if (
                score_gap >= self.settings.transposition_score_margin
                and dict_gap >= self.settings.transposition_dict_margin
            ):
                return CipherFamily.TRANSPOSITION
            return self._mono_label(mono)
        if good_mono:
            return self._mono_label(mono)
        if good_trans:
            return CipherFamily.TRANSPOSITION

        if best.is_transposition:
            return CipherFamily.TRANSPOSITION
        if best.ngram_score >= self.settings.min_ngram_score and best.cipher_type is not None:
            return best.cipher_type

        if detected == CipherFamily.VIGENERE_LIKE:
            return CipherFamily.MONOALPHABETIC
        return detected

    @staticmethod
    def _mono_label(result: DecryptionResult) -> CipherFamily:
        # Shift ciphers keep the narrower label
        if result.cipher_type == CipherFamily.CAESAR:
            return CipherFamily.CAESAR
        return CipherFamily.MONOALPHABETIC


class ResultValidator:
    """
    Final dictionary check of the chosen plaintext.

    A result passes with enough word coverage or dictionary confidence and
    then blends that confidence into its own; one that fails is flagged
    ``validated=False`` and its confidence lowered.
    """

    def __init__(self, dictionary: DictionaryValidator, settings: AggregatorSettings | None = None):
        self.dictionary = dictionary
        self.settings = settings or get_settings().aggregator

    def check(self, result: DecryptionResult) -> tuple[bool, float, float]:
        """
        Returns:
            Tuple of (passes, word coverage, dictionary confidence)
        """
        text = result.plaintext
        if result.is_transposition:
            # Word breaks come from the ciphertext, so validate the letter stream
            text = TextNormalizer.clean(text)
        report = self.dictionary.validate(text)
        passes = (
            report.word_coverage >= self.settings.validation_min_coverage
            or report.confidence >= self.settings.validation_min_confidence
        )
        return passes, report.word_coverage, report.confidence

    def validate(self, result: DecryptionResult) -> DecryptionResult:
        passes, coverage, dict_confidence = self.check(result)
        weight = self.settings.validation_weight

        if passes:
            confidence = (1 - weight) * result.confidence + weight * dict_confidence
        else:
            confidence = result.confidence * self.settings.unvalidated_penalty

        return result.model_copy(
            update={
                "word_coverage": max(result.word_coverage, coverage),
                "dict_confidence": dict_confidence,
                "confidence": max(0.0, min(1.0, confidence)),
                "validated": passes,
            }
        )

    def choose(self, ranked: list[DecryptionResult]) -> DecryptionResult:
        """
        Validate the best result, falling back to the first runner-up that
        passes when it does not.
        """
        best = self.validate(ranked[0])
        if best.validated:
            return best

        for alternative in ranked[1:]:
            passes, _, _ = self.check(alternative)
            if passes:
                logger.info(
                    "Best result %s failed validation, using %s",
                    best.method,
                    alternative.method,
                )
                return self.validate(alternative)

        logger.warning("No result passed dictionary validation")
        return best
