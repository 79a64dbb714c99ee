"""Tests for the cipher family classifier."""

import pytest

from app.core.exceptions import AnalysisError
from app.models.schemas import CipherFamily, CipherType, Language
from app.services.analysis.features import FeatureExtractor
from app.services.engines.registry import EngineRegistry
from app.services.pipeline.classifier import CipherClassifier


def encrypt(cipher_type, text, key=None):
    return EngineRegistry().require(cipher_type).encrypt(text, key)


class TestShortCircuits:
    def test_polybius_digits(self, registry):
        ciphertext = encrypt(CipherType.POLYBIUS, "DEFEND THE EAST WALL")
        result = CipherClassifier(registry).identify(ciphertext)

        assert result.top.type == CipherFamily.MONOALPHABETIC
        assert result.top.confidence == 1.0
        assert "Polybius" in result.top.reason

    def test_too_short(self, registry):
        result = CipherClassifier(registry).identify("KHOOR")

        assert result.top.type == CipherFamily.UNKNOWN
        assert result.top.confidence == 1.0
        assert result.stats.length == 5

    def test_digits_out_of_grid_range(self, registry):
        result = CipherClassifier(registry).identify("99 98 97 96 95")
        assert result.top.type == CipherFamily.UNKNOWN


class TestClassification:
    """Test suite for cipher family classification."""

    def test_caesar_shift_detected(self, registry, english_text):
        ciphertext = encrypt(CipherType.CAESAR, english_text, 7)
        result = CipherClassifier(registry).identify(ciphertext, Language.ENGLISH)

        families = {c.type: c for c in result.candidates}
        assert result.top.type in (CipherFamily.MONOALPHABETIC, CipherFamily.CAESAR)
        assert CipherFamily.CAESAR in families
        assert "Shift 7" in families[CipherFamily.CAESAR].reason
        assert CipherFamily.VIGENERE_LIKE not in families

    def test_candidates_sorted_and_normalized(self, registry, english_text):
        ciphertext = encrypt(CipherType.VIGENERE, english_text, "LEMON")
        result = CipherClassifier(registry).identify(ciphertext)

        confidences = [c.confidence for c in result.candidates]
        assert confidences == sorted(confidences, reverse=True)
        assert result.top.confidence == 1.0
        assert all(0.0 <= c <= 1.0 for c in confidences)

    def test_stats_block(self, registry, english_text):
        ciphertext = encrypt(CipherType.VIGENERE, english_text, "LEMON")
        result = CipherClassifier(registry).identify(ciphertext)

        assert result.stats.length == 315
        assert result.stats.ic < 1.5
        assert len(result.stats.suggested_key_lengths) <= 3

    def test_language_recorded(self, registry, english_text):
        result = CipherClassifier(registry).identify(english_text, "french")
        assert result.language == Language.FRENCH

    def test_works_without_dictionary(self, registry, english_text):
        ciphertext = encrypt(CipherType.CAESAR, english_text, 3)
        result = CipherClassifier(registry, use_dictionary=False).identify(ciphertext)
        assert result.stats.word_coverage == 0.0
        assert result.candidates

    def test_feature_failure_raises_analysis_error(self, registry, english_text, monkeypatch):
        def broken(self, text, clean):
            raise ZeroDivisionError("empty column")

        monkeypatch.setattr(FeatureExtractor, "extract", broken)
        with pytest.raises(AnalysisError, match="empty column"):
            CipherClassifier(registry).identify(english_text)
