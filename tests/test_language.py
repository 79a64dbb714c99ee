"""Tests for language profiles, scoring, dictionaries and detection."""

import pytest

from app.core.exceptions import DictionaryUnavailableError, ModelNotFoundError
from app.models.schemas import Language
from app.services.language.detector import LanguageDetector
from app.services.language.dictionary import DictionaryValidator, EmptyDictionary
from app.services.language.ngram import LanguageScorer
from app.services.language.patterns import ShortTextPatterns
from app.services.language.profiles import LanguageRegistry
from app.services.language.segmenter import WordSegmenter


class TestLanguageRegistry:
    def test_models_available(self, registry):
        for language in (Language.ENGLISH, Language.FRENCH, Language.GERMAN):
            assert registry.has_model(language)
        assert not registry.has_model(Language.RUSSIAN)
        assert not registry.has_model(Language.CHINESE)

    def test_profile_tables(self, registry):
        profile = registry.get(Language.ENGLISH)
        assert profile.frequency_order.startswith("ETA")
        assert "TION" in profile.quadgrams
        assert profile.log_probabilities[4]["TION"] < 0

    def test_coerce(self):
        assert LanguageRegistry.coerce(" French ") == Language.FRENCH
        assert LanguageRegistry.coerce(None) == Language.ENGLISH
        with pytest.raises(ModelNotFoundError):
            LanguageRegistry.coerce("klingon")

    def test_missing_model(self, registry):
        with pytest.raises(ModelNotFoundError):
            registry.get(Language.RUSSIAN)
        assert registry.resolve(Language.RUSSIAN).language == Language.ENGLISH

    def test_expected_ioc(self, registry):
        assert registry.expected_ioc("german") == pytest.approx(2.05)
        assert registry.expected_ioc("klingon") == pytest.approx(1.73)

    def test_missing_data_dir(self, tmp_path):
        empty = LanguageRegistry(tmp_path)
        assert empty.available_languages() == []
        assert empty.words(Language.ENGLISH) is None


class TestLanguageScorer:
    def test_english_beats_gibberish(self, registry, english_text):
        scorer = LanguageScorer(Language.ENGLISH, registry)
        assert scorer.score(english_text) > scorer.score("QXZJ VKWQ ZZXQ JQXV KZQW XJVQ")

    def test_short_text_gets_floor(self, registry):
        scorer = LanguageScorer(Language.ENGLISH, registry)
        assert scorer.score("ABC") == scorer.settings.floor

    def test_normalize_window(self, registry):
        scorer = LanguageScorer(Language.ENGLISH, registry)
        assert scorer.normalize(-10.0) == 0.0
        assert scorer.normalize(-6.0) == 1.0
        assert scorer.normalize(-8.0) == pytest.approx(0.5)
        assert scorer.normalize(-3.0) == 1.0

    def test_score_normalized(self, registry, english_text):
        scorer = LanguageScorer(Language.ENGLISH, registry)
        assert scorer.score_normalized(english_text) > 0.6
        assert scorer.score_normalized("") == 0.0

    def test_unknown_language_scores_as_english(self, registry):
        assert LanguageScorer(Language.CHINESE, registry).language == Language.ENGLISH


class TestDictionaryValidator:
    """Test suite for dictionary validation."""

    def test_word_score(self, registry):
        validator = DictionaryValidator(Language.ENGLISH, registry)
        assert validator.word_score("THE AND THE") == 1.0
        assert validator.word_score("XQZ VKJ") == 0.0
        assert validator.word_score("A I") == 0.0

    def test_validate_plaintext(self, registry, english_text):
        report = DictionaryValidator(Language.ENGLISH, registry).validate(english_text)
        assert report.is_valid
        assert report.word_coverage > 0.8
        assert report.valid_words <= report.total_words

    def test_validate_gibberish(self, registry):
        report = DictionaryValidator(Language.ENGLISH, registry).validate("QXZJ VKWQ ZZXQ")
        assert not report.is_valid
        assert report.valid_words == 0

    def test_validate_ignores_short_tokens(self, registry):
        validator = DictionaryValidator(Language.ENGLISH, registry)
        noise = "rs qu sq sq st ur st tr sq qt"
        report = validator.validate(noise)

        assert report.word_coverage == validator.word_score(noise) == 0.0
        assert report.total_words == 0
        assert not report.is_valid

    def test_has_valid_words(self, registry, english_text):
        validator = DictionaryValidator(Language.ENGLISH, registry)
        assert validator.has_valid_words(english_text)
        assert not validator.has_valid_words("THE QXZJ VKWQ")
        assert validator.has_valid_words("THE QXZJ VKWQ", min_words=1)

    def test_validate_empty(self, registry):
        report = DictionaryValidator(Language.ENGLISH, registry).validate("")
        assert report.confidence == 0.0
        assert report.summary == "No words found"

    def test_long_token_is_segmented(self, registry):
        validator = DictionaryValidator(Language.ENGLISH, registry)
        assert validator.word_score("THEQUICKBROWNFOXJUMPSOVERTHELAZYDOG") == 1.0

    def test_falls_back_to_english_words(self, registry):
        """Languages without a word list borrow the English one."""
        validator = DictionaryValidator(Language.RUSSIAN, registry)
        assert validator.available
        assert validator.contains("THE")

    def test_no_dictionary(self, tmp_path):
        empty = LanguageRegistry(tmp_path)
        validator = DictionaryValidator(Language.ENGLISH, empty)
        assert isinstance(validator.dictionary, EmptyDictionary)
        assert validator.word_score("THE AND THE") == 0.0

    def test_required_dictionary_missing(self, tmp_path):
        with pytest.raises(DictionaryUnavailableError):
            DictionaryValidator(Language.ENGLISH, LanguageRegistry(tmp_path), require=True)

    def test_segment_with_confidence(self, registry):
        validator = DictionaryValidator(Language.ENGLISH, registry)
        segmented, confidence = validator.segment_with_confidence("thequickbrownfox")
        assert segmented == "THE QUICK BROWN FOX"
        assert confidence == pytest.approx(1.0)


class TestWordSegmenter:
    class Words:
        def __init__(self, *words):
            self.words = set(words)

        def contains(self, word):
            return word in self.words

    def test_fewest_words(self):
        segmenter = WordSegmenter(self.Words("IN", "TO", "INTO", "THE", "HOUSE"))
        assert segmenter.segment("INTOTHEHOUSE") == ["INTO", "THE", "HOUSE"]

    def test_no_tiling(self):
        segmenter = WordSegmenter(self.Words("THE"))
        assert segmenter.segment("THEX") is None
        assert segmenter.segment("") is None

    def test_single_letters_not_words(self):
        segmenter = WordSegmenter(self.Words("A", "AT"))
        assert segmenter.segment("AAT") is None


class TestShortTextPatterns:
    def test_common_words(self, registry):
        score = ShortTextPatterns(registry).score("THE CAT AND THE DOG", Language.ENGLISH)
        assert score.word_count == 5
        assert score.word_score == pytest.approx(0.6)

    def test_english_beats_noise(self, registry):
        patterns = ShortTextPatterns(registry)
        english = patterns.score("IT IS TIME TO GO HOME", Language.ENGLISH)
        noise = patterns.score("QX ZV KJW XQZ VKJ", Language.ENGLISH)
        assert english.combined_score > noise.combined_score

    def test_language_without_word_list(self, registry):
        assert ShortTextPatterns(registry).common_words(Language.CHINESE) == frozenset()


class TestLanguageDetector:
    """Test suite for language detection."""

    def test_detects_english(self, registry, english_text):
        result = LanguageDetector(registry).detect(english_text)
        assert result.language == Language.ENGLISH
        assert len(result.ranking) == len(registry.available_languages())

    def test_empty_text_defaults_to_english(self, registry):
        result = LanguageDetector(registry).detect("1234 !!")
        assert result.language == Language.ENGLISH
        assert result.confidence == 0.0

    def test_requested_language_without_model_is_trusted(self, registry, english_text):
        result = LanguageDetector(registry).detect(english_text, Language.RUSSIAN)
        assert result.language == Language.RUSSIAN

    def test_uncompetitive_request_is_ignored(self, registry, english_text):
        """A requested language far behind the best one is not promoted."""
        result = LanguageDetector(registry).detect(english_text, Language.GERMAN)
        assert result.language == Language.ENGLISH
