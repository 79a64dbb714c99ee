"""Tests for text normalization and layout restoration."""

from app.services.preprocessing.normalizer import NormalizationMode, TextNormalizer


class TestClean:
    def test_letters_only_uppercase(self):
        assert TextNormalizer.clean("Hello, World! 123") == "HELLOWORLD"

    def test_strips_diacritics(self):
        assert TextNormalizer.clean("Café déjà vu") == "CAFEDEJAVU"

    def test_sharp_s(self):
        assert TextNormalizer.clean("Straße") == "STRASSE"

    def test_empty(self):
        assert TextNormalizer.clean("") == ""
        assert TextNormalizer.clean("12 34 !?") == ""

    def test_prepare_keeps_original(self):
        prepared = TextNormalizer.prepare("Attack at dawn!")
        assert prepared.original == "Attack at dawn!"
        assert prepared.text == "ATTACKATDAWN"
        assert len(prepared) == 12


class TestMatchLayout:
    def test_restores_case_and_punctuation(self):
        assert TextNormalizer.match_layout("Khoor, Zruog!", "HELLOWORLD") == "Hello, World!"

    def test_extra_letters_appended(self):
        assert TextNormalizer.match_layout("AB CD", "WXYZQ") == "WX YZQ"

    def test_fewer_letters_drop_tail(self):
        assert TextNormalizer.match_layout("AB CD", "WX") == "WX "

    def test_restore_from_clean_text(self):
        prepared = TextNormalizer.prepare("Uryyb jbeyq")
        assert prepared.restore("HELLOWORLD") == "Hello world"


class TestNormalize:
    def test_modes(self):
        normalizer = TextNormalizer()
        text = "  Héllo,   wörld  "
        assert normalizer.normalize(text) == "HELLOWORLD"
        assert normalizer.normalize(text, NormalizationMode.PRESERVE_SPACES) == "HELLO WORLD"
        assert normalizer.normalize(text, NormalizationMode.RAW) == "  HELLO,   WORLD  "

    def test_helpers(self):
        assert TextNormalizer.only_letters("abc DEF")
        assert not TextNormalizer.only_letters("abc1")
        assert TextNormalizer.strip_whitespace("a b\tc\n") == "abc"
        assert TextNormalizer.collapse_whitespace(" a   b ") == "a b"
