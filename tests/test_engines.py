"""Tests for the cipher engines and their registry."""

import pytest

from app.core.exceptions import EngineNotFoundError, InvalidKeyError
from app.models.schemas import CipherFamily, CipherType
from app.services.engines.registry import EngineRegistry


@pytest.fixture(scope="module")
def engines():
    return EngineRegistry()


class TestRegistry:
    """Tests for engine registration and lookup."""

    def test_every_cipher_type_registered(self):
        for cipher_type in CipherType:
            assert EngineRegistry.is_registered(cipher_type)

    def test_require_accepts_string(self, engines):
        engine = engines.require("vigenere")
        assert engine.cipher_type == CipherType.VIGENERE

    def test_require_unknown_type(self, engines):
        with pytest.raises(EngineNotFoundError):
            engines.require("enigma")

    def test_instances_are_cached(self, engines):
        assert engines.get_engine(CipherType.CAESAR) is engines.get_engine(CipherType.CAESAR)

    def test_engines_by_family(self, engines):
        transposition = engines.get_engines_by_family(CipherFamily.TRANSPOSITION)
        types = {engine.cipher_type for engine in transposition}
        assert types == {CipherType.RAIL_FENCE, CipherType.AMSCO}


class TestCaesarEngine:
    """Test suite for Caesar cipher engine."""

    """Tests for Caesar cipher engine."""

    @pytest.fixture
    def engine(self, engines):
        return engines.require(CipherType.CAESAR)

    def test_encrypt_basic(self, engine):
        assert engine.encrypt("HELLO", 7) == "OLSSV"

    def test_decrypt_basic(self, engine):
        assert engine.decrypt("OLSSV", 7) == "HELLO"

    def test_string_key(self, engine):
        assert engine.encrypt("HELLO", "7") == "OLSSV"

    def test_shift_wraps(self, engine):
        assert engine.encrypt("XYZ", 3) == "ABC"
        assert engine.encrypt("ABC", 29) == "DEF"

    def test_non_letters_pass_through(self, engine):
        """Test that spaces and punctuation are left alone."""
        assert engine.encrypt("Hello, World!", 3) == "KHOOR, ZRUOG!"

    def test_rot13_is_self_inverse(self, engine):
        """Test that shift 13 undoes itself."""
        assert engine.encrypt(engine.encrypt("ATTACK AT DAWN", 13), 13) == "ATTACK AT DAWN"

    def test_invalid_keys(self, engine):
        assert not engine.validate_key(True)
        assert not engine.validate_key("abc")
        with pytest.raises(InvalidKeyError):
            engine.encrypt("HELLO", None)


class TestMonoalphabeticEngines:
    """Tests for the keyless and keyword substitution engines."""

    def test_atbash(self, engines):
        engine = engines.require(CipherType.ATBASH)
        assert engine.encrypt("HELLO") == "SVOOL"
        assert engine.decrypt("SVOOL") == "HELLO"

    def test_rot47(self, engines):
        engine = engines.require(CipherType.ROT47)
        assert engine.encrypt("Hello") == "w6==@"
        assert engine.decrypt("w6==@") == "Hello"
        assert engine.encrypt("Hello", "") == "w6==@"

    def test_rot47_custom_rotation(self, engines):
        engine = engines.require(CipherType.ROT47)
        assert engine.decrypt(engine.encrypt("Secret 42!", 5), 5) == "Secret 42!"

    def test_polybius(self, engines):
        engine = engines.require(CipherType.POLYBIUS)
        assert engine.encrypt("HELLO") == "23 15 31 31 34"
        assert engine.decrypt("23 15 31 31 34") == "HELLO"

    def test_polybius_merges_i_and_j(self, engines):
        engine = engines.require(CipherType.POLYBIUS)
        assert engine.decrypt(engine.encrypt("JUMP")) == "IUMP"

    def test_polybius_keyword(self, engines):
        engine = engines.require(CipherType.POLYBIUS)
        encoded = engine.encrypt("HELLO", "ZEBRA")
        assert encoded != "23 15 31 31 34"
        assert engine.decrypt(encoded, "ZEBRA") == "HELLO"

    def test_baconian(self, engines):
        engine = engines.require(CipherType.BACONIAN)
        assert engine.encrypt("HI") == "AABBB ABAAA"
        assert engine.decrypt("AABBB ABAAA") == "HI"

    def test_baconian_words(self, engines):
        engine = engines.require(CipherType.BACONIAN)
        encoded = engine.encrypt("HI THERE")
        assert "   " in encoded
        assert engine.decrypt(encoded) == "HI THERE"

    def test_baconian_binary_groups(self, engines):
        engine = engines.require(CipherType.BACONIAN)
        assert engine.decrypt("00111 01000") == "HI"

    def test_simple_substitution(self, engines):
        engine = engines.require(CipherType.SIMPLE_SUBSTITUTION)
        key = "QWERTYUIOPASDFGHJKLZXCVBNM"
        encrypted = engine.encrypt("HELLO WORLD", key)
        assert encrypted == "ITSSG VGKSR"
        assert engine.decrypt(encrypted, key) == "HELLO WORLD"

    def test_simple_substitution_rejects_partial_key(self, engines):
        engine = engines.require(CipherType.SIMPLE_SUBSTITUTION)
        with pytest.raises(InvalidKeyError):
            engine.encrypt("HELLO", "ABC")


class TestPolyalphabeticEngines:
    """Test suite for the periodic-key engines."""

    """Tests for the periodic and running-key engines."""

    def test_vigenere(self, engines):
        engine = engines.require(CipherType.VIGENERE)
        assert engine.encrypt("ATTACKATDAWN", "LEMON") == "LXFOPVEFRNHR"
        assert engine.decrypt("LXFOPVEFRNHR", "LEMON") == "ATTACKATDAWN"

    def test_vigenere_skips_non_letters(self, engines):
        engine = engines.require(CipherType.VIGENERE)
        assert engine.encrypt("ATTACK AT DAWN", "LEMON") == "LXFOPV EF RNHR"

    def test_autokey(self, engines):
        engine = engines.require(CipherType.AUTOKEY)
        assert engine.encrypt("ATTACKATDAWN", "QUEENLY") == "QNXEPVYTWTWP"
        assert engine.decrypt("QNXEPVYTWTWP", "QUEENLY") == "ATTACKATDAWN"

    def test_gronsfeld(self, engines):
        engine = engines.require(CipherType.GRONSFELD)
        assert engine.encrypt("HELLO", "123") == "IGOMQ"
        assert engine.decrypt("IGOMQ", 123) == "HELLO"

    def test_gronsfeld_rejects_letters(self, engines):
        assert not engines.require(CipherType.GRONSFELD).validate_key("ABC")

    def test_porta_is_reciprocal(self, engines):
        engine = engines.require(CipherType.PORTA)
        assert engine.encrypt("A", "A") == "N"
        encrypted = engine.encrypt("DEFEND THE EAST WALL", "FORTIFY")
        assert engine.encrypt(encrypted, "FORTIFY") == "DEFEND THE EAST WALL"

    def test_beaufort_is_reciprocal(self, engines):
        engine = engines.require(CipherType.BEAUFORT)
        encrypted = engine.encrypt("ATTACKATDAWN", "KEY")
        assert encrypted != "ATTACKATDAWN"
        assert engine.decrypt(encrypted, "KEY") == "ATTACKATDAWN"

    @pytest.mark.parametrize(
        "cipher_type,key",
        [
            (CipherType.QUAGMIRE1, "KEY:ABC"),
            (CipherType.QUAGMIRE2, "KEY:ABC"),
            (CipherType.QUAGMIRE3, "KEY:ABC"),
            (CipherType.QUAGMIRE4, "KEY:ABC:SECRET"),
        ],
    )
    def test_quagmire_round_trip(self, engines, cipher_type, key):
        engine = engines.require(cipher_type)
        plaintext = "MEET ME AFTER THE TOGA PARTY"
        encrypted = engine.encrypt(plaintext, key)
        assert encrypted != plaintext
        assert engine.decrypt(encrypted, key) == plaintext

    def test_quagmire4_needs_three_parts(self, engines):
        """Quagmire IV keys carry plaintext, indicator and ciphertext keywords."""
        engine = engines.require(CipherType.QUAGMIRE4)
        assert not engine.validate_key("KEY:ABC")
        with pytest.raises(InvalidKeyError):
            engine.encrypt("HELLO", "KEY:ABC")

    @pytest.mark.parametrize(
        "cipher_type", [CipherType.VIGENERE, CipherType.AUTOKEY, CipherType.PORTA, CipherType.BEAUFORT]
    )
    def test_keyword_required(self, engines, cipher_type):
        engine = engines.require(cipher_type)
        assert not engine.validate_key("")
        assert not engine.validate_key(None)


class TestTranspositionEngines:
    """Test suite for rail fence and AMSCO."""

    """Tests for rail fence and AMSCO."""

    def test_rail_fence(self, engines):
        engine = engines.require(CipherType.RAIL_FENCE)
        assert engine.encrypt("WEAREDISCOVEREDFLEEATONCE", 3) == "WECRLTEERDSOEEFEAOCAIVDEN"
        assert engine.decrypt("WECRLTEERDSOEEFEAOCAIVDEN", "3") == "WEAREDISCOVEREDFLEEATONCE"

    def test_rail_fence_drops_non_letters(self, engines):
        engine = engines.require(CipherType.RAIL_FENCE)
        assert engine.encrypt("WE ARE", 2) == "WAEER"

    def test_rail_fence_too_many_rails(self, engines):
        assert engines.require(CipherType.RAIL_FENCE).encrypt("ABC", 5) == "ABC"

    def test_rail_fence_invalid_rails(self, engines):
        engine = engines.require(CipherType.RAIL_FENCE)
        assert not engine.validate_key(1)
        assert not engine.validate_key(True)

    def test_amsco(self, engines):
        engine = engines.require(CipherType.AMSCO)
        assert engine.encrypt("ABCDEFG", "21") == "BCFADEG"
        assert engine.decrypt("BCFADEG", "21") == "ABCDEFG"

    def test_amsco_round_trip_longer_key(self, engines):
        engine = engines.require(CipherType.AMSCO)
        plaintext = "INCOMPLETECOLUMNARWITHALTERNATINGSINGLELETTERSANDDIGRAPHS"
        assert engine.decrypt(engine.encrypt(plaintext, "41532"), "41532") == plaintext

    @pytest.mark.parametrize("key", ["1", "113", "0123", "1234567890", True])
    def test_amsco_invalid_keys(self, engines, key):
        assert not engines.require(CipherType.AMSCO).validate_key(key)


class TestLayoutFlags:
    def test_shape_changing_engines(self, engines):
        for cipher_type in (CipherType.POLYBIUS, CipherType.BACONIAN, CipherType.ROT47):
            assert not engines.require(cipher_type).preserves_layout

    def test_letter_engines_preserve_layout(self, engines):
        assert engines.require(CipherType.VIGENERE).preserves_layout
