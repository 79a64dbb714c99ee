"""Tests for the key recovery strategies."""

import random

import pytest

from app.core.config import Settings
from app.models.schemas import CipherFamily, CipherType
from app.services.engines.registry import EngineRegistry
from app.services.preprocessing.normalizer import TextNormalizer
from app.services.solvers.autokey import AutokeySolver
from app.services.solvers.encoding import BaconianSolver, PolybiusSolver
from app.services.solvers.base import Evaluation
from app.services.solvers.polyalphabetic import PolyalphabeticSolver, PolyCandidate
from app.services.solvers.shift import AtbashSolver, CaesarBruteForce, Rot47BruteForce
from app.services.solvers.substitution import SubstitutionSolver
from app.services.solvers.transposition import AmscoSolver, RailFenceSolver
from app.services.solvers.vigenere import VigenereSolver, minimal_period


def encrypt(cipher_type, text, key=None):
    return EngineRegistry().require(cipher_type).encrypt(text, key)


def build(solver_class, registry, **kwargs):
    return solver_class("english", registry, **kwargs)


class TestCaesarBruteForce:
    """Test suite for Caesar brute force."""

    @pytest.mark.parametrize("shift", [1, 3, 7, 19, 25])
    def test_recovers_shift(self, registry, english_text, shift):
        ciphertext = encrypt(CipherType.CAESAR, english_text, shift)
        result = build(CaesarBruteForce, registry).solve(ciphertext)

        assert result.key == shift
        assert result.plaintext == english_text
        assert result.method == "caesar-shift"
        assert result.cipher_type == CipherFamily.CAESAR
        assert result.confidence >= 0.9

    def test_rot13_label(self, registry, english_text):
        result = build(CaesarBruteForce, registry).solve(encrypt(CipherType.CAESAR, english_text, 13))
        assert result.method == "rot13"
        assert result.key == 13

    def test_keeps_layout(self, registry, pangram_ciphertext):
        result = build(CaesarBruteForce, registry).solve(pangram_ciphertext.lower())
        assert result.plaintext == "the quick brown fox jumps over the lazy dog"

    def test_no_letters(self, registry):
        result = build(CaesarBruteForce, registry).solve("1234 !!")
        assert result.error
        assert result.confidence == 0.0


class TestKeylessSolvers:
    def test_atbash(self, registry, english_text):
        result = build(AtbashSolver, registry).solve(encrypt(CipherType.ATBASH, english_text))
        assert result.plaintext == english_text
        assert result.confidence >= 0.9

    def test_rot47(self, registry):
        plaintext = "Meet me at 10 o'clock, the usual place. Bring the money and come alone!"
        solver = build(Rot47BruteForce, registry)
        ciphertext = encrypt(CipherType.ROT47, plaintext)

        assert solver.applicable(ciphertext)
        result = solver.solve(ciphertext)
        assert result.key == 47
        assert result.plaintext == plaintext

    def test_rot47_needs_symbols(self, registry):
        assert not build(Rot47BruteForce, registry).applicable("ONLY LETTERS HERE")

    def test_polybius(self, registry):
        ciphertext = encrypt(CipherType.POLYBIUS, "WE WILL MEET AT THE BRIDGE AT MIDNIGHT")
        result = build(PolybiusSolver, registry).solve(ciphertext)
        assert result.plaintext == "WEWILLMEETATTHEBRIDGEATMIDNIGHT"
        assert result.key is None

    def test_polybius_rejects_letters(self, registry):
        solver = build(PolybiusSolver, registry)
        assert not solver.applicable("HELLO WORLD")
        assert solver.solve("HELLO WORLD").error

    def test_baconian(self, registry):
        ciphertext = encrypt(CipherType.BACONIAN, "HELLO WORLD")
        result = build(BaconianSolver, registry).solve(ciphertext)
        assert result.plaintext == "HELLO WORLD"

    def test_baconian_rejects_plain_text(self, registry):
        assert build(BaconianSolver, registry).solve("NOTHING TO SEE").error


class TestVigenereSolver:
    """Test suite for the Vigenere attack."""

    def test_recovers_key(self, registry, english_text):
        ciphertext = encrypt(CipherType.VIGENERE, english_text, "KEY")
        result = build(VigenereSolver, registry).solve(ciphertext)

        assert result.key == "KEY"
        assert result.key_length == 3
        assert result.method == "vigenere-friedman"
        assert result.plaintext == english_text

    def test_key_length_hint_tried_first(self, registry):
        solver = build(VigenereSolver, registry, key_length_hint=7)
        lengths, _ = solver.key_length_hypotheses("ABCDEFGHIJKLMNOPQRSTUVWXYZ" * 2)
        assert lengths[0] == 7

    def test_single_letter_key_reported_as_caesar(self, registry, english_text):
        """A period-1 key is a Caesar shift."""
        ciphertext = encrypt(CipherType.VIGENERE, english_text, "DDDD")
        result = build(VigenereSolver, registry).solve(ciphertext)

        assert result.method == "caesar-shift"
        assert result.key == 3
        assert result.cipher_type == CipherFamily.CAESAR

    def test_too_short(self, registry):
        assert build(VigenereSolver, registry).solve("ABCDEF").error

    def test_minimal_period(self):
        assert minimal_period("KEYKEY") == "KEY"
        assert minimal_period("AAAA") == "A"
        assert minimal_period("LEMON") == "LEMON"


class TestPolyalphabeticSolver:
    @pytest.fixture
    def solver(self, registry):
        return build(PolyalphabeticSolver, registry)

    def test_beaufort(self, solver, english_text):
        ciphertext = encrypt(CipherType.BEAUFORT, english_text, "KEY")
        candidate = solver.solve_beaufort(ciphertext, TextNormalizer.clean(ciphertext), 3)

        assert candidate.method == "beaufort"
        assert candidate.key == "KEY"
        assert candidate.plaintext == english_text

    def test_porta_catalog_keyword(self, solver, english_text):
        ciphertext = encrypt(CipherType.PORTA, english_text, "CIPHER")
        candidate = solver.solve_porta(ciphertext, TextNormalizer.clean(ciphertext), 6)

        assert candidate.method == "porta"
        assert candidate.key == "CIPHER"
        assert candidate.plaintext == english_text

    def test_gronsfeld(self, solver, english_text):
        ciphertext = encrypt(CipherType.GRONSFELD, english_text, "2718")
        candidate = solver.solve_gronsfeld(ciphertext, TextNormalizer.clean(ciphertext), 4)

        assert candidate.method == "gronsfeld"
        assert candidate.key == "2718"
        assert candidate.plaintext == english_text

    def test_quagmire_catalog_key(self, solver, english_text):
        ciphertext = encrypt(CipherType.QUAGMIRE3, english_text, "SECRET:KEY")
        candidate = solver.solve_quagmire(ciphertext)

        assert candidate.method == "quagmire3"
        assert candidate.key == "SECRET:KEY"
        assert candidate.key_length == 3
        assert candidate.plaintext == english_text

    def test_quagmire_needs_long_text(self, solver):
        assert solver.solve_quagmire("ABCDEFGHIJ" * 3) is None

    @pytest.mark.parametrize(
        "scores, expected",
        [
            ({"quagmire1": 0.80, "quagmire2": 0.79, "quagmire3": 0.78, "quagmire4": 0.60}, "quagmire3"),
            ({"quagmire1": 0.80, "quagmire2": 0.50, "quagmire3": 0.50, "quagmire4": 0.77}, "quagmire4"),
            ({"quagmire1": 0.80, "quagmire2": 0.70, "quagmire3": 0.60, "quagmire4": 0.50}, "quagmire1"),
        ],
    )
    def test_quagmire_tie_prefers_higher_variant(self, solver, english_text, monkeypatch, scores, expected):
        """Variants within 5% of the best are resolved IV > III > II > I."""

        def candidate(method, cipher_type, ciphertext, key, key_length):
            evaluation = Evaluation(ngram_avg=-5.0, ngram_score=scores[method] / 0.7, word_coverage=0.0)
            return PolyCandidate(method, key, ciphertext, evaluation, 0.5, key_length)

        monkeypatch.setattr(solver, "_quagmire_keys", lambda cipher_type: ["KEY:A:CODE"])
        monkeypatch.setattr(solver, "_candidate", candidate)

        assert solver.solve_quagmire(english_text).method == expected

    def test_vigenere_variant(self, registry, english_text):
        ciphertext = encrypt(CipherType.VIGENERE, english_text, "KEY")
        result = build(PolyalphabeticSolver, registry).solve(ciphertext)

        assert result.method == "vigenere"
        assert result.key == "KEY"
        assert result.plaintext == english_text

    def test_too_short(self, registry):
        result = build(PolyalphabeticSolver, registry).solve("SHORT")
        assert result.method == "none"
        assert result.error


class TestAutokeySolver:
    def test_recovers_catalog_primer(self, registry, english_text):
        ciphertext = encrypt(CipherType.AUTOKEY, english_text, "SECRET")
        result = build(AutokeySolver, registry).solve(ciphertext)

        assert result.key == "SECRET"
        assert result.plaintext == english_text
        assert result.key_length == 6


class TestTranspositionSolvers:
    def test_rail_fence(self, registry, english_text):
        ciphertext = encrypt(CipherType.RAIL_FENCE, english_text, 3)
        result = build(RailFenceSolver, registry).solve(ciphertext)

        assert result.key == 3
        assert result.plaintext == TextNormalizer.clean(english_text)
        assert result.is_transposition
        assert result.cipher_type == CipherFamily.TRANSPOSITION

    def test_amsco(self, registry, english_text):
        ciphertext = encrypt(CipherType.AMSCO, english_text, "312")
        result = build(AmscoSolver, registry).solve(ciphertext)

        assert result.key == "312"
        assert result.plaintext == TextNormalizer.clean(english_text)

    def test_amsco_key_space(self, registry):
        assert len(build(AmscoSolver, registry).keys(100)) == 2 + 6 + 24 + 120

    def test_too_short(self, registry):
        assert build(RailFenceSolver, registry).solve("ABC").error


class TestSubstitutionSolver:
    def test_result_shape(self, registry, english_text):
        settings = Settings(search={"hill_climb_iterations": 300, "restarts": 1})
        ciphertext = encrypt(CipherType.SIMPLE_SUBSTITUTION, english_text, "QWERTYUIOPASDFGHJKLZXCVBNM")
        solver = SubstitutionSolver("english", registry, settings, rng=random.Random(11))
        result = solver.solve(ciphertext)

        assert result.method == "hill-climbing"
        assert len(result.key) == 26
        assert len(TextNormalizer.clean(result.plaintext)) == len(TextNormalizer.clean(english_text))
        assert 0.0 <= result.confidence <= 1.0

    def test_steps_then_finish(self, registry, english_text):
        """Streaming the search and finishing gives a scored result."""
        settings = Settings(search={"hill_climb_iterations": 100, "restarts": 1})
        ciphertext = encrypt(CipherType.SIMPLE_SUBSTITUTION, english_text, "QWERTYUIOPASDFGHJKLZXCVBNM")
        solver = SubstitutionSolver("english", registry, settings, rng=random.Random(11))

        snapshots = list(solver.steps(ciphertext))
        result = solver.finish(ciphertext, TextNormalizer.clean(ciphertext), snapshots[-1].key)
        assert result.key == snapshots[-1].key

    def test_too_short(self, registry):
        solver = build(SubstitutionSolver, registry)
        assert not solver.applicable("ABC DEF")
        assert solver.solve("ABC DEF").error
        assert list(solver.steps("ABC DEF")) == []
