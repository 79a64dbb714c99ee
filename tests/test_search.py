"""Tests for the substitution key search."""

import random

import pytest

from app.core.config import SearchSettings
from app.models.schemas import CipherType
from app.services.engines.registry import EngineRegistry
from app.services.optimization.hill_climbing import HillClimber
from app.services.optimization.scoring import SearchScorer
from app.services.optimization.simulated_annealing import SimulatedAnnealer
from app.services.preprocessing.normalizer import TextNormalizer

KEY = "QWERTYUIOPASDFGHJKLZXCVBNM"


@pytest.fixture
def scorer(registry):
    return SearchScorer(registry.get("english"))


@pytest.fixture
def substituted(english_text):
    engine = EngineRegistry().require(CipherType.SIMPLE_SUBSTITUTION)
    return TextNormalizer.clean(engine.encrypt(english_text, KEY))


class TestSearchScorer:
    def test_swap(self):
        assert SearchScorer.swap("ABCD", 0, 3) == "DBCA"
        assert SearchScorer.swap("ABCD", 2, 1) == "ACBD"
        assert SearchScorer.swap("ABCD", 1, 1) == "ABCD"

    def test_apply_key(self):
        assert SearchScorer.apply_key("ABC", "ZYXWVUTSRQPONMLKJIHGFEDCBA") == "ZYX"

    def test_identity_and_random_keys(self):
        assert SearchScorer.identity_key() == "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
        key = SearchScorer.random_key(random.Random(7))
        assert sorted(key) == list("ABCDEFGHIJKLMNOPQRSTUVWXYZ")

    def test_frequency_key_is_permutation(self, registry, substituted):
        key = SearchScorer.frequency_key(substituted, registry.get("english"))
        assert sorted(key) == list("ABCDEFGHIJKLMNOPQRSTUVWXYZ")

    def test_frequency_key_maps_most_common_letter_to_e(self, registry):
        key = SearchScorer.frequency_key("XXXXXQQQZ", registry.get("english"))
        assert key[ord("X") - 65] == "E"
        assert key[ord("Q") - 65] == "T"

    def test_score_floor_for_short_text(self, scorer):
        assert scorer.score("ABC") == -10.0

    def test_correct_key_scores_higher(self, scorer, substituted):
        engine = EngineRegistry().require(CipherType.SIMPLE_SUBSTITUTION)
        decrypt_key = engine.invert(KEY)
        assert scorer.score_with_key(substituted, decrypt_key) > scorer.score_with_key(substituted, KEY)


class TestHillClimber:
    def test_final_score_not_below_start(self, scorer, substituted):
        climber = HillClimber(scorer, SearchSettings(hill_climb_iterations=200), random.Random(3))
        snapshots = list(climber.steps(substituted))

        assert snapshots[0].iteration == 0
        assert snapshots[-1].progress == 100.0
        assert snapshots[-1].key is not None
        assert snapshots[-1].score >= snapshots[0].score
        assert all(s.key is None for s in snapshots[:-1])

    def test_solve_improves_on_frequency_key(self, scorer, substituted, registry):
        start = scorer.score_with_key(substituted, SearchScorer.frequency_key(substituted, registry.get("english")))
        state = HillClimber(scorer, SearchSettings(restarts=1), random.Random(3)).solve(substituted)

        assert state.score >= start
        assert sorted(state.key) == list("ABCDEFGHIJKLMNOPQRSTUVWXYZ")

    def test_identity_init(self, scorer):
        climber = HillClimber(scorer, SearchSettings(), random.Random(1))
        assert climber.initial_key("ABC", "identity") == SearchScorer.identity_key()


class TestSimulatedAnnealer:
    def test_returns_best_state(self, scorer, substituted):
        settings = SearchSettings(annealing_iterations=2000, progress_every=500, restarts=1)
        annealer = SimulatedAnnealer(scorer, settings, random.Random(5))
        start = scorer.score_with_key(substituted, annealer.initial_key(substituted, "frequency"))

        state = annealer.solve(substituted)
        assert state.score >= start

    def test_steps_report_progress(self, scorer, substituted):
        settings = SearchSettings(annealing_iterations=1000, progress_every=250)
        snapshots = list(SimulatedAnnealer(scorer, settings, random.Random(5)).steps(substituted))

        assert len(snapshots) >= 2
        assert snapshots[-1].progress == 100.0
        assert snapshots[-1].method == "simulated-annealing"
        scores = [s.score for s in snapshots[:-1]]
        assert scores == sorted(scores)
