import logging
import random
from collections.abc import Iterator
from itertools import combinations

from app.core.config import SearchSettings, get_settings
from app.services.optimization.scoring import SearchProgress, SearchScorer, SearchState

logger = logging.getLogger(__name__)


class HillClimber:
    """
    Hill climbing over substitution keys.

    Algorithm:
    1. Start with an initial key (frequency, random or identity)
    2. Scan all 325 letter-pair swaps of the current key
    3. Accept the first swap that strictly improves the quadgram score
       and restart the scan
    4. Stop on a full pass without improvement or at the iteration cap

    Restarts beyond the first begin from random keys and the best
    terminal state wins.
    """

    METHOD = "hill-climbing"
    SWAPS = list(combinations(range(26), 2))

    def __init__(
        self,
        scorer: SearchScorer,
        settings: SearchSettings | None = None,
        rng: random.Random | None = None,
    ):
        self.scorer = scorer
        self.settings = settings or get_settings().search
        self.rng = rng or random.Random()

    def initial_key(self, clean_text: str, init: str) -> str:
        if init == "random":
            return SearchScorer.random_key(self.rng)
        if init == "identity":
            return SearchScorer.identity_key()
        return SearchScorer.frequency_key(clean_text, self.scorer.profile)

    def _climb(self, clean_text: str, key: str, max_iterations: int) -> Iterator[SearchState]:
        """Yield the starting state and every accepted improvement."""
        score = self.scorer.score_with_key(clean_text, key)
        iteration = 0
        yield SearchState(key=key, score=score, iteration=iteration)

        improved = True
        while improved and iteration < max_iterations:
            improved = False
            iteration += 1
            for i, j in self.SWAPS:
                candidate = SearchScorer.swap(key, i, j)
                candidate_score = self.scorer.score_with_key(clean_text, candidate)
                if candidate_score > score:
                    key, score = candidate, candidate_score
                    improved = True
                    yield SearchState(key=key, score=score, iteration=iteration)
                    break

    def solve(
        self,
        clean_text: str,
        init: str = "frequency",
        max_iterations: int | None = None,
        restarts: int | None = None,
    ) -> SearchState:
        """
        Run to completion.

        Args:
            clean_text: Letters-only uppercase ciphertext
            init: Initial key strategy for the first run
            max_iterations: Cap on accepted moves per run
            restarts: Number of runs

        Returns:
            Best terminal state over all runs
        """
        max_iterations = max_iterations or self.settings.hill_climb_iterations
        restarts = restarts or self.settings.restarts

        best: SearchState | None = None
        for run in range(restarts):
            key = self.initial_key(clean_text, init if run == 0 else "random")
            state = None
            for state in self._climb(clean_text, key, max_iterations):
                pass
            logger.debug("Hill climbing run %d ended at %.3f after %d moves", run, state.score, state.iteration)
            if best is None or state.score > best.score:
                best = state

        return best

    def steps(
        self,
        clean_text: str,
        init: str = "frequency",
        max_iterations: int | None = None,
    ) -> Iterator[SearchProgress]:
        """
        Single run as a progress stream.

        Yields the starting point, every improvement and a final 100%
        snapshot that carries the key.
        """
        max_iterations = max_iterations or self.settings.hill_climb_iterations
        key = self.initial_key(clean_text, init)

        state = None
        for state in self._climb(clean_text, key, max_iterations):
            yield SearchProgress(
                iteration=state.iteration,
                score=state.score,
                plaintext=SearchScorer.apply_key(clean_text, state.key),
                progress=min(state.iteration / max_iterations * 100, 99.0),
                method=self.METHOD,
            )

        yield SearchProgress(
            iteration=state.iteration,
            score=state.score,
            plaintext=SearchScorer.apply_key(clean_text, state.key),
            progress=100.0,
            key=state.key,
            method=self.METHOD,
        )
