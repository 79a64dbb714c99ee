import logging
import math
import random
from collections.abc import Iterator

from app.core.config import SearchSettings, get_settings
from app.services.optimization.hill_climbing import HillClimber
from app.services.optimization.scoring import SearchProgress, SearchScorer, SearchState

logger = logging.getLogger(__name__)


class SimulatedAnnealer(HillClimber):
    """
    Simulated annealing over substitution keys.

    Same move set as hill climbing, but a random swap that worsens the
    score by delta is still accepted with probability exp(delta / T).
    T starts high and decays geometrically, which lets the search leave
    local maxima early on. The best state ever seen is returned, not the
    final one.
    """

    METHOD = "simulated-annealing"

    def __init__(
        self,
        scorer: SearchScorer,
        settings: SearchSettings | None = None,
        rng: random.Random | None = None,
    ):
        super().__init__(scorer, settings or get_settings().search, rng)

    def _anneal(self, clean_text: str, key: str, max_iterations: int) -> Iterator[tuple[SearchState, SearchState]]:
        """Yield (current, best) every ``progress_every`` iterations and at the end."""
        s = self.settings
        score = self.scorer.score_with_key(clean_text, key)
        temperature = s.initial_temperature
        best = SearchState(key=key, score=score, iteration=0, temperature=temperature)
        current = best

        iteration = 0
        for iteration in range(1, max_iterations + 1):
            i, j = self.rng.sample(range(26), 2)
            candidate = SearchScorer.swap(key, i, j)
            candidate_score = self.scorer.score_with_key(clean_text, candidate)
            delta = candidate_score - score

            if delta > 0 or self.rng.random() < math.exp(delta / temperature):
                key, score = candidate, candidate_score
                if score > best.score:
                    best = SearchState(key=key, score=score, iteration=iteration, temperature=temperature)

            temperature *= s.cooling_rate
            if iteration % s.progress_every == 0:
                current = SearchState(key=key, score=score, iteration=iteration, temperature=temperature)
                yield current, best
            if temperature < s.min_temperature:
                break

        current = SearchState(key=key, score=score, iteration=iteration, temperature=temperature)
        yield current, best

    def solve(
        self,
        clean_text: str,
        init: str = "frequency",
        max_iterations: int | None = None,
        restarts: int | None = None,
    ) -> SearchState:
        """Run to completion and return the best state over all runs."""
        max_iterations = max_iterations or self.settings.annealing_iterations
        restarts = restarts or self.settings.restarts

        best: SearchState | None = None
        for run in range(restarts):
            key = self.initial_key(clean_text, init if run == 0 else "random")
            run_best = None
            for _, run_best in self._anneal(clean_text, key, max_iterations):
                pass
            logger.debug("Annealing run %d best %.3f", run, run_best.score)
            if best is None or run_best.score > best.score:
                best = run_best

        return best

    def steps(
        self,
        clean_text: str,
        init: str = "frequency",
        max_iterations: int | None = None,
    ) -> Iterator[SearchProgress]:
        """Single run as a progress stream reporting the best state so far."""
        max_iterations = max_iterations or self.settings.annealing_iterations
        key = self.initial_key(clean_text, init)

        best = None
        for current, best in self._anneal(clean_text, key, max_iterations):
            yield SearchProgress(
                iteration=current.iteration,
                score=best.score,
                plaintext=SearchScorer.apply_key(clean_text, best.key),
                progress=min(current.iteration / max_iterations * 100, 99.0),
                method=self.METHOD,
            )

        yield SearchProgress(
            iteration=best.iteration,
            score=best.score,
            plaintext=SearchScorer.apply_key(clean_text, best.key),
            progress=100.0,
            key=best.key,
            method=self.METHOD,
        )
