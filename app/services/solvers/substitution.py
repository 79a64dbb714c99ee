import logging
import random
from collections.abc import Iterator

from app.models.schemas import DecryptionResult
from app.services.optimization.hill_climbing import HillClimber
from app.services.optimization.scoring import SearchProgress, SearchScorer
from app.services.optimization.simulated_annealing import SimulatedAnnealer
from app.services.preprocessing.normalizer import TextNormalizer
from app.services.solvers.base import Strategy

logger = logging.getLogger(__name__)


class SubstitutionSolver(Strategy):
    """
    General monoalphabetic substitution by local search.

    The search maximizes quadgram fitness over 26-letter keys. Its
    confidence is clamp((ngram - 0.25) / 0.6) blended 70/30 with word
    coverage; local search can stall in a local maximum and this is how
    that shows up.
    """

    name = "hill-climbing"
    method = "hill-climbing"
    search_class: type[HillClimber] = HillClimber
    MIN_LETTERS = 20

    def __init__(self, *args, rng: random.Random | None = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.rng = rng or random.Random()

    def searcher(self) -> HillClimber:
        scorer = SearchScorer(self.scorer.profile, self.settings.scoring.search_floor)
        return self.search_class(scorer, self.settings.search, self.rng)

    def applicable(self, ciphertext: str) -> bool:
        return len(TextNormalizer.clean(ciphertext)) >= self.MIN_LETTERS

    def solve(self, ciphertext: str) -> DecryptionResult:
        clean = TextNormalizer.clean(ciphertext)
        if len(clean) < self.MIN_LETTERS:
            return self.failure(ciphertext, "Too short for substitution search")

        state = self.searcher().solve(clean)
        logger.debug("%s finished at %.3f", self.method, state.score)
        return self.finish(ciphertext, clean, state.key)

    def steps(self, ciphertext: str) -> Iterator[SearchProgress]:
        """Progress stream of a single search run."""
        clean = TextNormalizer.clean(ciphertext)
        if len(clean) < self.MIN_LETTERS:
            return
        yield from self.searcher().steps(clean)

    def finish(self, ciphertext: str, clean: str, key: str) -> DecryptionResult:
        plaintext = TextNormalizer.match_layout(ciphertext, SearchScorer.apply_key(clean, key))
        evaluation = self.evaluate(plaintext)
        fit = max(0.0, min(1.0, (evaluation.ngram_score - 0.25) / 0.6))
        confidence = 0.7 * fit + 0.3 * evaluation.word_coverage
        return self.result(plaintext, key, evaluation, confidence=confidence, key_length=1)


class AnnealingSolver(SubstitutionSolver):
    name = "simulated-annealing"
    method = "simulated-annealing"
    search_class = SimulatedAnnealer
