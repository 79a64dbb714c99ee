from itertools import permutations

from app.models.schemas import CipherFamily, CipherType, DecryptionResult
from app.services.engines.registry import EngineRegistry
from app.services.preprocessing.normalizer import TextNormalizer
from app.services.solvers.base import Evaluation, Strategy


class TranspositionStrategy(Strategy):
    """
    Shared search over a finite key list.

    Transpositions move letters, so the ciphertext's word breaks mean
    nothing: coverage is measured on the letter stream, which the
    dictionary validator segments when it is long enough.
    """

    cipher_type = CipherFamily.TRANSPOSITION
    engine_type: CipherType
    MIN_LETTERS = 8

    def keys(self, length: int) -> list:
        raise NotImplementedError

    def solve(self, ciphertext: str) -> DecryptionResult:
        clean = TextNormalizer.clean(ciphertext)
        if len(clean) < self.MIN_LETTERS:
            return self.failure(ciphertext, "Too short for transposition")

        engine = EngineRegistry().require(self.engine_type)
        best: tuple[tuple[float, float], object, str, Evaluation] | None = None

        for key in self.keys(len(clean)):
            letters = engine.decrypt(clean, key)
            evaluation = self.evaluate(letters, words_from=letters)
            rank = (evaluation.combined, evaluation.ngram_avg)
            if best is None or rank > best[0]:
                best = (rank, key, letters, evaluation)

        if best is None:
            return self.failure(ciphertext, "No admissible key")

        _, key, letters, evaluation = best
        return self.result(
            TextNormalizer.match_layout(ciphertext, letters),
            key,
            evaluation,
            is_transposition=True,
        )


class RailFenceSolver(TranspositionStrategy):
    """Rail counts 2-10."""

    name = "railfence"
    method = "railfence"
    engine_type = CipherType.RAIL_FENCE
    MAX_RAILS = 10

    def keys(self, length: int) -> list[int]:
        return list(range(2, min(self.MAX_RAILS, length - 1) + 1))


class AmscoSolver(TranspositionStrategy):
    """Every column order for 2 to 5 columns (152 keys)."""

    name = "amsco"
    method = "amsco"
    engine_type = CipherType.AMSCO
    MAX_COLUMNS = 5

    def keys(self, length: int) -> list[str]:
        return [
            "".join(order)
            for columns in range(2, self.MAX_COLUMNS + 1)
            for order in permutations("123456789"[:columns])
        ]
