import re

from app.models.schemas import CipherFamily, CipherType, DecryptionResult
from app.services.engines.registry import EngineRegistry
from app.services.preprocessing.normalizer import TextNormalizer
from app.services.solvers.base import Evaluation, Strategy


class CaesarBruteForce(Strategy):
    """
    Tries shifts 1-25 and keeps the one that reads best.

    Candidates are ranked by 0.7 * n-gram fit + 0.3 * word coverage with
    the raw quadgram average as tie-break. A shift of 13 is reported as
    ROT13.
    """

    name = "caesar"
    method = "caesar-shift"
    cipher_type = CipherFamily.CAESAR

    def solve(self, ciphertext: str) -> DecryptionResult:
        if not TextNormalizer.clean(ciphertext):
            return self.failure(ciphertext, "No letters to shift")

        engine = EngineRegistry().require(CipherType.CAESAR)
        best: tuple[tuple[float, float], int, str, Evaluation] | None = None

        for shift in range(1, 26):
            plaintext = TextNormalizer.match_layout(ciphertext, engine.decrypt(ciphertext, shift))
            evaluation = self.evaluate(plaintext)
            rank = (evaluation.combined, evaluation.ngram_avg)
            if best is None or rank > best[0]:
                best = (rank, shift, plaintext, evaluation)

        _, shift, plaintext, evaluation = best
        return self.result(
            plaintext,
            shift,
            evaluation,
            method="rot13" if shift == 13 else self.method,
            key_length=1,
        )


class AtbashSolver(Strategy):
    """Atbash has a single key, so solving is one decryption plus scoring."""

    name = "atbash"
    method = "atbash"

    def solve(self, ciphertext: str) -> DecryptionResult:
        if not TextNormalizer.clean(ciphertext):
            return self.failure(ciphertext, "No letters to mirror")

        engine = EngineRegistry().require(CipherType.ATBASH)
        plaintext = TextNormalizer.match_layout(ciphertext, engine.decrypt(ciphertext))
        return self.result(plaintext, None, self.evaluate(plaintext))


class Rot47BruteForce(Strategy):
    """
    Rotations over printable ASCII.

    Only worth running when the ciphertext carries digits or punctuation
    next to its letters, since ROT47 moves letters into symbols and back.
    Stops early once more than 70% of the words are in the dictionary.
    """

    name = "rot47"
    method = "rot47"
    SYMBOLS = re.compile(r"[!-/:-@\[-`{-~0-9]")
    EARLY_EXIT_COVERAGE = 0.7

    def applicable(self, ciphertext: str) -> bool:
        return bool(self.SYMBOLS.search(ciphertext))

    def solve(self, ciphertext: str) -> DecryptionResult:
        engine = EngineRegistry().require(CipherType.ROT47)
        best: tuple[tuple[float, float], int, str, Evaluation] | None = None

        for shift in range(1, engine.SIZE):
            plaintext = engine.decrypt(ciphertext, shift)
            if len(TextNormalizer.clean(plaintext)) < 4:
                continue
            evaluation = self.evaluate(plaintext)
            rank = (evaluation.combined, evaluation.ngram_avg)
            if best is None or rank > best[0]:
                best = (rank, shift, plaintext, evaluation)
                if evaluation.word_coverage > self.EARLY_EXIT_COVERAGE:
                    break

        if best is None:
            return self.failure(ciphertext, "No rotation produced readable letters")

        _, shift, plaintext, evaluation = best
        return self.result(plaintext, shift, evaluation)
