from app.models.schemas import CipherType, DecryptionResult
from app.services.engines.monoalphabetic.baconian import BaconianEngine
from app.services.engines.monoalphabetic.polybius import PolybiusEngine
from app.services.engines.registry import EngineRegistry
from app.services.solvers.base import Strategy


class PolybiusSolver(Strategy):
    """
    Decodes digit-pair ciphertext with the plain grid and a few keyword
    grids, keeping the best reading.
    """

    name = "polybius"
    method = "polybius"
    KEYWORDS = ["", "KEY", "SECRET", "CIPHER", "CODE"]
    MIN_PAIRS = 5
    MIN_LETTERS = 10

    def applicable(self, ciphertext: str) -> bool:
        return PolybiusEngine.count_pairs(ciphertext) >= self.MIN_PAIRS

    def solve(self, ciphertext: str) -> DecryptionResult:
        if not self.applicable(ciphertext):
            return self.failure(ciphertext, "Fewer than five digit pairs")

        engine = EngineRegistry().require(CipherType.POLYBIUS)
        best = None

        for keyword in self.KEYWORDS:
            plaintext = engine.decrypt(ciphertext, keyword)
            if len(plaintext) < self.MIN_LETTERS:
                continue
            evaluation = self.evaluate(plaintext)
            if best is None or evaluation.combined > best[2].combined:
                best = (keyword, plaintext, evaluation)

        if best is None:
            return self.failure(ciphertext, "Too few letters decoded")

        keyword, plaintext, evaluation = best
        return self.result(plaintext, keyword or None, evaluation)


class BaconianSolver(Strategy):
    """Decodes A/B (or 0/1) groups of five; there is no key to search."""

    name = "baconian"
    method = "baconian"
    MIN_LETTERS = 4

    def applicable(self, ciphertext: str) -> bool:
        return BaconianEngine.looks_encoded(ciphertext)

    def solve(self, ciphertext: str) -> DecryptionResult:
        if not self.applicable(ciphertext):
            return self.failure(ciphertext, "No Baconian groups found")

        engine = EngineRegistry().require(CipherType.BACONIAN)
        plaintext = engine.decrypt(ciphertext)
        if len(plaintext.replace(" ", "")) < self.MIN_LETTERS:
            return self.failure(ciphertext, "Too few letters decoded")

        return self.result(plaintext, None, self.evaluate(plaintext))
