from app.models.schemas import CipherFamily, CipherType, DecryptionResult
from app.services.engines.registry import EngineRegistry
from app.services.preprocessing.normalizer import TextNormalizer
from app.services.solvers.base import Strategy


class AutokeySolver(Strategy):
    """
    Autokey with a catalog of common primers.

    The plaintext feeds the key stream, so a right primer decrypts the
    whole message and a wrong one produces noise throughout. That makes a
    small catalog a cheap first attempt.
    """

    name = "autokey"
    method = "autokey"
    cipher_type = CipherFamily.VIGENERE_LIKE
    PRIMERS = ["THE", "AND", "KEY", "SECRET", "MESSAGE", "A", "I"]
    MIN_LETTERS = 10

    def solve(self, ciphertext: str) -> DecryptionResult:
        if len(TextNormalizer.clean(ciphertext)) < self.MIN_LETTERS:
            return self.failure(ciphertext, "Too short for autokey")

        engine = EngineRegistry().require(CipherType.AUTOKEY)
        best = None

        for primer in self.PRIMERS:
            plaintext = TextNormalizer.match_layout(ciphertext, engine.decrypt(ciphertext, primer))
            evaluation = self.evaluate(plaintext)
            if best is None or evaluation.combined > best[2].combined:
                best = (primer, plaintext, evaluation)
            if evaluation.word_coverage > 0.8 and evaluation.ngram_score > 0.9:
                break

        primer, plaintext, evaluation = best
        return self.result(plaintext, primer, evaluation, key_length=len(primer))
