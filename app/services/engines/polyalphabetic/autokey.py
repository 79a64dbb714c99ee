from typing import Any

from app.models.schemas import CipherFamily, CipherType
from app.services.engines.base import CipherEngine
from app.services.engines.registry import EngineRegistry


@EngineRegistry.register
class AutokeyEngine(CipherEngine):
    """
    Autokey cipher engine.

    The key stream is the primer keyword followed by the plaintext itself,
    so the key never repeats: C[i] = P[i] + K[i] with K = primer + P.
    """

    name = "Autokey Cipher"
    cipher_type = CipherType.AUTOKEY
    cipher_family = CipherFamily.VIGENERE_LIKE
    description = (
        "A Vigenère variant whose key stream continues with the plaintext "
        "after the primer, which defeats Kasiski examination."
    )

    def encrypt(self, plaintext: str, key: Any) -> str:
        self.require_key(key)
        stream = [ord(c) - 65 for c in self.clean_keyword(key)]

        def shift(p: int, i: int) -> int:
            stream.append(p)
            return p + stream[i]

        return self.map_letters(plaintext, shift)

    def decrypt(self, ciphertext: str, key: Any) -> str:
        self.require_key(key)
        stream = [ord(c) - 65 for c in self.clean_keyword(key)]

        def shift(c: int, i: int) -> int:
            p = (c - stream[i]) % 26
            stream.append(p)
            return p

        return self.map_letters(ciphertext, shift)

    def validate_key(self, key: Any) -> bool:
        return bool(self.clean_keyword(key))
