from typing import Any

from app.models.schemas import CipherFamily, CipherType
from app.services.engines.base import CipherEngine
from app.services.engines.registry import EngineRegistry


@EngineRegistry.register
class BeaufortEngine(CipherEngine):
    """
    Beaufort cipher engine.

    C = K - P (mod 26). The same operation decrypts, so the cipher is
    reciprocal.
    """

    name = "Beaufort Cipher"
    cipher_type = CipherType.BEAUFORT
    cipher_family = CipherFamily.VIGENERE_LIKE
    description = (
        "A reciprocal variant of the Vigenère cipher where each letter is "
        "subtracted from the key letter."
    )

    def encrypt(self, plaintext: str, key: Any) -> str:
        self.require_key(key)
        shifts = [ord(c) - 65 for c in self.clean_keyword(key)]
        return self.map_letters(plaintext, lambda p, i: shifts[i % len(shifts)] - p)

    def decrypt(self, ciphertext: str, key: Any) -> str:
        return self.encrypt(ciphertext, key)

    def validate_key(self, key: Any) -> bool:
        return bool(self.clean_keyword(key))
