from typing import Any

from app.models.schemas import CipherFamily, CipherType
from app.services.engines.base import CipherEngine
from app.services.engines.registry import EngineRegistry


@EngineRegistry.register
class PortaEngine(CipherEngine):
    """
    Porta cipher engine.

    Thirteen reciprocal alphabets, one per key letter pair (AB, CD, ...).
    With k = key_index // 2, a letter in the first half moves to
    ((p + k) % 13) + 13 and a letter in the second half moves back to
    (p - 13 - k) % 13. Encryption and decryption are the same operation.
    """

    name = "Porta Cipher"
    cipher_type = CipherType.PORTA
    cipher_family = CipherFamily.VIGENERE_LIKE
    description = "A reciprocal polyalphabetic cipher with thirteen alphabets."

    @staticmethod
    def swap(p: int, k: int) -> int:
        if p < 13:
            return ((p + k) % 13) + 13
        return (p - 13 - k) % 13

    def encrypt(self, plaintext: str, key: Any) -> str:
        self.require_key(key)
        pairs = [(ord(c) - 65) // 2 for c in self.clean_keyword(key)]
        return self.map_letters(plaintext, lambda p, i: self.swap(p, pairs[i % len(pairs)]))

    def decrypt(self, ciphertext: str, key: Any) -> str:
        return self.encrypt(ciphertext, key)

    def validate_key(self, key: Any) -> bool:
        return bool(self.clean_keyword(key))
