from typing import Any

from app.models.schemas import CipherFamily, CipherType
from app.services.engines.base import CipherEngine
from app.services.engines.registry import EngineRegistry


@EngineRegistry.register
class GronsfeldEngine(CipherEngine):
    """
    Gronsfeld cipher engine.

    A Vigenère cipher whose key is a string of digits, each digit a shift
    of 0-9.
    """

    name = "Gronsfeld Cipher"
    cipher_type = CipherType.GRONSFELD
    cipher_family = CipherFamily.VIGENERE_LIKE
    description = "A Vigenère variant keyed by a number instead of a word."

    @staticmethod
    def shifts(key: Any) -> list[int]:
        return [int(d) for d in str(key) if d.isdigit()]

    def encrypt(self, plaintext: str, key: Any) -> str:
        self.require_key(key)
        shifts = self.shifts(key)
        return self.map_letters(plaintext, lambda p, i: p + shifts[i % len(shifts)])

    def decrypt(self, ciphertext: str, key: Any) -> str:
        self.require_key(key)
        shifts = self.shifts(key)
        return self.map_letters(ciphertext, lambda c, i: c - shifts[i % len(shifts)])

    def validate_key(self, key: Any) -> bool:
        """Key must be a non-negative integer or a string of digits."""
        if isinstance(key, bool):
            return False
        if isinstance(key, int):
            return key >= 0
        return isinstance(key, str) and key.isdigit()
