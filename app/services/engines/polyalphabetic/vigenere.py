from typing import Any

from app.models.schemas import CipherFamily, CipherType
from app.services.engines.base import CipherEngine
from app.services.engines.registry import EngineRegistry


@EngineRegistry.register
class VigenereEngine(CipherEngine):
    """
    Vigenère cipher engine.

    A polyalphabetic substitution cipher that uses a keyword to determine
    the shift for each letter. Each letter of the keyword represents a
    different Caesar shift applied in sequence: C = P + K (mod 26).
    """

    name = "Vigenère Cipher"
    cipher_type = CipherType.VIGENERE
    cipher_family = CipherFamily.VIGENERE_LIKE
    description = (
        "A polyalphabetic cipher where each letter is shifted by a different amount "
        "based on a repeating keyword. Vulnerable to Kasiski examination and "
        "frequency analysis per key position."
    )

    def shifts(self, key: Any) -> list[int]:
        return [ord(c) - 65 for c in self.clean_keyword(key)]

    def encrypt(self, plaintext: str, key: Any) -> str:
        self.require_key(key)
        shifts = self.shifts(key)
        return self.map_letters(plaintext, lambda p, i: p + shifts[i % len(shifts)])

    def decrypt(self, ciphertext: str, key: Any) -> str:
        self.require_key(key)
        shifts = self.shifts(key)
        return self.map_letters(ciphertext, lambda c, i: c - shifts[i % len(shifts)])

    def validate_key(self, key: Any) -> bool:
        """Key must contain at least one letter."""
        return bool(self.clean_keyword(key))
