from typing import Any

from app.models.schemas import CipherFamily, CipherType
from app.services.engines.base import CipherEngine
from app.services.engines.registry import EngineRegistry


@EngineRegistry.register
class CaesarEngine(CipherEngine):
    """
    Caesar cipher engine.

    The Caesar cipher is a simple substitution cipher that shifts each letter
    by a fixed amount. ROT13 is the shift of 13.
    """

    name = "Caesar Cipher"
    cipher_type = CipherType.CAESAR
    cipher_family = CipherFamily.CAESAR
    description = (
        "A substitution cipher where each letter is shifted by a fixed amount. "
        "Named after Julius Caesar who used it for military communications."
    )

    def encrypt(self, plaintext: str, key: Any) -> str:
        """Encrypt plaintext with the given shift."""
        self.require_key(key)
        shift = self.parse_key(key)
        return self.map_letters(plaintext, lambda p, _: p + shift)

    def decrypt(self, ciphertext: str, key: Any) -> str:
        """Decrypt by shifting in reverse."""
        self.require_key(key)
        shift = self.parse_key(key)
        return self.map_letters(ciphertext, lambda c, _: c - shift)

    def validate_key(self, key: Any) -> bool:
        """Any integer shift is valid; it is taken modulo 26."""
        try:
            self.parse_key(key)
            return True
        except (ValueError, TypeError):
            return False

    @staticmethod
    def parse_key(key: Any) -> int:
        """Parse key to integer shift value."""
        if isinstance(key, bool):
            raise TypeError("boolean is not a shift")
        return int(key) % 26
