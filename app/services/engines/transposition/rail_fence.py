from typing import Any

from app.models.schemas import CipherFamily, CipherType
from app.services.engines.base import CipherEngine
from app.services.engines.registry import EngineRegistry


@EngineRegistry.register
class RailFenceEngine(CipherEngine):
    """
    Rail Fence cipher engine.

    The Rail Fence cipher writes the plaintext in a zigzag pattern across
    a number of "rails" (rows), then reads off each rail in order to
    produce the ciphertext. Only letters take part.

    Example with 3 rails:
    Plaintext: WEAREDISCOVEREDFLEEATONCE

    W . . . E . . . C . . . R . . . L . . . T . . . E
    . E . R . D . S . O . E . E . F . E . A . O . C .
    . . A . . . I . . . V . . . D . . . E . . . N . .

    Read off rows: WECRLTE + ERDSOEEFEAOC + AIVDEN
    """

    name = "Rail Fence Cipher"
    cipher_type = CipherType.RAIL_FENCE
    cipher_family = CipherFamily.TRANSPOSITION
    description = (
        "A transposition cipher that writes plaintext in a zigzag pattern "
        "across multiple 'rails' (rows), then reads each rail in sequence. "
        "The number of rails is the key."
    )

    @staticmethod
    def rail_pattern(length: int, rails: int) -> list[int]:
        """Rail index of every position along the zigzag."""
        cycle = 2 * (rails - 1)
        return [min(i % cycle, cycle - i % cycle) for i in range(length)]

    def encrypt(self, plaintext: str, key: Any) -> str:
        """Encrypt using the specified number of rails."""
        self.require_key(key)
        text = self.letters_only(plaintext)
        rails = int(key)
        if rails >= len(text):
            return text

        pattern = self.rail_pattern(len(text), rails)
        order = sorted(range(len(text)), key=lambda i: pattern[i])
        return "".join(text[i] for i in order)

    def decrypt(self, ciphertext: str, key: Any) -> str:
        """Decrypt using the specified number of rails."""
        self.require_key(key)
        text = self.letters_only(ciphertext)
        rails = int(key)
        if rails >= len(text):
            return text

        pattern = self.rail_pattern(len(text), rails)
        order = sorted(range(len(text)), key=lambda i: pattern[i])
        result = [""] * len(text)
        for char, position in zip(text, order):
            result[position] = char
        return "".join(result)

    def validate_key(self, key: Any) -> bool:
        """Validate that key is a valid number of rails."""
        if isinstance(key, bool):
            return False
        try:
            return int(key) >= 2
        except (ValueError, TypeError):
            return False
