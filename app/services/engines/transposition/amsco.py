from typing import Any

from app.models.schemas import CipherFamily, CipherType
from app.services.engines.base import CipherEngine
from app.services.engines.registry import EngineRegistry


@EngineRegistry.register
class AmscoEngine(CipherEngine):
    """
    AMSCO cipher engine.

    A columnar transposition that fills the grid with alternating one- and
    two-letter chunks. Even rows start with a single letter, odd rows with
    a pair. Columns are read in the order given by the key, a permutation
    of the digits 1..n ("312" reads the middle column first).
    """

    name = "AMSCO Cipher"
    cipher_type = CipherType.AMSCO
    cipher_family = CipherFamily.TRANSPOSITION
    description = (
        "Columnar transposition with alternating single letters and letter "
        "pairs in the grid cells."
    )

    @staticmethod
    def column_order(key: Any) -> list[int]:
        """Column indices in reading order."""
        digits = [int(d) for d in str(key)]
        return sorted(range(len(digits)), key=lambda i: digits[i])

    @staticmethod
    def layout(length: int, columns: int) -> list[list[tuple[int, int]]]:
        """(start, size) of every chunk, grouped by column."""
        cells = [[] for _ in range(columns)]
        position = 0
        row = 0
        while position < length:
            size = 1 if row % 2 == 0 else 2
            for col in range(columns):
                if position >= length:
                    break
                chunk = min(size, length - position)
                cells[col].append((position, chunk))
                position += chunk
                size = 3 - size
            row += 1
        return cells

    def encrypt(self, plaintext: str, key: Any) -> str:
        self.require_key(key)
        text = self.letters_only(plaintext)
        cells = self.layout(len(text), len(str(key)))

        return "".join(
            text[start:start + size]
            for col in self.column_order(key)
            for start, size in cells[col]
        )

    def decrypt(self, ciphertext: str, key: Any) -> str:
        self.require_key(key)
        text = self.letters_only(ciphertext)
        cells = self.layout(len(text), len(str(key)))

        result = [""] * len(text)
        index = 0
        for col in self.column_order(key):
            for start, size in cells[col]:
                for offset in range(size):
                    result[start + offset] = text[index]
                    index += 1
        return "".join(result)

    def validate_key(self, key: Any) -> bool:
        """Key must be a permutation of 1..n with n between 2 and 9."""
        if isinstance(key, bool) or not isinstance(key, (str, int)):
            return False
        digits = str(key)
        return 2 <= len(digits) <= 9 and sorted(digits) == [str(i) for i in range(1, len(digits) + 1)]
