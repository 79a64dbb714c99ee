import re
from typing import Any, ClassVar

from app.models.schemas import CipherFamily, CipherType
from app.services.engines.base import CipherEngine
from app.services.engines.registry import EngineRegistry


@EngineRegistry.register
class PolybiusEngine(CipherEngine):
    """
    Polybius square engine.

    Letters become row/column digit pairs in a 5x5 grid with I and J sharing
    a cell. An optional keyword fills the grid first:

          1 2 3 4 5
        1 A B C D E
        2 F G H I K
        3 L M N O P
        4 Q R S T U
        5 V W X Y Z

    "HELLO" encodes to "23 15 31 31 34".
    """

    name = "Polybius Square"
    cipher_type = CipherType.POLYBIUS
    cipher_family = CipherFamily.MONOALPHABETIC
    description = "Letters are replaced by their coordinates in a 5x5 grid."

    GRID_ALPHABET: ClassVar[str] = "ABCDEFGHIKLMNOPQRSTUVWXYZ"
    PAIR_PATTERN: ClassVar[re.Pattern] = re.compile(r"\d{2}")

    preserves_layout: ClassVar[bool] = False

    def grid(self, keyword: str | None) -> str:
        """25-letter grid in row order."""
        letters = self.clean_keyword(keyword).replace("J", "I")
        return "".join(dict.fromkeys(letters + self.GRID_ALPHABET))

    def encrypt(self, plaintext: str, key: Any = None) -> str:
        self.require_key(key)
        grid = self.grid(key)
        pairs = []
        for char in self.letters_only(plaintext).replace("J", "I"):
            row, col = divmod(grid.index(char), 5)
            pairs.append(f"{row + 1}{col + 1}")
        return " ".join(pairs)

    def decrypt(self, ciphertext: str, key: Any = None) -> str:
        self.require_key(key)
        grid = self.grid(key)
        letters = []
        for pair in self.PAIR_PATTERN.findall(ciphertext):
            row, col = int(pair[0]) - 1, int(pair[1]) - 1
            if 0 <= row < 5 and 0 <= col < 5:
                letters.append(grid[row * 5 + col])
        return "".join(letters)

    def validate_key(self, key: Any) -> bool:
        """Keyword is optional; when given it must be a string."""
        return key is None or isinstance(key, str)

    @classmethod
    def count_pairs(cls, text: str) -> int:
        return len(cls.PAIR_PATTERN.findall(text))
