import re
from typing import Any, ClassVar

from app.models.schemas import CipherFamily, CipherType
from app.services.engines.base import CipherEngine
from app.services.engines.registry import EngineRegistry


@EngineRegistry.register
class BaconianEngine(CipherEngine):
    """
    Baconian cipher engine.

    Each letter becomes a five-symbol group over {A, B}: its index in the
    alphabet written in binary with A=0 and B=1 (26 distinct codes).
    Groups are separated by one space and words by three. Decryption also
    accepts 0/1 groups.
    """

    name = "Baconian Cipher"
    cipher_type = CipherType.BACONIAN
    cipher_family = CipherFamily.MONOALPHABETIC
    description = "Letters are hidden as five-symbol A/B groups (Francis Bacon, 1605)."

    GROUP_SEPARATOR: ClassVar[str] = " "
    WORD_SEPARATOR: ClassVar[str] = "   "
    PATTERN: ClassVar[re.Pattern] = re.compile(r"[ABab]{5,}|[01]{5,}")

    preserves_layout: ClassVar[bool] = False

    @classmethod
    def code(cls, letter: str) -> str:
        bits = format(cls.ALPHABET.index(letter), "05b")
        return bits.replace("0", "A").replace("1", "B")

    def encrypt(self, plaintext: str, key: Any = None) -> str:
        words = []
        for word in plaintext.split():
            letters = self.letters_only(word)
            if letters:
                words.append(self.GROUP_SEPARATOR.join(self.code(c) for c in letters))
        return self.WORD_SEPARATOR.join(words)

    def decrypt(self, ciphertext: str, key: Any = None) -> str:
        words = []
        for segment in re.split(r"\s{2,}|[^\sABab01]+", ciphertext.strip()):
            symbols = "".join(c for c in segment.upper() if c in "AB01")
            symbols = symbols.replace("0", "A").replace("1", "B")
            letters = []
            for i in range(0, len(symbols) - 4, 5):
                index = int(symbols[i:i + 5].replace("A", "0").replace("B", "1"), 2)
                if index < 26:
                    letters.append(self.ALPHABET[index])
            if letters:
                words.append("".join(letters))
        return " ".join(words)

    def validate_key(self, key: Any) -> bool:
        """Baconian takes no key."""
        return True

    @classmethod
    def looks_encoded(cls, text: str) -> bool:
        """True when the text carries runs of at least five A/B or 0/1 symbols."""
        return bool(cls.PATTERN.search(text))
