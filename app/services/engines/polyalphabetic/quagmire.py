from typing import Any, ClassVar

from app.models.schemas import CipherFamily, CipherType
from app.services.engines.base import CipherEngine
from app.services.engines.registry import EngineRegistry


class QuagmireEngine(CipherEngine):
    """
    Quagmire cipher family (I-IV).

    A periodic cipher over a plain alphabet ``pa`` and a cipher alphabet
    ``ca``. For each letter the indicator letter k selects the shift
    s = ca.index(k):

        encrypt: c = ca[(pa.index(p) + s) % 26]
        decrypt: p = pa[(ca.index(c) - s) % 26]

    Variants differ only in which alphabets are keyed:

    - I:   keyed plain alphabet, straight cipher alphabet
    - II:  straight plain alphabet, keyed cipher alphabet
    - III: the same keyed alphabet for both
    - IV:  two different keyed alphabets

    Keys are written ``KEYWORD:INDICATOR`` (``KEYWORD:INDICATOR:CIPHERWORD``
    for IV).
    """

    cipher_family = CipherFamily.VIGENERE_LIKE
    parts: ClassVar[int] = 2

    def split_key(self, key: Any) -> list[str]:
        if not isinstance(key, str):
            return []
        return [self.clean_keyword(part) for part in key.split(":")]

    def alphabets(self, parts: list[str]) -> tuple[str, str]:
        """(plain alphabet, cipher alphabet) for the variant."""
        raise NotImplementedError

    def _prepare(self, key: Any) -> tuple[str, str, list[int]]:
        self.require_key(key)
        parts = self.split_key(key)
        plain, cipher = self.alphabets(parts)
        shifts = [cipher.index(k) for k in parts[1]]
        return plain, cipher, shifts

    def encrypt(self, plaintext: str, key: Any) -> str:
        plain, cipher, shifts = self._prepare(key)
        result = []
        position = 0
        for char in plaintext.upper():
            if char in self.ALPHABET:
                result.append(cipher[(plain.index(char) + shifts[position % len(shifts)]) % 26])
                position += 1
            else:
                result.append(char)
        return "".join(result)

    def decrypt(self, ciphertext: str, key: Any) -> str:
        plain, cipher, shifts = self._prepare(key)
        result = []
        position = 0
        for char in ciphertext.upper():
            if char in self.ALPHABET:
                result.append(plain[(cipher.index(char) - shifts[position % len(shifts)]) % 26])
                position += 1
            else:
                result.append(char)
        return "".join(result)

    def validate_key(self, key: Any) -> bool:
        parts = self.split_key(key)
        return len(parts) == self.parts and all(parts)


@EngineRegistry.register
class Quagmire1Engine(QuagmireEngine):
    name = "Quagmire I"
    cipher_type = CipherType.QUAGMIRE1
    description = "Keyed plain alphabet against a straight cipher alphabet."

    def alphabets(self, parts: list[str]) -> tuple[str, str]:
        return self.keyed_alphabet(parts[0]), self.ALPHABET


@EngineRegistry.register
class Quagmire2Engine(QuagmireEngine):
    name = "Quagmire II"
    cipher_type = CipherType.QUAGMIRE2
    description = "Straight plain alphabet against a keyed cipher alphabet."

    def alphabets(self, parts: list[str]) -> tuple[str, str]:
        return self.ALPHABET, self.keyed_alphabet(parts[0])


@EngineRegistry.register
class Quagmire3Engine(QuagmireEngine):
    name = "Quagmire III"
    cipher_type = CipherType.QUAGMIRE3
    description = "The same keyed alphabet for plain and cipher letters."

    def alphabets(self, parts: list[str]) -> tuple[str, str]:
        keyed = self.keyed_alphabet(parts[0])
        return keyed, keyed


@EngineRegistry.register
class Quagmire4Engine(QuagmireEngine):
    name = "Quagmire IV"
    cipher_type = CipherType.QUAGMIRE4
    description = "Independently keyed plain and cipher alphabets."
    parts = 3

    def alphabets(self, parts: list[str]) -> tuple[str, str]:
        return self.keyed_alphabet(parts[0]), self.keyed_alphabet(parts[2])
