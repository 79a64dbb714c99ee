from typing import Any

from app.models.schemas import CipherFamily, CipherType
from app.services.engines.base import CipherEngine
from app.services.engines.registry import EngineRegistry


@EngineRegistry.register
class SimpleSubstitutionEngine(CipherEngine):
    """
    Simple substitution cipher engine.

    The key is the cipher alphabet: a permutation of A-Z where position i
    holds the ciphertext letter for plaintext letter A+i.
    """

    name = "Simple Substitution Cipher"
    cipher_type = CipherType.SIMPLE_SUBSTITUTION
    cipher_family = CipherFamily.MONOALPHABETIC
    description = (
        "Each plaintext letter is replaced by a fixed ciphertext letter given "
        "by a full 26-letter key."
    )

    def encrypt(self, plaintext: str, key: Any) -> str:
        self.require_key(key)
        return plaintext.upper().translate(str.maketrans(self.ALPHABET, key.upper()))

    def decrypt(self, ciphertext: str, key: Any) -> str:
        self.require_key(key)
        return ciphertext.upper().translate(str.maketrans(key.upper(), self.ALPHABET))

    def validate_key(self, key: Any) -> bool:
        """Key must be a permutation of the 26 letters."""
        return isinstance(key, str) and sorted(key.upper()) == list(self.ALPHABET)

    @classmethod
    def invert(cls, key: str) -> str:
        """Turn an encryption alphabet into the matching decryption alphabet."""
        return "".join(cls.ALPHABET[key.upper().index(c)] for c in cls.ALPHABET)
