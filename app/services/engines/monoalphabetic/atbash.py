from typing import Any

from app.models.schemas import CipherFamily, CipherType
from app.services.engines.base import CipherEngine
from app.services.engines.registry import EngineRegistry


@EngineRegistry.register
class AtbashEngine(CipherEngine):
    """
    Atbash cipher engine.

    Atbash maps each letter to its mirror (A<->Z, B<->Y, ...). It has no key
    and is its own inverse.
    """

    name = "Atbash Cipher"
    cipher_type = CipherType.ATBASH
    cipher_family = CipherFamily.MONOALPHABETIC
    description = (
        "A substitution cipher that reverses the alphabet. Originally used "
        "with the Hebrew alphabet."
    )

    def encrypt(self, plaintext: str, key: Any = None) -> str:
        return self.map_letters(plaintext, lambda p, _: 25 - p)

    def decrypt(self, ciphertext: str, key: Any = None) -> str:
        return self.encrypt(ciphertext)

    def validate_key(self, key: Any) -> bool:
        """Atbash takes no key; anything passed is ignored."""
        return True
