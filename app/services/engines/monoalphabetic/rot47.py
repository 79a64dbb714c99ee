from typing import Any, ClassVar

from app.models.schemas import CipherFamily, CipherType
from app.services.engines.base import CipherEngine
from app.services.engines.registry import EngineRegistry


@EngineRegistry.register
class Rot47Engine(CipherEngine):
    """
    ROT47 engine.

    Rotates every printable ASCII character ('!' to '~', 94 symbols) by a
    fixed amount. The classic ROT47 rotation is 47, which makes it its own
    inverse; other rotations are accepted for brute forcing.
    """

    name = "ROT47"
    cipher_type = CipherType.ROT47
    cipher_family = CipherFamily.MONOALPHABETIC
    description = "Rotation over the 94 printable ASCII characters."

    FIRST: ClassVar[int] = 33
    SIZE: ClassVar[int] = 94
    DEFAULT_SHIFT: ClassVar[int] = 47

    # Digits and punctuation change, so layout cannot be restored
    preserves_layout: ClassVar[bool] = False

    def encrypt(self, plaintext: str, key: Any = None) -> str:
        self.require_key(key)
        return self.rotate(plaintext, self.parse_key(key))

    def decrypt(self, ciphertext: str, key: Any = None) -> str:
        self.require_key(key)
        return self.rotate(ciphertext, -self.parse_key(key))

    def validate_key(self, key: Any) -> bool:
        try:
            self.parse_key(key)
            return True
        except (ValueError, TypeError):
            return False

    def parse_key(self, key: Any) -> int:
        if key is None or key == "":
            return self.DEFAULT_SHIFT
        if isinstance(key, bool):
            raise TypeError("boolean is not a shift")
        return int(key) % self.SIZE

    @classmethod
    def rotate(cls, text: str, shift: int) -> str:
        """Rotate printable ASCII by ``shift``; other characters pass through."""
        result = []
        for char in text:
            code = ord(char)
            if cls.FIRST <= code < cls.FIRST + cls.SIZE:
                result.append(chr(cls.FIRST + (code - cls.FIRST + shift) % cls.SIZE))
            else:
                result.append(char)
        return "".join(result)
