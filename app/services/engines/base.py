import string
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any, ClassVar

from app.core.exceptions import InvalidKeyError
from app.models.schemas import CipherFamily, CipherType


class CipherEngine(ABC):
    """
    Abstract base class for all cipher engines.

    An engine is a deterministic primitive: given a fully specified key it
    encrypts and decrypts. Key recovery lives in the solvers.

    Each cipher implementation must provide:
    - encrypt(): Encrypt plaintext
    - decrypt(): Decrypt ciphertext
    - validate_key(): Check that a key fits the cipher
    """

    # Cipher metadata
    name: str
    cipher_type: CipherType
    cipher_family: CipherFamily
    description: str

    ALPHABET: ClassVar[str] = string.ascii_uppercase

    # Output letters line up one for one with input letters, so the
    # caller can restore the original case and punctuation.
    preserves_layout: ClassVar[bool] = True

    @abstractmethod
    def encrypt(self, plaintext: str, key: Any) -> str:
        """
        Encrypt plaintext with the given key.

        Args:
            plaintext: The plaintext to encrypt
            key: The encryption key

        Returns:
            Ciphertext (uppercase)
        """
        pass

    @abstractmethod
    def decrypt(self, ciphertext: str, key: Any) -> str:
        """
        Decrypt ciphertext with the given key.

        Args:
            ciphertext: The ciphertext to decrypt
            key: The decryption key

        Returns:
            Plaintext (uppercase)
        """
        pass

    @abstractmethod
    def validate_key(self, key: Any) -> bool:
        """
        Validate that a key is valid for this cipher.

        Args:
            key: The key to validate

        Returns:
            True if key is valid
        """
        pass

    def require_key(self, key: Any) -> None:
        """Raise InvalidKeyError unless ``validate_key`` accepts the key."""
        if not self.validate_key(key):
            raise InvalidKeyError(self.cipher_type.value, key)

    @classmethod
    def letters_only(cls, text: str) -> str:
        return "".join(c for c in text.upper() if c in cls.ALPHABET)

    @staticmethod
    def clean_keyword(key: Any) -> str:
        """Uppercase letters of a keyword, empty for anything that is not a string."""
        if not isinstance(key, str):
            return ""
        return "".join(c for c in key.upper() if c in string.ascii_uppercase)

    @classmethod
    def keyed_alphabet(cls, keyword: str) -> str:
        """Deduplicated keyword letters followed by the rest of the alphabet."""
        seen = dict.fromkeys(cls.clean_keyword(keyword) + cls.ALPHABET)
        return "".join(seen)

    @classmethod
    def map_letters(cls, text: str, transform: Callable[[int, int], int]) -> str:
        """
        Apply ``transform(letter_index, position)`` to every A-Z letter.

        Position counts letters only; everything else passes through
        unchanged and does not advance the key.
        """
        result = []
        position = 0

        for char in text.upper():
            if char in cls.ALPHABET:
                result.append(cls.ALPHABET[transform(ord(char) - 65, position) % 26])
                position += 1
            else:
                result.append(char)

        return "".join(result)
