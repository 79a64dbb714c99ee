import re
import string
import unicodedata
from dataclasses import dataclass
from enum import Enum


class NormalizationMode(str, Enum):
    """Text normalization modes."""

    STRICT = "strict"  # Letters only, uppercase
    PRESERVE_SPACES = "preserve_spaces"  # Letters and spaces
    RAW = "raw"  # Diacritics stripped, everything else kept


@dataclass(frozen=True)
class CleanText:
    """Ciphertext together with its letters-only form."""

    original: str
    text: str

    def __len__(self) -> int:
        return len(self.text)

    def restore(self, transformed: str) -> str:
        """Put a transformed letter stream back into the original layout."""
        return TextNormalizer.match_layout(self.original, transformed)


class TextNormalizer:
    """
    Normalizes text for cryptanalysis.

    Handles:
    - Unicode decomposition and diacritic stripping
    - Case conversion
    - Non-alphabetic character removal
    - Layout restoration onto a transformed letter stream
    """

    ALPHABET = string.ascii_uppercase
    _LETTERS = frozenset(string.ascii_letters)

    @staticmethod
    def strip_diacritics(text: str) -> str:
        """Decompose and drop combining marks ("é" becomes "e")."""
        decomposed = unicodedata.normalize("NFD", text.replace("ß", "ss"))
        return "".join(c for c in decomposed if not unicodedata.combining(c))

    @classmethod
    def clean(cls, text: str) -> str:
        """Uppercase letters A-Z only."""
        stripped = cls.strip_diacritics(text).upper()
        return "".join(c for c in stripped if c in cls.ALPHABET)

    @classmethod
    def prepare(cls, text: str) -> CleanText:
        """Build the immutable ciphertext record used across the pipeline."""
        return CleanText(original=text, text=cls.clean(text))

    @classmethod
    def match_layout(cls, original: str, transformed: str) -> str:
        """
        Apply the case, spacing and punctuation of ``original`` to ``transformed``.

        Letters of ``original`` are replaced one for one by the letters of
        ``transformed``; everything else is copied verbatim. When the letter
        counts differ the unused transformed letters are appended.

        Args:
            original: Text whose layout should be kept
            transformed: Letter stream produced by a decryption

        Returns:
            Transformed text in the original layout
        """
        letters = [c for c in transformed if c.isalpha()]
        result = []
        idx = 0

        for char in cls.strip_diacritics(original):
            if char in cls._LETTERS:
                if idx < len(letters):
                    replacement = letters[idx]
                    result.append(replacement.lower() if char.islower() else replacement.upper())
                    idx += 1
            else:
                result.append(char)

        if idx < len(letters):
            result.append("".join(letters[idx:]))

        return "".join(result)

    def normalize(
        self,
        text: str,
        mode: NormalizationMode = NormalizationMode.STRICT,
    ) -> str:
        """
        Normalize text for cryptanalysis.

        Args:
            text: Input text to normalize
            mode: Normalization mode

        Returns:
            Normalized text string
        """
        stripped = self.strip_diacritics(text)

        if mode == NormalizationMode.RAW:
            return stripped.upper()
        if mode == NormalizationMode.PRESERVE_SPACES:
            kept = self._filter_chars(stripped.upper(), self.ALPHABET + " ")
            return self.collapse_whitespace(kept)
        return self._filter_chars(stripped.upper(), self.ALPHABET)

    def _filter_chars(self, text: str, allowed: str) -> str:
        """Filter text to only allowed characters."""
        allowed_set = set(allowed)
        return "".join(c for c in text if c in allowed_set)

    @staticmethod
    def only_letters(text: str) -> bool:
        """True when text holds letters and whitespace only."""
        return bool(re.fullmatch(r"[A-Za-z\s]*", text))

    @staticmethod
    def strip_whitespace(text: str) -> str:
        """Remove all whitespace from text."""
        return re.sub(r"\s+", "", text)

    @staticmethod
    def collapse_whitespace(text: str) -> str:
        """Collapse multiple whitespace characters to single space."""
        return re.sub(r"\s+", " ", text).strip()
