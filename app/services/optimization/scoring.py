import random
import string
from dataclasses import dataclass
from typing import ClassVar

from app.services.analysis.statistics import StatisticalAnalyzer
from app.services.language.profiles import LanguageProfile


@dataclass
class SearchState:
    """A point in the key space visited by a local search."""

    key: str
    score: float
    iteration: int = 0
    temperature: float | None = None


@dataclass
class SearchProgress:
    """Snapshot yielded by the step form of a local search."""

    iteration: int
    score: float
    plaintext: str
    progress: float
    key: str | None = None
    method: str = ""


class SearchScorer:
    """
    Quadgram fitness for substitution keys.

    A key is a 26-letter string: position i holds the plaintext letter
    for ciphertext letter ALPHABET[i]. Higher scores are better.
    """

    ALPHABET: ClassVar[str] = string.ascii_uppercase

    def __init__(self, profile: LanguageProfile, floor: float = -10.0):
        self.profile = profile
        self.floor = floor
        self._quadgrams = profile.log_probabilities[4]

    def score(self, clean_text: str) -> float:
        """
        Average quadgram log probability of cleaned text.

        Returns:
            Average log10 probability, the floor for text under 4 letters
        """
        count = len(clean_text) - 3
        if count <= 0:
            return self.floor

        table = self._quadgrams
        floor = self.floor
        return sum(table.get(clean_text[i:i + 4], floor) for i in range(count)) / count

    def score_with_key(self, clean_text: str, key: str) -> float:
        return self.score(self.apply_key(clean_text, key))

    @classmethod
    def apply_key(cls, clean_text: str, key: str) -> str:
        """Decrypt cleaned text with a substitution key."""
        return clean_text.translate(str.maketrans(cls.ALPHABET, key))

    @classmethod
    def identity_key(cls) -> str:
        return cls.ALPHABET

    @classmethod
    def random_key(cls, rng: random.Random | None = None) -> str:
        letters = list(cls.ALPHABET)
        (rng or random).shuffle(letters)
        return "".join(letters)

    @classmethod
    def frequency_key(cls, clean_text: str, profile: LanguageProfile) -> str:
        """
        Map ciphertext letters ranked by frequency onto the language's
        canonical frequency order.
        """
        cipher_order = StatisticalAnalyzer.frequency_order(clean_text)
        plain_order = profile.frequency_order
        # Tables may omit letters that never occur in the sample
        plain_order += "".join(c for c in cls.ALPHABET if c not in plain_order)

        mapping = dict(zip(cipher_order, plain_order))
        return "".join(mapping[c] for c in cls.ALPHABET)

    @staticmethod
    def swap(key: str, i: int, j: int) -> str:
        """Return key with the letters at positions i and j exchanged."""
        if i == j:
            return key
        if i > j:
            i, j = j, i
        return key[:i] + key[j] + key[i + 1:j] + key[i] + key[j + 1:]
