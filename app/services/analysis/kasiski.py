from dataclasses import dataclass, field

from app.models.schemas import KeyLengthSuggestion


@dataclass
class KasiskiResult:
    """Result of a Kasiski examination."""

    has_repetitions: bool
    repeated_sequences: dict[str, list[int]] = field(default_factory=dict)
    distances: list[int] = field(default_factory=list)
    suggested_key_lengths: list[KeyLengthSuggestion] = field(default_factory=list)

    @property
    def top(self) -> KeyLengthSuggestion | None:
        return self.suggested_key_lengths[0] if self.suggested_key_lengths else None


class KasiskiExaminer:
    """
    Kasiski examination for periodic key length estimation.

    Repeated n-grams in polyalphabetic ciphertext tend to be the same
    plaintext enciphered under the same key position, so the distances
    between them are multiples of the key length. A key length of 1 is
    never suggested since it is plain monoalphabetic evidence.
    """

    MIN_KEY_LENGTH = 2

    def __init__(self, ngram_size: int = 3, max_key_length: int = 20):
        self.ngram_size = ngram_size
        self.max_key_length = max_key_length

    def find_repeated(self, text: str) -> dict[str, list[int]]:
        """Map each n-gram occurring more than once to its positions."""
        n = self.ngram_size
        positions: dict[str, list[int]] = {}
        for i in range(len(text) - n + 1):
            positions.setdefault(text[i:i + n], []).append(i)
        return {gram: pos for gram, pos in positions.items() if len(pos) > 1}

    @staticmethod
    def distances(repeated: dict[str, list[int]]) -> list[int]:
        """All pairwise distances between occurrences of each repeated n-gram."""
        result = []
        for positions in repeated.values():
            for i, base in enumerate(positions[:-1]):
                result.extend(p - base for p in positions[i + 1:] if p > base)
        return result

    def suggest_key_lengths(self, text: str) -> list[KeyLengthSuggestion]:
        """
        Rank key lengths by how many distances they divide.

        Args:
            text: Cleaned ciphertext

        Returns:
            Suggestions sorted by score, shorter lengths first on ties
        """
        if len(text) < self.ngram_size * 2:
            return []
        return self._rank(self.distances(self.find_repeated(text)), len(text))

    def _rank(self, distances: list[int], text_length: int) -> list[KeyLengthSuggestion]:
        if not distances:
            return []

        max_candidate = min(self.max_key_length, text_length)
        suggestions = []
        for length in range(self.MIN_KEY_LENGTH, max_candidate + 1):
            count = sum(1 for d in distances if d % length == 0)
            if count:
                suggestions.append(KeyLengthSuggestion(length=length, score=count / len(distances)))

        # sort is stable, so equal scores keep the shorter length first
        return sorted(suggestions, key=lambda s: s.score, reverse=True)

    def examine(self, text: str) -> KasiskiResult:
        """Full examination of cleaned ciphertext."""
        repeated = self.find_repeated(text)
        distances = self.distances(repeated)
        suggestions = self._rank(distances, len(text)) if len(text) >= self.ngram_size * 2 else []

        return KasiskiResult(
            has_repetitions=bool(repeated),
            repeated_sequences=repeated,
            distances=distances,
            suggested_key_lengths=suggestions,
        )
