from typing import Protocol


class WordLookup(Protocol):
    """Anything that can answer word membership."""

    def contains(self, word: str) -> bool: ...


class WordSegmenter:
    """
    Splits space-free text into dictionary words.

    Dynamic programming over prefix boundaries: from every reachable
    boundary the next 2-20 letters are tried as a word. Among the complete
    tilings the one with the fewest words wins.
    """

    MIN_WORD = 2
    MAX_WORD = 20

    def __init__(self, dictionary: WordLookup):
        self.dictionary = dictionary

    def segment(self, text: str) -> list[str] | None:
        """
        Segment text into words.

        Returns:
            Word list, or None when no complete tiling exists
        """
        n = len(text)
        if n == 0:
            return None

        # best[i] = (word count, start of last word) for a tiling of text[:i]
        best: list[tuple[int, int] | None] = [None] * (n + 1)
        best[0] = (0, 0)

        for start in range(n):
            if best[start] is None:
                continue
            count = best[start][0]
            for end in range(start + self.MIN_WORD, min(n, start + self.MAX_WORD) + 1):
                if not self.dictionary.contains(text[start:end]):
                    continue
                current = best[end]
                if current is None or count + 1 < current[0]:
                    best[end] = (count + 1, start)

        if best[n] is None:
            return None

        words = []
        end = n
        while end > 0:
            start = best[end][1]
            words.append(text[start:end])
            end = start
        return words[::-1]
