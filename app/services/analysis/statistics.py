import math
import string
from collections import Counter
from typing import ClassVar

from scipy import stats


class StatisticalAnalyzer:
    """
    Letter statistics used throughout the cryptanalysis pipeline.

    Computes:
    - Index of Coincidence (IoC)
    - Entropy
    - Chi-squared against expected letter frequencies
    - Repetition score for degenerate input
    - Frequency curve correlation

    All methods expect cleaned text (uppercase A-Z only).
    """

    ALPHABET: ClassVar[str] = string.ascii_uppercase

    # Added per observed symbol whose expected frequency is zero
    ZERO_EXPECTED_PENALTY: ClassVar[float] = 10.0

    @classmethod
    def index_of_coincidence(cls, text: str, normalized: bool = True) -> float:
        """
        Calculate Index of Coincidence.

        IOC measures how likely two randomly chosen letters are the same.
        Normalized (x26):
        - Random text: ~1.0
        - Natural language: ~1.6-2.1
        """
        n = len(text)
        if n <= 1:
            return 0.0

        counter = Counter(text)
        numerator = sum(f * (f - 1) for f in counter.values())
        ioc = numerator / (n * (n - 1))

        return ioc * len(cls.ALPHABET) if normalized else ioc

    @staticmethod
    def entropy(text: str) -> float:
        """
        Calculate Shannon entropy in bits per letter.

        - Lower entropy suggests more structure (like natural language)
        - Higher entropy suggests more randomness (max log2(26) ~ 4.70)
        """
        n = len(text)
        if n == 0:
            return 0.0

        counter = Counter(text)
        entropy = 0.0

        for count in counter.values():
            p = count / n
            entropy -= p * math.log2(p)

        return entropy

    @classmethod
    def chi_squared(cls, text: str, expected: dict[str, float]) -> float:
        """
        Calculate chi-squared statistic against expected letter frequencies.

        Args:
            text: Cleaned text
            expected: Expected frequencies as percentages

        Returns:
            Chi-squared value (lower is a better match)
        """
        n = len(text)
        if n == 0:
            return 0.0

        counter = Counter(text)
        chi_squared = 0.0

        for letter in cls.ALPHABET:
            observed = counter.get(letter, 0)
            exp = (expected.get(letter, 0.0) / 100) * n

            if exp > 0:
                chi_squared += ((observed - exp) ** 2) / exp
            else:
                chi_squared += observed * cls.ZERO_EXPECTED_PENALTY

        return chi_squared

    @classmethod
    def letter_frequencies(cls, text: str) -> dict[str, float]:
        """
        Get letter frequencies as a dictionary.

        Returns frequencies as percentages (0-100).
        """
        n = len(text)
        if n == 0:
            return {letter: 0.0 for letter in cls.ALPHABET}

        counter = Counter(text)
        return {
            letter: (counter.get(letter, 0) / n) * 100
            for letter in cls.ALPHABET
        }

    @classmethod
    def frequency_order(cls, text: str) -> str:
        """Alphabet sorted by observed frequency, most frequent first."""
        counter = Counter(text)
        return "".join(sorted(cls.ALPHABET, key=lambda c: (-counter.get(c, 0), c)))

    @staticmethod
    def repetition_score(text: str, min_run: int = 3) -> float:
        """
        Fraction of letters inside runs of identical adjacent letters.

        Degenerate input such as "AAAAAAB" distorts IoC and entropy; a high
        score flags it.
        """
        n = len(text)
        if n == 0:
            return 0.0

        in_runs = 0
        run = 1
        for i in range(1, n + 1):
            if i < n and text[i] == text[i - 1]:
                run += 1
                continue
            if run >= min_run:
                in_runs += run
            run = 1

        return in_runs / n

    @classmethod
    def frequency_correlation(cls, text: str, expected: dict[str, float]) -> float:
        """
        Compare frequency curve shape to a language.

        Uses the Pearson correlation of the sorted observed and expected
        frequency curves. Substitution permutes letters but keeps the shape,
        polyalphabetic ciphers flatten it.

        Returns:
            Correlation coefficient, 0.0 when undefined
        """
        observed_sorted = sorted(cls.letter_frequencies(text).values(), reverse=True)
        expected_sorted = sorted(
            (expected.get(letter, 0.0) for letter in cls.ALPHABET), reverse=True
        )

        if len(set(observed_sorted)) < 2:
            return 0.0

        corr, _ = stats.pearsonr(observed_sorted, expected_sorted)
        if math.isnan(corr):
            return 0.0
        return float(corr)
