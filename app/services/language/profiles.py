import json
import logging
import math
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import ClassVar

from app.core.config import get_settings
from app.core.exceptions import ModelNotFoundError
from app.models.schemas import Language

logger = logging.getLogger(__name__)

DEFAULT_DATA_DIR = Path(__file__).resolve().parents[2] / "data"


@dataclass(frozen=True)
class LanguageProfile:
    """Statistical profile for a language."""

    language: Language
    expected_ioc: float
    monograms: dict[str, float]
    bigrams: dict[str, float]
    trigrams: dict[str, float]
    quadgrams: dict[str, float]
    sample_size: int = 0
    log_probabilities: dict[int, dict[str, float]] = field(default_factory=dict, repr=False)

    @property
    def frequency_order(self) -> str:
        """Letters from most to least frequent."""
        return "".join(sorted(self.monograms, key=self.monograms.get, reverse=True))

    def table(self, n: int) -> dict[str, float]:
        """Percentage table for n-grams of size n."""
        return {1: self.monograms, 2: self.bigrams, 3: self.trigrams, 4: self.quadgrams}[n]

    def top_ngrams(self, n: int, count: int) -> list[str]:
        table = self.table(n)
        return sorted(table, key=table.get, reverse=True)[:count]


class LanguageRegistry:
    """
    Read-only store of language profiles and word lists.

    Files are read on first use and cached for the lifetime of the
    registry; nothing is mutated after a language has been loaded.
    """

    DEFAULT_LANGUAGE: ClassVar[Language] = Language.ENGLISH

    # Expected normalized IoC for languages that may lack an n-gram model
    EXPECTED_IOC: ClassVar[dict[Language, float]] = {
        Language.ENGLISH: 1.73,
        Language.FRENCH: 2.02,
        Language.GERMAN: 2.05,
        Language.ITALIAN: 1.94,
        Language.PORTUGUESE: 1.94,
        Language.SPANISH: 1.94,
        Language.RUSSIAN: 1.76,
        Language.CHINESE: 0.0,
    }

    def __init__(self, data_dir: str | Path | None = None):
        self.data_dir = Path(data_dir) if data_dir else DEFAULT_DATA_DIR
        self._profiles: dict[Language, LanguageProfile] = {}
        self._words: dict[Language, frozenset[str]] = {}
        self._missing_words: set[Language] = set()

    @staticmethod
    def coerce(language: Language | str | None) -> Language:
        """Turn a language name into the enum, raising for unknown names."""
        if language is None:
            return LanguageRegistry.DEFAULT_LANGUAGE
        if isinstance(language, Language):
            return language
        try:
            return Language(str(language).strip().lower())
        except ValueError:
            raise ModelNotFoundError(str(language)) from None

    def has_model(self, language: Language | str) -> bool:
        try:
            lang = self.coerce(language)
        except ModelNotFoundError:
            return False
        return (self.data_dir / "languages" / f"{lang.value}.json").is_file()

    def has_dictionary(self, language: Language | str) -> bool:
        try:
            return self.words(language) is not None
        except ModelNotFoundError:
            return False

    def available_languages(self) -> list[Language]:
        return [lang for lang in Language if self.has_model(lang)]

    def get(self, language: Language | str) -> LanguageProfile:
        """
        Get the profile for a language.

        Raises:
            ModelNotFoundError: no n-gram tables exist for the language
        """
        lang = self.coerce(language)
        if lang not in self._profiles:
            self._profiles[lang] = self._load_profile(lang)
        return self._profiles[lang]

    def resolve(self, language: Language | str | None) -> LanguageProfile:
        """Get a profile, falling back to English when none exists."""
        try:
            return self.get(language if language is not None else self.DEFAULT_LANGUAGE)
        except ModelNotFoundError as exc:
            logger.debug("%s, scoring with %s", exc.message, self.DEFAULT_LANGUAGE.value)
            return self.get(self.DEFAULT_LANGUAGE)

    def expected_ioc(self, language: Language | str | None) -> float:
        try:
            lang = self.coerce(language)
        except ModelNotFoundError:
            lang = self.DEFAULT_LANGUAGE
        return self.EXPECTED_IOC.get(lang, self.EXPECTED_IOC[self.DEFAULT_LANGUAGE])

    def words(self, language: Language | str) -> frozenset[str] | None:
        """Word set for a language, or None when no list is shipped."""
        lang = self.coerce(language)
        if lang not in self._words:
            # Failed loads are not cached so a later call can retry
            words = self._load_words(lang)
            if words is None:
                return None
            self._words[lang] = words
        return self._words[lang]

    def _load_profile(self, language: Language) -> LanguageProfile:
        path = self.data_dir / "languages" / f"{language.value}.json"
        if not path.is_file():
            raise ModelNotFoundError(language.value)

        with open(path, encoding="utf-8") as f:
            data = json.load(f)

        tables = {
            1: data["monograms"],
            2: data["bigrams"],
            3: data["trigrams"],
            4: data["quadgrams"],
        }
        # Percentages become log10 probabilities once, at load time
        log_probabilities = {
            n: {gram: math.log10(pct / 100) for gram, pct in table.items() if pct > 0}
            for n, table in tables.items()
        }

        logger.debug("Loaded %s language model from %s", language.value, path)
        return LanguageProfile(
            language=language,
            expected_ioc=float(data.get("expected_ioc", self.EXPECTED_IOC[language])),
            monograms=tables[1],
            bigrams=tables[2],
            trigrams=tables[3],
            quadgrams=tables[4],
            sample_size=int(data.get("sample_size", 0)),
            log_probabilities=log_probabilities,
        )

    def _load_words(self, language: Language) -> frozenset[str] | None:
        path = self.data_dir / "dictionaries" / f"{language.value}.txt"
        try:
            with open(path, encoding="utf-8") as f:
                words = frozenset(
                    line.strip().upper() for line in f if line.strip() and not line.startswith("#")
                )
        except OSError:
            level = logging.DEBUG if language in self._missing_words else logging.WARNING
            logger.log(level, "Dictionary for %s unavailable at %s", language.value, path)
            self._missing_words.add(language)
            return None

        logger.debug("Loaded %d %s dictionary words", len(words), language.value)
        return words


@lru_cache
def get_language_registry() -> LanguageRegistry:
    """Get the process-wide registry."""
    return LanguageRegistry(get_settings().data_dir)
