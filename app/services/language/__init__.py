"""
Language resources for scoring candidate plaintexts.

Static n-gram tables and word lists are loaded once per process through
the shared LanguageRegistry and are read-only afterwards.
"""

from app.services.language.dictionary import DictionaryValidator
from app.services.language.detector import LanguageDetector
from app.services.language.ngram import LanguageScorer
from app.services.language.profiles import LanguageProfile, LanguageRegistry, get_language_registry

__all__ = [
    "DictionaryValidator",
    "LanguageDetector",
    "LanguageProfile",
    "LanguageRegistry",
    "LanguageScorer",
    "get_language_registry",
]
