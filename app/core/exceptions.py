from typing import Any


class CryptanalysisError(Exception):
    """Base exception for all cryptanalysis errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class InputError(CryptanalysisError):
    """Raised when the ciphertext argument is structurally invalid."""

    pass


# Name used by the HTTP layer for request validation failures
ValidationError = InputError


class CiphertextTooLongError(InputError):
    """Raised when ciphertext exceeds maximum length."""

    def __init__(self, length: int, max_length: int):
        super().__init__(
            f"Ciphertext length {length} exceeds maximum {max_length}",
            {"length": length, "max_length": max_length},
        )


class InvalidKeyError(InputError):
    """Raised when a key does not fit the requested cipher."""

    def __init__(self, cipher: str, key: Any):
        super().__init__(
            f"Invalid key {key!r} for cipher '{cipher}'",
            {"cipher": cipher, "key": key},
        )


class LanguageError(CryptanalysisError):
    """Base exception for language model and dictionary errors."""

    pass


class ModelNotFoundError(LanguageError):
    """Raised when no n-gram model exists for a language."""

    def __init__(self, language: str):
        super().__init__(
            f"No language model available for '{language}'",
            {"language": language},
        )
        self.language = language


class DictionaryUnavailableError(LanguageError):
    """Raised when every requested dictionary is missing."""

    def __init__(self, languages: list[str]):
        super().__init__(
            f"No dictionary available for {', '.join(languages)}",
            {"languages": languages},
        )


class EngineError(CryptanalysisError):
    """Base exception for cipher engine errors."""

    pass


class EngineNotFoundError(EngineError):
    """Raised when requested cipher engine is not found."""

    def __init__(self, engine_name: str):
        super().__init__(
            f"Cipher engine '{engine_name}' not found",
            {"engine_name": engine_name},
        )


class StrategyExecutionError(EngineError):
    """Raised when a decryption strategy fails."""

    def __init__(self, strategy: str, reason: str):
        super().__init__(
            f"Strategy '{strategy}' failed: {reason}",
            {"strategy": strategy, "reason": reason},
        )
        self.strategy = strategy


class AnalysisError(CryptanalysisError):
    """Raised when statistical analysis fails."""

    pass
