from typing import Type

from app.core.exceptions import EngineNotFoundError
from app.models.schemas import CipherFamily, CipherType
from app.services.engines.base import CipherEngine


class EngineRegistry:
    """
    Registry for cipher engines.

    Manages available cipher engines and provides lookup by type or family.
    """

    _engines: dict[CipherType, Type[CipherEngine]] = {}
    _instances: dict[CipherType, CipherEngine] = {}

    @classmethod
    def register(cls, engine_class: Type[CipherEngine]) -> Type[CipherEngine]:
        """
        Register a cipher engine class.

        Can be used as a decorator:
            @EngineRegistry.register
            class CaesarEngine(CipherEngine):
                ...

        Args:
            engine_class: The engine class to register

        Returns:
            The engine class (for decorator usage)
        """
        cls._engines[engine_class.cipher_type] = engine_class
        return engine_class

    def get_engine(self, cipher_type: CipherType) -> CipherEngine | None:
        """
        Get an engine instance for the specified cipher type.

        Returns:
            Engine instance or None if not found
        """
        if cipher_type not in self._engines:
            return None

        # Lazy instantiation with caching
        if cipher_type not in self._instances:
            self._instances[cipher_type] = self._engines[cipher_type]()

        return self._instances[cipher_type]

    def require(self, cipher_type: CipherType | str) -> CipherEngine:
        """
        Get an engine instance or raise.

        Raises:
            EngineNotFoundError: If no engine handles the cipher type
        """
        try:
            cipher_type = CipherType(cipher_type)
        except ValueError:
            raise EngineNotFoundError(str(cipher_type)) from None

        engine = self.get_engine(cipher_type)
        if engine is None:
            raise EngineNotFoundError(cipher_type.value)
        return engine

    def get_engines_by_family(self, family: CipherFamily) -> list[CipherEngine]:
        """Get all engines belonging to a cipher family."""
        return [
            self.get_engine(cipher_type)
            for cipher_type, engine_class in self._engines.items()
            if engine_class.cipher_family == family
        ]

    @classmethod
    def list_registered(cls) -> list[CipherType]:
        """List all registered cipher types."""
        return list(cls._engines.keys())

    @classmethod
    def is_registered(cls, cipher_type: CipherType) -> bool:
        return cipher_type in cls._engines


# Import engines to trigger registration
def _load_engines() -> None:
    """Load all engine modules to trigger registration."""
    from app.services.engines.monoalphabetic import (  # noqa: F401
        atbash,
        baconian,
        caesar,
        polybius,
        rot47,
        simple_substitution,
    )
    from app.services.engines.polyalphabetic import (  # noqa: F401
        autokey,
        beaufort,
        gronsfeld,
        porta,
        quagmire,
        vigenere,
    )
    from app.services.engines.transposition import amsco, rail_fence  # noqa: F401


# Load engines when module is imported
_load_engines()
