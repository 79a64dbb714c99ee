"""
Strategy selection.

Maps the classifier's top cipher family to an ordered list of attacks.
Cheap, exact attacks come first so a dominant result can end the run
before the local searches start.
"""

import logging
import random
from typing import ClassVar

from app.core.config import Settings, get_settings
from app.models.schemas import CipherFamily, FamilyCandidate, Language
from app.services.language.dictionary import DictionaryValidator
from app.services.language.profiles import LanguageRegistry, get_language_registry
from app.services.solvers.autokey import AutokeySolver
from app.services.solvers.base import Strategy
from app.services.solvers.encoding import BaconianSolver, PolybiusSolver
from app.services.solvers.polyalphabetic import PolyalphabeticSolver
from app.services.solvers.shift import AtbashSolver, CaesarBruteForce, Rot47BruteForce
from app.services.solvers.substitution import AnnealingSolver, SubstitutionSolver
from app.services.solvers.transposition import AmscoSolver, RailFenceSolver
from app.services.solvers.vigenere import VigenereSolver

logger = logging.getLogger(__name__)


class StrategySelector:
    """Builds the attack plan for a classified ciphertext."""

    # Strategies that only run when their cheap applicability check passes
    CONDITIONAL: ClassVar[frozenset[type[Strategy]]] = frozenset(
        {PolybiusSolver, BaconianSolver, Rot47BruteForce}
    )

    PLANS: ClassVar[dict[CipherFamily, list[type[Strategy]]]] = {
        CipherFamily.CAESAR: [
            AtbashSolver,
            Rot47BruteForce,
            CaesarBruteForce,
        ],
        CipherFamily.VIGENERE_LIKE: [
            VigenereSolver,
            AutokeySolver,
            PolyalphabeticSolver,
            SubstitutionSolver,
            CaesarBruteForce,
        ],
        CipherFamily.MONOALPHABETIC: [
            AtbashSolver,
            PolybiusSolver,
            BaconianSolver,
            CaesarBruteForce,
            Rot47BruteForce,
            SubstitutionSolver,
            AnnealingSolver,
        ],
        CipherFamily.TRANSPOSITION: [
            RailFenceSolver,
            AmscoSolver,
            SubstitutionSolver,
        ],
    }

    FALLBACK_PLAN: ClassVar[list[type[Strategy]]] = [
        AtbashSolver,
        PolybiusSolver,
        BaconianSolver,
        CaesarBruteForce,
        AutokeySolver,
        SubstitutionSolver,
    ]

    def __init__(
        self,
        language: Language | str | None = None,
        registry: LanguageRegistry | None = None,
        settings: Settings | None = None,
        dictionary: DictionaryValidator | None = None,
        rng: random.Random | None = None,
    ):
        self.registry = registry or get_language_registry()
        self.settings = settings or get_settings()
        self.language = self.registry.coerce(language)
        self.dictionary = dictionary or DictionaryValidator(self.language, self.registry)
        self.rng = rng

    def plan(self, family: CipherFamily) -> list[type[Strategy]]:
        """Ordered strategy classes for a cipher family."""
        return list(self.PLANS.get(family, self.FALLBACK_PLAN))

    def build(self, strategy_class: type[Strategy], candidate: FamilyCandidate | None = None) -> Strategy:
        """Instantiate one strategy with the shared language resources."""
        kwargs = {}
        if issubclass(strategy_class, SubstitutionSolver):
            kwargs["rng"] = self.rng
        elif issubclass(strategy_class, VigenereSolver) and candidate is not None:
            kwargs["key_length_hint"] = candidate.suggested_key_length
        return strategy_class(
            self.language,
            self.registry,
            self.settings,
            self.dictionary,
            **kwargs,
        )

    def select(self, candidate: FamilyCandidate, ciphertext: str) -> list[Strategy]:
        """
        Strategies to run for the top family candidate, in order.

        Args:
            candidate: Top classification candidate
            ciphertext: Raw ciphertext, used for the applicability checks

        Returns:
            Instantiated strategies, conditional ones only when applicable
        """
        strategies = []
        for strategy_class in self.plan(candidate.type):
            strategy = self.build(strategy_class, candidate)
            if strategy_class in self.CONDITIONAL and not strategy.applicable(ciphertext):
                continue
            strategies.append(strategy)

        logger.debug(
            "Selected for %s: %s",
            candidate.type.value,
            ", ".join(s.name for s in strategies),
        )
        return strategies
