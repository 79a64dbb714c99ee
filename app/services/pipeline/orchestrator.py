"""
Decryption orchestrator - the brain of the cryptanalysis pipeline.

This module implements the automatic decryption flow:
1. Resolve the plaintext language (detection when asked for)
2. Classify the cipher family
3. Select and run the attacks for that family under a time budget
4. Aggregate the results and validate the winner against the dictionary
"""

import logging
import random
import time
from collections.abc import Generator, Iterator

from app.core.config import Settings, get_settings
from app.core.exceptions import CiphertextTooLongError, ModelNotFoundError, StrategyExecutionError
from app.models.schemas import (
    AutoDecryptResult,
    ClassificationResult,
    DecryptionResult,
    Language,
    ProgressUpdate,
    StrategyRun,
)
from app.services.language.detector import LanguageDetector
from app.services.language.dictionary import DictionaryValidator
from app.services.language.profiles import LanguageRegistry, get_language_registry
from app.services.pipeline.aggregator import ResultAggregator, ResultValidator
from app.services.pipeline.classifier import CipherClassifier
from app.services.pipeline.selector import StrategySelector
from app.services.preprocessing.normalizer import TextNormalizer
from app.services.solvers.base import Strategy
from app.services.solvers.substitution import SubstitutionSolver

logger = logging.getLogger(__name__)

AUTO = "auto"


class DecryptionOrchestrator:
    """
    Coordinates language resolution, classification and the attacks.

    Strategies run one after another; the time budget is checked between
    them. A result above ``early_exit_confidence`` that also reads as
    language ends the run early. ``auto_decrypt_steps`` exposes the same
    flow as a generator of progress updates; abandoning the generator
    cancels the run.
    """

    # Progress milestones, in percent
    LANGUAGE_PROGRESS = 5.0
    CLASSIFY_PROGRESS = 10.0
    SELECT_PROGRESS = 20.0
    STRATEGIES_END = 90.0
    AGGREGATE_PROGRESS = 95.0

    def __init__(
        self,
        registry: LanguageRegistry | None = None,
        settings: Settings | None = None,
        rng: random.Random | None = None,
    ):
        self.registry = registry or get_language_registry()
        self.settings = settings or get_settings()
        self.rng = rng

    # ========================================================================
    # Public API
    # ========================================================================

    def auto_decrypt(
        self,
        ciphertext: str,
        try_multiple: bool = True,
        max_time: int | None = None,
        use_dictionary: bool = True,
        language: Language | str | None = None,
    ) -> AutoDecryptResult:
        """
        Detect the cipher and decrypt it.

        Args:
            ciphertext: Raw ciphertext
            try_multiple: Run every selected strategy, not just the first
            max_time: Wall-clock budget in milliseconds
            use_dictionary: Validate against the dictionary; raises
                DictionaryUnavailableError when no word list exists
            language: Plaintext language, "auto" to detect it

        Returns:
            AutoDecryptResult with the best result and every candidate

        Raises:
            CiphertextTooLongError: Above ``max_ciphertext_length``
        """
        run = self._run(ciphertext, try_multiple, max_time, use_dictionary, language, stream=False)
        while True:
            try:
                next(run)
            except StopIteration as done:
                return done.value

    def auto_decrypt_steps(
        self,
        ciphertext: str,
        try_multiple: bool = True,
        max_time: int | None = None,
        use_dictionary: bool = True,
        language: Language | str | None = None,
    ) -> Iterator[ProgressUpdate]:
        """
        Progress stream of ``auto_decrypt``.

        Yields an update after language resolution, classification,
        strategy selection, each strategy (with search progress for the
        local searches) and aggregation. The last update has stage
        ``complete`` and carries the final result.
        """
        outcome = yield from self._run(ciphertext, try_multiple, max_time, use_dictionary, language, stream=True)
        yield ProgressUpdate(
            stage="complete",
            message=f"Best result: {outcome.best.method}",
            progress=100.0,
            result=outcome.best,
        )

    # ========================================================================
    # Flow
    # ========================================================================

    def _run(
        self,
        ciphertext: str,
        try_multiple: bool,
        max_time: int | None,
        use_dictionary: bool,
        language: Language | str | None,
        stream: bool,
    ) -> Generator[ProgressUpdate, None, AutoDecryptResult]:
        if not isinstance(ciphertext, str):
            raise TypeError("ciphertext must be a string")
        if len(ciphertext) > self.settings.max_ciphertext_length:
            raise CiphertextTooLongError(len(ciphertext), self.settings.max_ciphertext_length)

        started = time.monotonic()
        budget = (max_time if max_time is not None else self.settings.orchestrator.default_max_time_ms) / 1000

        resolved = self.resolve_language(ciphertext, language)
        yield ProgressUpdate(
            stage="language",
            message=f"Language: {resolved.value}",
            progress=self.LANGUAGE_PROGRESS,
        )

        dictionary = DictionaryValidator(resolved, self.registry, require=use_dictionary)
        classifier = CipherClassifier(self.registry, self.settings.classifier, use_dictionary=use_dictionary)
        classification = classifier.identify(ciphertext, resolved)
        top = classification.top
        logger.info("Classified as %s (%.2f)", top.type.value, top.confidence)
        yield ProgressUpdate(
            stage="classification",
            message=f"Detected {top.type.value} ({top.confidence:.2f})",
            progress=self.CLASSIFY_PROGRESS,
        )

        selector = StrategySelector(resolved, self.registry, self.settings, dictionary, self.rng)
        strategies = selector.select(top, ciphertext)
        if not try_multiple:
            strategies = strategies[:1]
        yield ProgressUpdate(
            stage="selection",
            message="Strategies: " + ", ".join(s.name for s in strategies),
            progress=self.SELECT_PROGRESS,
        )

        results: list[DecryptionResult] = []
        runs: list[StrategyRun] = []
        early_exit = False
        span = (self.STRATEGIES_END - self.SELECT_PROGRESS) / max(len(strategies), 1)

        for index, strategy in enumerate(strategies):
            if time.monotonic() - started > budget:
                logger.info("Time budget of %.1fs reached, skipping %s", budget, strategy.name)
                break

            low = self.SELECT_PROGRESS + index * span
            result, run = yield from self._execute(strategy, ciphertext, stream, low, span)
            runs.append(run)
            status = run.error or f"confidence {run.confidence:.2f}"
            yield ProgressUpdate(
                stage="strategy",
                message=f"{strategy.name}: {status}",
                progress=low + span,
                result=result,
            )

            if result is None or result.error:
                continue
            results.append(result)

            if self.is_dominant(result, dictionary):
                logger.info("Dominant result from %s, stopping early", strategy.name)
                early_exit = True
                break

        outcome = self.finish(ciphertext, results, classification, resolved, dictionary, use_dictionary)
        outcome.strategies_run = runs
        outcome.early_exit = early_exit
        outcome.elapsed_ms = (time.monotonic() - started) * 1000
        yield ProgressUpdate(
            stage="aggregation",
            message=f"Ranked {len(outcome.candidates)} candidates",
            progress=self.AGGREGATE_PROGRESS,
            result=outcome.best,
        )
        return outcome

    def _execute(
        self,
        strategy: Strategy,
        ciphertext: str,
        stream: bool,
        low: float,
        span: float,
    ) -> Generator[ProgressUpdate, None, tuple[DecryptionResult | None, StrategyRun]]:
        """Run one strategy, turning any exception into a skipped run."""
        started = time.monotonic()
        result: DecryptionResult | None = None
        error: str | None = None

        try:
            if stream and isinstance(strategy, SubstitutionSolver):
                result = yield from self._search_steps(strategy, ciphertext, low, span)
            else:
                result = strategy.solve(ciphertext)
        except Exception as exc:
            failure = StrategyExecutionError(strategy.name, str(exc))
            logger.warning("%s", failure.message, exc_info=True)
            error = failure.message

        if result is not None and result.error:
            error = result.error

        return result, StrategyRun(
            name=strategy.name,
            method=result.method if result is not None else None,
            confidence=result.confidence if result is not None else 0.0,
            elapsed_ms=(time.monotonic() - started) * 1000,
            error=error,
        )

    def _search_steps(
        self,
        strategy: SubstitutionSolver,
        ciphertext: str,
        low: float,
        span: float,
    ) -> Generator[ProgressUpdate, None, DecryptionResult]:
        """Stream a local search, then score its final key."""
        last = None
        reported = low
        for snapshot in strategy.steps(ciphertext):
            last = snapshot
            progress = low + span * snapshot.progress / 100
            if progress >= reported + span * 0.05:
                reported = progress
                yield ProgressUpdate(
                    stage="solving",
                    message=f"{snapshot.method} iteration {snapshot.iteration} score {snapshot.score:.3f}",
                    progress=progress,
                )

        if last is None or last.key is None:
            return strategy.solve(ciphertext)
        return strategy.finish(ciphertext, TextNormalizer.clean(ciphertext), last.key)

    # ========================================================================
    # Steps
    # ========================================================================

    def resolve_language(self, ciphertext: str, language: Language | str | None) -> Language:
        """Detect the language for "auto", otherwise coerce the request."""
        if isinstance(language, str) and language.lower() == AUTO:
            detection = LanguageDetector(self.registry, self.settings.language_detection).detect(ciphertext)
            logger.info("Detected language %s (%.2f)", detection.language.value, detection.confidence)
            return detection.language
        try:
            return self.registry.coerce(language)
        except ModelNotFoundError:
            fallback = self.registry.DEFAULT_LANGUAGE
            logger.warning("Unsupported language %r, using %s", language, fallback.value)
            return fallback

    def is_dominant(self, result: DecryptionResult, dictionary: DictionaryValidator) -> bool:
        """High confidence confirmed by word coverage or dictionary confidence."""
        settings = self.settings.orchestrator
        if result.confidence <= settings.early_exit_confidence:
            return False
        if result.word_coverage >= settings.verify_min_coverage:
            return True
        return dictionary.validate(result.plaintext).confidence >= settings.verify_min_dict_confidence

    def finish(
        self,
        ciphertext: str,
        results: list[DecryptionResult],
        classification: ClassificationResult,
        language: Language,
        dictionary: DictionaryValidator,
        use_dictionary: bool,
    ) -> AutoDecryptResult:
        """Aggregate, validate, or report that nothing worked."""
        aggregator = ResultAggregator(language, self.registry, self.settings.aggregator)
        aggregated = aggregator.aggregate(results, classification.top.type)

        if aggregated is None:
            logger.info("No strategy produced a usable result")
            return AutoDecryptResult(
                best=DecryptionResult(
                    plaintext=ciphertext,
                    method="none",
                    confidence=0.0,
                    score=self.settings.scoring.floor,
                    cipher_type=classification.top.type,
                    language=language,
                    error="No successful decryption",
                ),
                classification=classification,
                language=language,
            )

        best = aggregated.best
        if use_dictionary:
            best = ResultValidator(dictionary, self.settings.aggregator).choose(aggregated.ranked)

        return AutoDecryptResult(
            best=best,
            candidates=aggregated.ranked,
            classification=classification,
            language=language,
        )
