from dataclasses import dataclass, field
from enum import Enum

from app.services.analysis.statistics import StatisticalAnalyzer


class PeriodicityRecommendation(str, Enum):
    """Verdict of the periodic analysis."""

    POLYALPHABETIC = "likely_polyalphabetic"
    MONOALPHABETIC = "likely_monoalphabetic"
    UNCLEAR = "unclear"


@dataclass
class PeriodStats:
    """
    Column IoC statistics for one period.

    All values are on the normalized (x26) scale of the language profiles'
    expected IoC, so the variance is 676 times the raw-IoC variance.
    """

    period: int
    mean_ic: float
    variance: float
    min_ic: float
    max_ic: float

    @property
    def spread(self) -> float:
        return self.max_ic - self.min_ic


@dataclass
class FriedmanEstimate:
    """Key lengths ranked by the periodic-IC Friedman test."""

    best_length: int | None
    confidence: float
    ranked: list[int] = field(default_factory=list)
    mean_ic: float = 0.0


@dataclass
class AutocorrelationPeak:
    shift: int
    rate: float
    prominence: float


@dataclass
class AutocorrelationResult:
    rates: dict[int, float] = field(default_factory=dict)
    peaks: list[AutocorrelationPeak] = field(default_factory=list)
    reinforced_period: int | None = None


@dataclass
class PeriodicAnalysis:
    """Combined periodic IC and autocorrelation verdict."""

    recommendation: PeriodicityRecommendation
    best_period: int | None
    confidence: float
    periods: list[PeriodStats] = field(default_factory=list)
    friedman: FriedmanEstimate | None = None
    autocorrelation: AutocorrelationResult | None = None


class PeriodicAnalyzer:
    """
    Detects periodic structure in ciphertext.

    Splitting the text into m columns (every m-th letter) isolates the
    alphabets of a period-m polyalphabetic cipher, so the column IoC
    climbs back to the language level at the true period and its
    multiples. Autocorrelation gives an independent view of the same
    period through coincidences at shifted offsets.
    """

    MIN_COLUMN_LENGTH = 3
    RANDOM_RATE = 1 / 26

    def __init__(self, max_period: int = 20, max_shift: int = 30, margin: float = 0.015):
        self.max_period = max_period
        self.max_shift = max_shift
        self.margin = margin

    @staticmethod
    def columns(text: str, period: int) -> list[str]:
        return [text[col::period] for col in range(period)]

    def periodic_ic(self, text: str, max_period: int | None = None) -> list[PeriodStats]:
        """
        Mean and variance of the normalized (x26) column IoC for each period.

        The normalized scale is the one ``friedman`` compares against the
        language target IoC.

        Periods whose columns would be shorter than three letters are skipped.
        """
        limit = min(max_period or self.max_period, len(text) // self.MIN_COLUMN_LENGTH)
        results = []

        for period in range(1, limit + 1):
            ics = [
                StatisticalAnalyzer.index_of_coincidence(col)
                for col in self.columns(text, period)
                if len(col) >= self.MIN_COLUMN_LENGTH
            ]
            if not ics:
                continue
            mean = sum(ics) / len(ics)
            variance = sum((ic - mean) ** 2 for ic in ics) / len(ics)
            results.append(
                PeriodStats(period=period, mean_ic=mean, variance=variance, min_ic=min(ics), max_ic=max(ics))
            )

        return results

    def friedman(self, text: str, target_ic: float, max_length: int | None = None) -> FriedmanEstimate:
        """
        Rank key lengths by closeness of the column IoC to the language.

        Score per period is |mean - target| + 0.5 * (max - min), lower is
        better. Among the best five, a shorter period is preferred when its
        score is within 5% of the best (10% when it divides the best).
        """
        limit = min(max_length or self.max_period, max(1, len(text) // 4))
        stats = [s for s in self.periodic_ic(text, limit) if s.period >= 2]
        if not stats:
            return FriedmanEstimate(best_length=None, confidence=0.0)

        def score(s: PeriodStats) -> float:
            return abs(s.mean_ic - target_ic) + 0.5 * s.spread

        ranked = sorted(stats, key=score)
        best = ranked[0]
        for candidate in ranked[1:5]:
            close = score(candidate) <= score(best) * 1.05
            divides = best.period % candidate.period == 0 and score(candidate) <= score(best) * 1.10
            if candidate.period < best.period and (close or divides):
                best = candidate
            elif score(candidate) < score(best):
                best = candidate

        # 1.0 is random, target_ic is plaintext
        span = target_ic - 1.0
        confidence = (best.mean_ic - 1.0) / span if span > 0 else 0.0

        order = [best.period] + [s.period for s in ranked if s.period != best.period]
        return FriedmanEstimate(
            best_length=best.period,
            confidence=max(0.0, min(1.0, confidence)),
            ranked=order,
            mean_ic=best.mean_ic,
        )

    def friedman_key_lengths(
        self,
        text: str,
        target_ic: float,
        max_length: int | None = None,
        top: int = 3,
    ) -> list[int]:
        return self.friedman(text, target_ic, max_length).ranked[:top]

    def autocorrelation(self, text: str) -> AutocorrelationResult:
        """
        Coincidence rate between the text and itself shifted by d letters.

        Peaks are local maxima above the random rate plus a margin. A peak
        whose shift is a near-integer multiple of a smaller peak reinforces
        that smaller shift as a period.
        """
        n = len(text)
        rates = {}
        for d in range(1, min(self.max_shift, n - 1) + 1):
            comparisons = n - d
            coincidences = sum(1 for i in range(comparisons) if text[i] == text[i + d])
            rates[d] = coincidences / comparisons

        threshold = self.RANDOM_RATE + self.margin
        peaks = []
        shifts = sorted(rates)
        for prev, curr, nxt in zip(shifts, shifts[1:], shifts[2:]):
            rate = rates[curr]
            if rate > rates[prev] and rate >= rates[nxt] and rate > threshold:
                peaks.append(
                    AutocorrelationPeak(
                        shift=curr,
                        rate=rate,
                        prominence=rate - min(rates[prev], rates[nxt]),
                    )
                )
        peaks.sort(key=lambda p: p.prominence, reverse=True)

        reinforced = None
        for base in sorted(p.shift for p in peaks):
            multiples = [
                p for p in peaks
                if p.shift > base and abs(p.shift / base - round(p.shift / base)) < 0.15
            ]
            if multiples:
                reinforced = base
                break

        return AutocorrelationResult(rates=rates, peaks=peaks, reinforced_period=reinforced)

    def analyze(
        self,
        text: str,
        target_ic: float,
        use_autocorrelation: bool = True,
    ) -> PeriodicAnalysis:
        """
        Decide whether the text looks periodic.

        The whole-text IoC (period 1) near the language level means a
        single alphabet. Otherwise a period whose columns recover most of
        the language IoC points to a polyalphabetic cipher.
        """
        periods = self.periodic_ic(text)
        if not periods:
            return PeriodicAnalysis(PeriodicityRecommendation.UNCLEAR, None, 0.0)

        span = max(target_ic - 1.0, 0.1)
        whole_ic = periods[0].mean_ic
        friedman = self.friedman(text, target_ic)
        autocorrelation = self.autocorrelation(text) if use_autocorrelation else None

        if whole_ic >= 1.0 + 0.75 * span:
            confidence = min(1.0, (whole_ic - 1.0) / span)
            return PeriodicAnalysis(
                PeriodicityRecommendation.MONOALPHABETIC,
                1,
                confidence,
                periods,
                friedman,
                autocorrelation,
            )

        best = friedman.best_length
        if best is not None and friedman.mean_ic >= 1.0 + 0.6 * span and friedman.mean_ic - whole_ic >= 0.2 * span:
            confidence = min(1.0, (friedman.mean_ic - whole_ic) / span)
            if autocorrelation and autocorrelation.reinforced_period:
                period = autocorrelation.reinforced_period
                if period % best == 0 or best % period == 0:
                    confidence = min(1.0, confidence + 0.2)
            return PeriodicAnalysis(
                PeriodicityRecommendation.POLYALPHABETIC,
                best,
                confidence,
                periods,
                friedman,
                autocorrelation,
            )

        return PeriodicAnalysis(
            PeriodicityRecommendation.UNCLEAR,
            best,
            0.0,
            periods,
            friedman,
            autocorrelation,
        )
