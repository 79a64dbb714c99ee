"""
Automatic cryptanalysis pipeline.

1. Classify the cipher family from statistical invariants
2. Select the attacks for that family
3. Run them under a time budget, stopping early on a dominant result
4. Aggregate, relabel and validate the winner
"""

from app.services.pipeline.aggregator import ResultAggregator, ResultValidator
from app.services.pipeline.classifier import CipherClassifier
from app.services.pipeline.orchestrator import DecryptionOrchestrator
from app.services.pipeline.selector import StrategySelector

__all__ = [
    "CipherClassifier",
    "DecryptionOrchestrator",
    "ResultAggregator",
    "ResultValidator",
    "StrategySelector",
]
