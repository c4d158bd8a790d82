"""
Cached build and test orchestration.
"""

from .cache import ResultCache, compute_key, decode_outcome, encode_outcome
from .orchestrator import BuildOrchestrator, BuildOutcome, only_error_message

__all__ = [
    "BuildOrchestrator",
    "BuildOutcome",
    "ResultCache",
    "compute_key",
    "decode_outcome",
    "encode_outcome",
    "only_error_message",
]
