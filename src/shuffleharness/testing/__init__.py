#
# src/shuffleharness/testing/__init__.py
#
"""
Helpers for writing tests against harness-managed processes.
"""
from .protocols import Trial, TrialResult
from .trials import percentile, run_trials
from .wait import try_wait_for

__all__ = [
    "Trial",
    "TrialResult",
    "percentile",
    "run_trials",
    "try_wait_for",
]

# 🔼⚙️
