"""Cross-posting engine"""

from .cross_posting_engine import CrossPostingEngine, RetryResult

__all__ = [
    "CrossPostingEngine",
    "RetryResult",
]
