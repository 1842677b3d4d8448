"""Release asset classification and selection."""

from .classifier import classify, classify_name
from .selector import filter_eligible, select_best

__all__ = ["classify", "classify_name", "filter_eligible", "select_best"]
