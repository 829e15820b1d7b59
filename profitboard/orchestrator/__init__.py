from .calculation_runner import CalculationRunner
from .diff import compute_diff, summarize_diff
from .import_coordinator import ImportCoordinator, ImportStatus, ImportSummary
from .merge import apply_diff_decision, merge_inserts_only

__all__ = [
    "CalculationRunner",
    "compute_diff",
    "summarize_diff",
    "ImportCoordinator",
    "ImportStatus",
    "ImportSummary",
    "apply_diff_decision",
    "merge_inserts_only",
]
