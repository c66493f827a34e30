"""Address matching, schedule comparison and the reconciliation run built on them."""
from branchwatch.matchers.address_matcher import match_address
from branchwatch.matchers.schedule_comparator import compare_schedules
from branchwatch.matchers.reconcile_orchestrator import reconcile

__all__ = ["match_address", "compare_schedules", "reconcile"]
