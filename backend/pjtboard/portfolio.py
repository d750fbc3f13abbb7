from collections import Counter

from .status_rules import (
    WARNING_RATIO,
    ProjectStatus,
    Severity,
    classify,
    latest_record,
    record_ratio,
)

SORT_FIELDS = ("pjtNo", "status", "costRatio")
SEARCH_FIELDS = ("pjt_no", "name", "country", "city", "pm")


def filter_projects(projects, query: str = "", status=None):
    q = (query or "").strip().lower()
    want = None if status in (None, "", "all") else str(getattr(status, "value", status))

    def ok(p) -> bool:
        ok_query = not q or any(q in (getattr(p, f, "") or "").lower() for f in SEARCH_FIELDS)
        ok_status = want is None or p.status.value == want
        return ok_query and ok_status

    return [p for p in projects if ok(p)]


def project_ratio(project) -> float:
    """Latest cost record's ratio; the budget/actual snapshot when there is no history."""
    latest = latest_record(project.cost_history)
    if latest is not None:
        return record_ratio(latest)
    return project.cost_ratio


def sort_projects(projects, field: str, descending: bool = False):
    if field == "pjtNo":
        key = lambda p: p.pjt_no  # noqa: E731
    elif field == "status":
        key = lambda p: list(ProjectStatus).index(p.status)  # noqa: E731
    elif field == "costRatio":
        key = project_ratio
    else:
        return list(projects)
    return sorted(projects, key=key, reverse=descending)


def calculate_stats(projects) -> dict:
    projects = list(projects)
    total_budget = sum(p.budget for p in projects)
    total_actual = sum(p.actual_cost for p in projects)
    ratios = [p.cost_ratio for p in projects]

    status_counts = {s.value: 0 for s in ProjectStatus}
    status_counts.update(Counter(p.status.value for p in projects))

    severity_counts = {s.value: 0 for s in Severity}
    severity_counts.update(Counter(classify(r).value for r in ratios))

    urgent = sum(
        1 for p, r in zip(projects, ratios)
        if p.status is ProjectStatus.ACTIVE_NEEDS_ATTENTION or r > WARNING_RATIO
    )

    return {
        "totalProjects": len(projects),
        "totalBudget": total_budget,
        "totalActualCost": total_actual,
        "avgCostRatio": sum(ratios) / len(ratios) if ratios else 0.0,
        "statusCounts": status_counts,
        "severityCounts": severity_counts,
        "urgentProjects": urgent,
        "budgetUtilization": (total_actual / total_budget) * 100 if total_budget > 0 else 0.0,
    }
