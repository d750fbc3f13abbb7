import math
import re
from datetime import date
from enum import Enum

import pandas as pd

from .timeline import parse_date

# Cost ratio thresholds (percent)
ATTENTION_RATIO = 70
WARNING_RATIO = 80
OVERRUN_RATIO = 100


class Severity(str, Enum):
    NORMAL = "Normal"
    NEEDS_ATTENTION = "NeedsAttention"
    WARNING = "Warning"
    CRITICAL = "Critical"

    @property
    def rank(self) -> int:
        return list(Severity).index(self)


class ProjectStatus(str, Enum):
    PLANNED = "Planned"
    ACTIVE = "Active"
    ACTIVE_NEEDS_ATTENTION = "ActiveNeedsAttention"
    ON_HOLD = "OnHold"
    COMPLETED = "Completed"


SEVERITY_COLORS = {
    Severity.NORMAL: "green",
    Severity.NEEDS_ATTENTION: "amber",
    Severity.WARNING: "red",
    Severity.CRITICAL: "red",
}
PLANNING_COLOR = "gray"

STATUS_COLORS = {
    ProjectStatus.PLANNED: "blue",
    ProjectStatus.ACTIVE: "green",
    ProjectStatus.ACTIVE_NEEDS_ATTENTION: "red",
    ProjectStatus.ON_HOLD: "amber",
    ProjectStatus.COMPLETED: "gray",
}

# Legacy labels seen in imported data (case/space-insensitive keys)
STATUS_ALIASES = {
    "planned": ProjectStatus.PLANNED,
    "planning": ProjectStatus.PLANNED,
    "계획": ProjectStatus.PLANNED,
    "active": ProjectStatus.ACTIVE,
    "진행 중": ProjectStatus.ACTIVE,
    "activeneedsattention": ProjectStatus.ACTIVE_NEEDS_ATTENTION,
    "active_management": ProjectStatus.ACTIVE_NEEDS_ATTENTION,
    "진행 중(관리필요)": ProjectStatus.ACTIVE_NEEDS_ATTENTION,
    "onhold": ProjectStatus.ON_HOLD,
    "on hold": ProjectStatus.ON_HOLD,
    "일시 중단": ProjectStatus.ON_HOLD,
    "completed": ProjectStatus.COMPLETED,
    "closed": ProjectStatus.COMPLETED,
    "완료": ProjectStatus.COMPLETED,
}

_NUMBER_NOISE = re.compile(r"[,\s₩$€%]")


def safe_number(value, default: float = 0) -> float:
    """
    Coerce any scalar to a finite float, falling back to `default`.
    Handles None, '', NaN, inf, numpy scalars, and numeric strings
    such as "1,200,000". Never raises.
    """
    if isinstance(value, bool):
        return default
    if isinstance(value, str):
        value = _NUMBER_NOISE.sub("", value)
        if not value:
            return default
    try:
        x = pd.to_numeric(value, errors="coerce")
        # 0-dim numpy value -> python scalar
        if hasattr(x, "item"):
            x = x.item()
        x = float(x)
    except Exception:
        return default
    return x if math.isfinite(x) else default


def non_negative(value, default: float = 0) -> float:
    x = safe_number(value, default)
    return x if x >= 0 else 0


def compute_cost_ratio(budget, actual_cost) -> float:
    """actual_cost / budget * 100, or 0 when there is no budget. Not rounded."""
    budget = safe_number(budget)
    actual_cost = safe_number(actual_cost)
    if budget <= 0:
        return 0.0
    return (actual_cost / budget) * 100


def classify(ratio) -> Severity:
    ratio = safe_number(ratio)
    if ratio <= 0:
        return Severity.NORMAL
    if ratio < ATTENTION_RATIO:
        return Severity.NORMAL
    if ratio < WARNING_RATIO:
        return Severity.NEEDS_ATTENTION
    if ratio <= OVERRUN_RATIO:
        return Severity.WARNING
    return Severity.CRITICAL


def derive_project_status(ratio) -> ProjectStatus:
    """
    Advisory status for a cost ratio. Every tier above NORMAL maps to
    ACTIVE_NEEDS_ATTENTION; PLANNED is decided by the caller from whether any
    cost record exists (see suggest_status).
    """
    if classify(ratio) is Severity.NORMAL:
        return ProjectStatus.ACTIVE
    return ProjectStatus.ACTIVE_NEEDS_ATTENTION


def _record_field(record, name: str, attr: str):
    if isinstance(record, dict):
        return record.get(name, record.get(attr))
    return getattr(record, attr, None)


def _record_date(record) -> date:
    return parse_date(_record_field(record, "date", "date")) or date.min


def latest_record(history):
    """
    Record with the greatest date; on equal dates the one appended last wins.
    Accepts CostRecord objects or their dict form. Empty history -> None.
    """
    best = None
    best_key = None
    for idx, record in enumerate(history or []):
        key = (_record_date(record), idx)
        if best_key is None or key > best_key:
            best, best_key = record, key
    return best


def record_ratio(record) -> float:
    return compute_cost_ratio(
        _record_field(record, "budget", "budget"),
        _record_field(record, "actualCost", "actual_cost"),
    )


def suggest_status(history) -> ProjectStatus:
    latest = latest_record(history)
    if latest is None:
        return ProjectStatus.PLANNED
    return derive_project_status(record_ratio(latest))


def normalize_status(label, strict: bool = False):
    """
    Map a stored or legacy label onto ProjectStatus. Unknown labels fall back
    to PLANNED, or return None when strict is set.
    """
    if isinstance(label, ProjectStatus):
        return label
    key = re.sub(r"\s+", " ", str(label or "")).strip()
    try:
        return ProjectStatus(key)
    except ValueError:
        pass
    return STATUS_ALIASES.get(key.lower(), None if strict else ProjectStatus.PLANNED)


def cost_ratio_display(budget, actual_cost) -> dict:
    """Badge data for a budget/actual pair: ratio, rounded ratio, severity, label, color."""
    ratio = compute_cost_ratio(budget, actual_cost)
    severity = classify(ratio)
    planning = ratio <= 0
    return {
        "ratio": ratio,
        "rounded": round(ratio, 1),
        "severity": severity.value,
        "label": "Planning" if planning else severity.value,
        "color": PLANNING_COLOR if planning else SEVERITY_COLORS[severity],
    }
