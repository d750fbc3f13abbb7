# Project aggregate and its owned value collections.
# JSON keys keep the dashboard's camelCase names (pjtNo, actualCost, ...).

import uuid
from dataclasses import dataclass, field
from typing import List

from .status_rules import ProjectStatus, compute_cost_ratio, non_negative, normalize_status, safe_number

MANAGER_ROLES = ("sales_managers", "design_managers", "control_managers", "production_managers")


def new_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex[:12]}"


def _text(v) -> str:
    return "" if v is None else str(v).strip()


def _names(v) -> list:
    """Trimmed, de-duplicated names from a list or a comma-separated string."""
    if isinstance(v, str):
        v = v.split(",")
    out = []
    for name in v or []:
        name = _text(name)
        if name and name not in out:
            out.append(name)
    return out


def _camel(snake: str) -> str:
    head, *rest = snake.split("_")
    return head + "".join(w.title() for w in rest)


@dataclass
class CostRecord:
    id: str
    date: str
    budget: float
    actual_cost: float
    note: str = ""
    manager: str = ""
    change_reason: str = ""

    def __post_init__(self):
        self.budget = non_negative(self.budget)
        self.actual_cost = non_negative(self.actual_cost)

    @property
    def cost_ratio(self) -> float:
        return compute_cost_ratio(self.budget, self.actual_cost)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "date": self.date,
            "budget": self.budget,
            "actualCost": self.actual_cost,
            "costRatio": self.cost_ratio,
            "note": self.note,
            "manager": self.manager,
            "changeReason": self.change_reason,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "CostRecord":
        return cls(
            id=_text(d.get("id")) or new_id("history"),
            date=_text(d.get("date")),
            budget=d.get("budget"),
            actual_cost=d.get("actualCost", d.get("actual_cost")),
            note=_text(d.get("note")),
            manager=_text(d.get("manager")),
            change_reason=_text(d.get("changeReason", d.get("change_reason"))),
        )


@dataclass
class ScheduleItem:
    id: str
    name: str
    start_date: str = ""
    end_date: str = ""
    progress: int = 0

    def __post_init__(self):
        self.progress = int(max(0, min(100, non_negative(self.progress))))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "startDate": self.start_date,
            "endDate": self.end_date,
            "progress": self.progress,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "ScheduleItem":
        return cls(
            id=_text(d.get("id")) or new_id("schedule"),
            name=_text(d.get("name")),
            start_date=_text(d.get("startDate", d.get("start_date"))),
            end_date=_text(d.get("endDate", d.get("end_date"))),
            progress=d.get("progress", 0),
        )


@dataclass
class EquipmentRecord:
    """One maintenance entry for the project's equipment."""

    id: str
    date: str
    part: str = ""
    content: str = ""
    action: str = ""
    manager: str = ""

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "date": self.date,
            "part": self.part,
            "content": self.content,
            "action": self.action,
            "manager": self.manager,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "EquipmentRecord":
        return cls(
            id=_text(d.get("id")) or new_id("equipment"),
            date=_text(d.get("date")),
            part=_text(d.get("part")),
            content=_text(d.get("content")),
            action=_text(d.get("action")),
            manager=_text(d.get("manager")),
        )


@dataclass
class Person:
    """A staffing record: someone assigned to the project."""

    id: str
    name: str
    affiliation: str = ""
    department: str = ""

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "affiliation": self.affiliation,
            "department": self.department,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "Person":
        return cls(
            id=_text(d.get("id")) or new_id("person"),
            name=_text(d.get("name")),
            affiliation=_text(d.get("affiliation")),
            department=_text(d.get("department")),
        )


@dataclass
class Project:
    id: str
    pjt_no: str
    name: str
    status: ProjectStatus = ProjectStatus.PLANNED
    pm: str = ""
    sales_managers: List[str] = field(default_factory=list)
    design_managers: List[str] = field(default_factory=list)
    control_managers: List[str] = field(default_factory=list)
    production_managers: List[str] = field(default_factory=list)
    progress: int = 0
    budget: float = 0
    actual_cost: float = 0
    start_date: str = ""
    end_date: str = ""
    note: str = ""
    lat: float = 0.0
    lng: float = 0.0
    country: str = ""
    city: str = ""
    address: str = ""
    cost_history: List[CostRecord] = field(default_factory=list)
    schedule_items: List[ScheduleItem] = field(default_factory=list)
    equipment_history: List[EquipmentRecord] = field(default_factory=list)
    people: List[Person] = field(default_factory=list)

    def __post_init__(self):
        self.status = normalize_status(self.status)
        self.budget = non_negative(self.budget)
        self.actual_cost = non_negative(self.actual_cost)
        self.progress = int(max(0, min(100, non_negative(self.progress))))
        self.lat = safe_number(self.lat)
        self.lng = safe_number(self.lng)
        for role in MANAGER_ROLES:
            setattr(self, role, _names(getattr(self, role)))

    @property
    def cost_ratio(self) -> float:
        return compute_cost_ratio(self.budget, self.actual_cost)

    def to_dict(self) -> dict:
        d = {
            "id": self.id,
            "pjtNo": self.pjt_no,
            "name": self.name,
            "status": self.status.value,
            "pm": self.pm,
        }
        d.update({_camel(role): list(getattr(self, role)) for role in MANAGER_ROLES})
        d.update({
            "progress": self.progress,
            "budget": self.budget,
            "actualCost": self.actual_cost,
            "costRatio": self.cost_ratio,
            "startDate": self.start_date,
            "endDate": self.end_date,
            "note": self.note,
            "lat": self.lat,
            "lng": self.lng,
            "country": self.country,
            "city": self.city,
            "address": self.address,
            "costHistory": [r.to_dict() for r in self.cost_history],
            "scheduleItems": [s.to_dict() for s in self.schedule_items],
            "equipmentHistory": [e.to_dict() for e in self.equipment_history],
            "people": [p.to_dict() for p in self.people],
        })
        return d

    @classmethod
    def from_dict(cls, d: dict) -> "Project":
        return cls(
            id=_text(d.get("id")) or new_id("project"),
            pjt_no=_text(d.get("pjtNo", d.get("pjt_no"))),
            name=_text(d.get("name")),
            status=d.get("status"),
            pm=_text(d.get("pm")),
            progress=d.get("progress", 0),
            budget=d.get("budget"),
            actual_cost=d.get("actualCost", d.get("actual_cost")),
            start_date=_text(d.get("startDate", d.get("start_date"))),
            end_date=_text(d.get("endDate", d.get("end_date"))),
            note=_text(d.get("note")),
            lat=d.get("lat"),
            lng=d.get("lng"),
            country=_text(d.get("country")),
            city=_text(d.get("city")),
            address=_text(d.get("address")),
            cost_history=[CostRecord.from_dict(r) for r in d.get("costHistory") or []],
            schedule_items=[ScheduleItem.from_dict(s) for s in d.get("scheduleItems") or []],
            equipment_history=[EquipmentRecord.from_dict(e) for e in d.get("equipmentHistory") or []],
            people=[Person.from_dict(p) for p in d.get("people") or []],
            **{role: d.get(_camel(role), d.get(role)) for role in MANAGER_ROLES},
        )
